"""Object store for uploaded files (resource attachments and avatars).

Two backends share the ``ObjectStore`` interface:

- ``LocalObjectStore`` keeps blobs under a directory on disk and serves them
  through the ``/files`` route of the API.
- ``SupabaseObjectStore`` delegates to Supabase Storage buckets.

The backend is chosen by ``EDUXCHANGE_STORAGE_BACKEND``.
"""

from __future__ import annotations

import logging
import mimetypes
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Any

from eduxchange.config import (
    STORAGE_BACKEND_LOCAL,
    STORAGE_BACKEND_SUPABASE,
    get_public_base_url,
    get_storage_backend,
    get_storage_root,
    get_supabase_credentials,
)

logger = logging.getLogger(__name__)

RESOURCES_BUCKET = "resources"
AVATARS_BUCKET = "avatars"
BUCKETS = (RESOURCES_BUCKET, AVATARS_BUCKET)

DEFAULT_EXTENSION = "bin"
DEFAULT_MIME_TYPE = "application/octet-stream"
_MAX_PATH_ATTEMPTS = 5


class StorageError(Exception):
    """Raised when the object store rejects or fails an operation."""


class ObjectExistsError(StorageError):
    """Raised when an upload targets a path that is already taken."""


def get_file_extension(filename: str | None) -> str:
    """Return the lower-cased extension of ``filename`` without the dot."""
    suffix = PurePosixPath(filename or "").suffix
    return suffix[1:].lower() if len(suffix) > 1 else DEFAULT_EXTENSION


def build_storage_path(user_id: str, filename: str | None, now: datetime | None = None) -> str:
    """Return the object key ``{user_id}/{epoch_ms}.{extension}`` for an upload."""
    moment = now or datetime.now(UTC)
    timestamp_ms = int(moment.timestamp() * 1000)
    return f"{user_id}/{timestamp_ms}.{get_file_extension(filename)}"


def guess_mime_type(filename: str | None, content_type: str | None = None) -> str:
    """Prefer the client-supplied content type, then the file name, then a default."""
    if content_type:
        return content_type
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or DEFAULT_MIME_TYPE


def _validate_key(bucket: str, path: str) -> PurePosixPath:
    if bucket not in BUCKETS:
        raise StorageError(f"Unknown bucket: {bucket}")
    key = PurePosixPath(path)
    if not path or key.is_absolute() or ".." in key.parts:
        raise StorageError(f"Invalid object path: {path!r}")
    return key


class ObjectStore(ABC):
    """Interface for blob storage addressed by bucket and path."""

    @abstractmethod
    def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        """Store ``data`` at ``path`` and return the stored path."""

    @abstractmethod
    def get_public_url(self, bucket: str, path: str) -> str:
        """Return a URL from which the object can be fetched."""

    @abstractmethod
    def remove(self, bucket: str, path: str) -> bool:
        """Delete an object. Returns False if it did not exist."""


class LocalObjectStore(ObjectStore):
    """Blobs stored as plain files under ``root/<bucket>/<path>``."""

    def __init__(self, root: Path, public_base_url: str = "") -> None:
        self.root = root
        self.public_base_url = public_base_url.rstrip("/")

    def resolve(self, bucket: str, path: str) -> Path:
        """Return the on-disk location of an object."""
        key = _validate_key(bucket, path)
        return self.root / bucket / Path(*key.parts)

    def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        target = self.resolve(bucket, path)
        if target.exists():
            raise ObjectExistsError(f"Object already exists: {bucket}/{path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write {bucket}/{path}") from exc
        logger.debug("Stored %d bytes at %s/%s", len(data), bucket, path)
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        _validate_key(bucket, path)
        return f"{self.public_base_url}/files/{bucket}/{path}"

    def remove(self, bucket: str, path: str) -> bool:
        target = self.resolve(bucket, path)
        if not target.exists():
            return False
        try:
            target.unlink()
        except OSError as exc:
            raise StorageError(f"Failed to remove {bucket}/{path}") from exc
        return True


class SupabaseObjectStore(ObjectStore):
    """Blobs stored in Supabase Storage buckets of the same names."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        _validate_key(bucket, path)
        try:
            self.client.storage.from_(bucket).upload(
                path=path,
                file=data,
                file_options={"content-type": content_type or DEFAULT_MIME_TYPE},
            )
        except Exception as exc:
            raise StorageError(f"Failed to upload {bucket}/{path}") from exc
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        _validate_key(bucket, path)
        return self.client.storage.from_(bucket).get_public_url(path)

    def remove(self, bucket: str, path: str) -> bool:
        _validate_key(bucket, path)
        try:
            removed = self.client.storage.from_(bucket).remove([path])
        except Exception as exc:
            raise StorageError(f"Failed to remove {bucket}/{path}") from exc
        return bool(removed)


def upload_with_generated_path(
    store: ObjectStore,
    bucket: str,
    user_id: str,
    *,
    filename: str | None,
    data: bytes,
    content_type: str | None,
) -> str:
    """Upload under a fresh ``{user_id}/{epoch_ms}.{ext}`` key and return the key.

    Keys already taken within the same millisecond are skipped by stepping
    the timestamp forward.
    """
    moment = datetime.now(UTC)
    for attempt in range(_MAX_PATH_ATTEMPTS):
        path = build_storage_path(user_id, filename, moment + timedelta(milliseconds=attempt))
        try:
            return store.upload(bucket, path, data, content_type)
        except ObjectExistsError:
            logger.debug("Storage path %s/%s already taken", bucket, path)
    raise StorageError(f"Could not allocate a storage path for user {user_id}")


def discard_object(store: ObjectStore, bucket: str, path: str) -> None:
    """Remove an object, logging instead of raising when the store fails."""
    try:
        store.remove(bucket, path)
    except StorageError:
        logger.exception("Failed to remove stored file %s/%s", bucket, path)


@lru_cache(maxsize=4)
def _supabase_client(url: str, key: str) -> Any:
    from supabase import create_client

    return create_client(url, key)


def get_object_store() -> ObjectStore:
    """Return the object store selected by configuration."""
    backend = get_storage_backend()
    if backend == STORAGE_BACKEND_LOCAL:
        return LocalObjectStore(get_storage_root(), get_public_base_url())
    if backend == STORAGE_BACKEND_SUPABASE:
        credentials = get_supabase_credentials()
        if credentials is None:
            raise StorageError("SUPABASE_URL and SUPABASE_KEY must be set for supabase storage")
        return SupabaseObjectStore(_supabase_client(*credentials))
    raise StorageError(f"Unknown storage backend: {backend}")
