"""Serve blobs written by the local-disk object store."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from eduxchange.config import STORAGE_BACKEND_LOCAL, get_storage_backend, get_storage_root
from eduxchange.services.storage import LocalObjectStore, StorageError, guess_mime_type

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{bucket}/{path:path}", response_class=FileResponse)
def get_file(bucket: str, path: str) -> FileResponse:
    """Return a stored object, or 404 if it does not exist."""
    if get_storage_backend() != STORAGE_BACKEND_LOCAL:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")

    store = LocalObjectStore(get_storage_root())
    try:
        target = store.resolve(bucket, path)
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found") from exc

    if not target.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(target, media_type=guess_mime_type(target.name))
