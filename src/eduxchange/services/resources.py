"""Resource record manager.

Builds resource rows from form state, uploads attachments to the object
store, and provides the create, update, delete, list and detail operations
together with the view and download counters.

Conventions:
    - Lookups return None (or False) when nothing matches.
    - Mutations return ``(result, error_message)`` where the message is safe
      to show to the user.
    - Backend failures are logged here and surfaced as a generic message.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, TypedDict

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from eduxchange.constants.resource_types import (
    ResourceType,
    parse_resource_type,
    requires_file,
    requires_link,
)
from eduxchange.data.db import get_session
from eduxchange.data.models import Resource
from eduxchange.services.resource_form import (
    ResourceFormData,
    UploadedFile,
    clean_optional,
    normalize_tags,
    validate_edit_form,
    validate_resource_form,
)
from eduxchange.services.storage import (
    RESOURCES_BUCKET,
    ObjectStore,
    StorageError,
    discard_object,
    get_object_store,
    guess_mime_type,
    upload_with_generated_path,
)

logger = logging.getLogger(__name__)

__all__ = [
    "RESOURCE_NOT_FOUND",
    "ResourceUpdateData",
    "count_resources",
    "create_resource",
    "delete_resource",
    "get_dashboard_stats",
    "get_owned_resource",
    "get_resource",
    "list_resources",
    "record_download",
    "record_view",
    "update_resource",
]

RESOURCE_NOT_FOUND = "Resource not found"
CREATE_FAILED = "Failed to upload resource"
UPDATE_FAILED = "Failed to update resource"
RECENT_RESOURCES_LIMIT = 5

# Fields the edit form may change; resource_type is immutable.
_EDITABLE_FIELDS = (
    "title",
    "description",
    "subject",
    "course_code",
    "external_link",
    "is_public",
    "tags",
)


class ResourceUpdateData(TypedDict, total=False):
    """TypedDict for resource edits; only present keys are applied."""

    title: str
    description: str | None
    subject: str | None
    course_code: str | None
    external_link: str | None
    is_public: bool
    tags: list[str] | None


def _resource_to_dict(resource: Resource) -> dict[str, Any]:
    """Convert a Resource model to a dictionary."""
    return {
        "id": resource.id,
        "user_id": resource.user_id,
        "title": resource.title,
        "description": resource.description,
        "resource_type": resource.resource_type,
        "subject": resource.subject,
        "course_code": resource.course_code,
        "file_url": resource.file_url,
        "file_name": resource.file_name,
        "file_size": resource.file_size,
        "mime_type": resource.mime_type,
        "storage_path": resource.storage_path,
        "external_link": resource.external_link,
        "download_count": resource.download_count,
        "view_count": resource.view_count,
        "is_public": resource.is_public,
        "tags": list(resource.tags) if resource.tags else None,
        "created_at": resource.created_at,
        "updated_at": resource.updated_at,
    }


def _get_owned(session: Session, user_id: str, resource_id: str) -> Resource | None:
    """Get a resource by ID, ensuring it belongs to the user."""
    return (
        session.query(Resource)
        .filter(Resource.id == resource_id, Resource.user_id == user_id)
        .first()
    )


def _is_visible(resource: Resource, viewer_id: str | None) -> bool:
    return resource.is_public or (viewer_id is not None and resource.user_id == viewer_id)


def create_resource(
    user_id: str,
    form: ResourceFormData,
    upload: UploadedFile | None = None,
    *,
    store: ObjectStore | None = None,
) -> tuple[dict[str, Any] | None, str | None]:
    """Validate the form, upload the attachment and insert the resource.

    If the insert fails after the attachment was stored, the blob is removed
    again so no orphaned file is left behind.

    Args:
        user_id: Owner of the new resource.
        form: Submitted form fields.
        upload: Attached file, if any.
        store: Object store override; defaults to the configured one.

    Returns:
        Tuple of (created resource, error message). On success, error is None.
    """
    validation_error = validate_resource_form(form, upload)
    if validation_error:
        logger.warning("Validation failed for new resource: %s", validation_error)
        return None, validation_error

    resource_type = ResourceType(form.resource_type.strip().lower())
    external_link = None if requires_file(resource_type) else clean_optional(form.external_link)
    if requires_link(resource_type) or upload is None or upload.size == 0:
        upload = None

    storage_path = None
    file_fields: dict[str, Any] = {
        "file_url": None,
        "file_name": None,
        "file_size": None,
        "mime_type": None,
    }

    if upload is not None:
        try:
            store = store or get_object_store()
            mime_type = guess_mime_type(upload.filename, upload.content_type)
            storage_path = upload_with_generated_path(
                store,
                RESOURCES_BUCKET,
                user_id,
                filename=upload.filename,
                data=upload.data,
                content_type=mime_type,
            )
            file_fields = {
                "file_url": store.get_public_url(RESOURCES_BUCKET, storage_path),
                "file_name": upload.filename,
                "file_size": upload.size,
                "mime_type": mime_type,
            }
        except StorageError:
            logger.exception("Failed to store attachment for user %s", user_id)
            if storage_path is not None:
                discard_object(store, RESOURCES_BUCKET, storage_path)
            return None, CREATE_FAILED

    tags = normalize_tags(form.tags)
    now = datetime.now(UTC)
    try:
        with get_session() as session:
            resource = Resource(
                user_id=user_id,
                title=form.title.strip(),
                description=clean_optional(form.description),
                resource_type=resource_type.value,
                subject=clean_optional(form.subject),
                course_code=clean_optional(form.course_code),
                storage_path=storage_path,
                external_link=external_link,
                is_public=form.is_public,
                tags=tags or None,
                download_count=0,
                view_count=0,
                created_at=now,
                updated_at=now,
                **file_fields,
            )
            session.add(resource)
            session.flush()
            created = _resource_to_dict(resource)
    except Exception:
        logger.exception("Failed to insert resource for user %s", user_id)
        if storage_path is not None:
            discard_object(store, RESOURCES_BUCKET, storage_path)
        return None, CREATE_FAILED

    logger.info("Created %s resource %s for user %s", resource_type.value, created["id"], user_id)
    return created, None


def update_resource(
    user_id: str, resource_id: str, changes: ResourceUpdateData
) -> tuple[dict[str, Any] | None, str | None]:
    """Apply an edit to a resource owned by the user.

    The resource type and attachment are never changed; ``updated_at`` is
    refreshed on every successful edit.

    Returns:
        Tuple of (updated resource, error message). A missing resource
        yields RESOURCE_NOT_FOUND as the message.
    """
    try:
        with get_session() as session:
            resource = _get_owned(session, user_id, resource_id)
            if resource is None:
                return None, RESOURCE_NOT_FOUND

            resource_type = ResourceType(resource.resource_type)
            values = {f: changes[f] for f in _EDITABLE_FIELDS if f in changes}
            if "title" in values:
                values["title"] = (values["title"] or "").strip()
            for name in ("description", "subject", "course_code", "external_link"):
                if name in values:
                    values[name] = clean_optional(values[name])
            if "tags" in values:
                values["tags"] = normalize_tags(values["tags"])
            if requires_file(resource_type):
                values.pop("external_link", None)

            validation_error = validate_edit_form(
                resource_type,
                title=values.get("title", resource.title),
                external_link=values.get("external_link", resource.external_link),
                tags=values.get("tags", resource.tags),
                has_file=resource.file_url is not None,
            )
            if validation_error:
                logger.warning(
                    "Validation failed for resource %s update: %s", resource_id, validation_error
                )
                return None, validation_error

            for name, value in values.items():
                if name == "tags":
                    value = value or None
                setattr(resource, name, value)
            resource.updated_at = datetime.now(UTC)
            session.flush()
            return _resource_to_dict(resource), None

    except Exception:
        logger.exception("Failed to update resource %s for user %s", resource_id, user_id)
        return None, UPDATE_FAILED


def delete_resource(user_id: str, resource_id: str, *, store: ObjectStore | None = None) -> bool:
    """Delete a resource owned by the user, then remove its stored file.

    Returns:
        True if the row was deleted, False if missing or on failure.
    """
    try:
        with get_session() as session:
            resource = _get_owned(session, user_id, resource_id)
            if resource is None:
                return False
            storage_path = resource.storage_path
            session.delete(resource)
    except Exception:
        logger.exception("Failed to delete resource %s for user %s", resource_id, user_id)
        return False

    logger.info("Deleted resource %s for user %s", resource_id, user_id)
    if storage_path:
        try:
            discard_object(store or get_object_store(), RESOURCES_BUCKET, storage_path)
        except StorageError:
            logger.exception("Object store unavailable while deleting %s", storage_path)
    return True


def list_resources(
    user_id: str, resource_type: str | None = None, limit: int | None = None
) -> list[dict[str, Any]] | None:
    """List the user's resources, newest first, optionally filtered by type.

    Args:
        user_id: Owner whose resources to list.
        resource_type: Single type to filter on; None lists every type.
        limit: Maximum number of rows to return.

    Returns:
        List of resource dictionaries, or None if the filter is not a
        known type or the query failed.
    """
    type_filter = None
    if resource_type:
        type_filter = parse_resource_type(resource_type)
        if type_filter is None:
            return None

    try:
        with get_session() as session:
            query = session.query(Resource).filter(Resource.user_id == user_id)
            if type_filter is not None:
                query = query.filter(Resource.resource_type == type_filter.value)
            query = query.order_by(Resource.created_at.desc(), Resource.id)
            if limit is not None:
                query = query.limit(limit)
            return [_resource_to_dict(r) for r in query.all()]

    except Exception:
        logger.exception("Failed to list resources for user %s", user_id)
        return None


def get_owned_resource(user_id: str, resource_id: str) -> dict[str, Any] | None:
    """Get a resource for editing; only the owner may load it."""
    try:
        with get_session() as session:
            resource = _get_owned(session, user_id, resource_id)
            return _resource_to_dict(resource) if resource else None
    except Exception:
        logger.exception("Failed to load resource %s for user %s", resource_id, user_id)
        return None


def get_resource(resource_id: str, viewer_id: str | None = None) -> dict[str, Any] | None:
    """Get a resource without touching its counters.

    Private resources are only returned to their owner.
    """
    try:
        with get_session() as session:
            resource = session.get(Resource, resource_id)
            if resource is None or not _is_visible(resource, viewer_id):
                return None
            return _resource_to_dict(resource)
    except Exception:
        logger.exception("Failed to load resource %s", resource_id)
        return None


def _increment_counter(
    resource_id: str, viewer_id: str | None, column: str
) -> dict[str, Any] | None:
    """Atomically add one to a counter column and return the refreshed row."""
    counter = getattr(Resource, column)
    try:
        with get_session() as session:
            resource = session.get(Resource, resource_id)
            if resource is None or not _is_visible(resource, viewer_id):
                return None
            session.execute(
                update(Resource)
                .where(Resource.id == resource_id)
                .values({counter: counter + 1, Resource.updated_at: Resource.updated_at}),
                execution_options={"synchronize_session": False},
            )
            session.refresh(resource)
            return _resource_to_dict(resource)
    except Exception:
        logger.exception("Failed to increment %s for resource %s", column, resource_id)
        return None


def record_view(resource_id: str, viewer_id: str | None = None) -> dict[str, Any] | None:
    """Load a resource for its detail page and count the view.

    Every load counts, including repeat visits by the owner.
    """
    return _increment_counter(resource_id, viewer_id, "view_count")


def record_download(resource_id: str, viewer_id: str | None = None) -> dict[str, Any] | None:
    """Count a download of a resource that has an attached file."""
    resource = get_resource(resource_id, viewer_id)
    if resource is None or not resource["file_url"]:
        return None
    return _increment_counter(resource_id, viewer_id, "download_count")


def count_resources(user_id: str) -> int:
    """Return how many resources the user owns."""
    try:
        with get_session() as session:
            return (
                session.query(func.count(Resource.id)).filter(Resource.user_id == user_id).scalar()
                or 0
            )
    except Exception:
        logger.exception("Failed to count resources for user %s", user_id)
        return 0


def get_dashboard_stats(user_id: str) -> dict[str, Any] | None:
    """Return totals and the most recent resources for the dashboard."""
    try:
        with get_session() as session:
            total, views, downloads = (
                session.query(
                    func.count(Resource.id),
                    func.coalesce(func.sum(Resource.view_count), 0),
                    func.coalesce(func.sum(Resource.download_count), 0),
                )
                .filter(Resource.user_id == user_id)
                .one()
            )
    except Exception:
        logger.exception("Failed to compute dashboard stats for user %s", user_id)
        return None

    recent = list_resources(user_id, limit=RECENT_RESOURCES_LIMIT) or []
    return {
        "total_resources": int(total),
        "total_views": int(views),
        "total_downloads": int(downloads),
        "recent_resources": recent,
    }
