"""Resource CRUD, view counting and download routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    Response,
    UploadFile,
    status,
)
from fastapi.responses import RedirectResponse

from eduxchange.api.dependencies import get_current_user, get_optional_user
from eduxchange.api.schemas.resources import ResourceResponse, ResourceUpdateRequest
from eduxchange.constants.resource_types import ResourceType
from eduxchange.services.auth import CurrentUser
from eduxchange.services.resource_form import ResourceFormData, UploadedFile
from eduxchange.services.resources import (
    RESOURCE_NOT_FOUND,
    create_resource,
    delete_resource,
    list_resources,
    record_download,
    record_view,
    update_resource,
)

router = APIRouter(prefix="/resources", tags=["resources"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=RESOURCE_NOT_FOUND)


@router.get("", response_model=list[ResourceResponse])
def get_resources(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    resource_type: Annotated[str | None, Query(alias="type")] = None,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[ResourceResponse]:
    """List the current user's resources, newest first."""
    resources = list_resources(current_user["id"], resource_type, limit)
    if resources is None:
        if resource_type:
            allowed = ", ".join(t.value for t in ResourceType)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unknown resource type '{resource_type}'. Expected one of: {allowed}",
            )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load resources",
        )
    return [ResourceResponse(**r) for r in resources]


@router.post(
    "",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Validation or upload failed"}},
)
async def post_resource(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    title: Annotated[str, Form()] = "",
    resource_type: Annotated[str, Form()] = ResourceType.PDF.value,
    description: Annotated[str, Form()] = "",
    subject: Annotated[str, Form()] = "",
    course_code: Annotated[str, Form()] = "",
    external_link: Annotated[str, Form()] = "",
    is_public: Annotated[bool, Form()] = True,
    tags: Annotated[list[str] | None, Form()] = None,
    file: Annotated[UploadFile | None, File(description="Attachment")] = None,
) -> ResourceResponse:
    """Create a resource from a multipart form with an optional file."""
    upload = None
    if file is not None and file.filename:
        upload = UploadedFile(
            filename=file.filename,
            content_type=file.content_type,
            data=await file.read(),
        )

    form = ResourceFormData(
        title=title,
        resource_type=resource_type,
        description=description,
        subject=subject,
        course_code=course_code,
        external_link=external_link,
        is_public=is_public,
        tags=tags or [],
    )
    created, error = create_resource(current_user["id"], form, upload)
    if created is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error or "Failed to upload resource",
        )
    return ResourceResponse(**created)


@router.get("/{resource_id}", response_model=ResourceResponse)
def get_resource_detail(
    resource_id: str,
    viewer: Annotated[CurrentUser | None, Depends(get_optional_user)],
) -> ResourceResponse:
    """Get a resource and count the view."""
    resource = record_view(resource_id, viewer["id"] if viewer else None)
    if resource is None:
        raise _not_found()
    return ResourceResponse(**resource)


@router.patch("/{resource_id}", response_model=ResourceResponse)
def patch_resource(
    resource_id: str,
    data: ResourceUpdateRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ResourceResponse:
    """Edit a resource owned by the current user.

    The resource type and attached file cannot be changed.
    """
    changes = data.model_dump(exclude_unset=True)
    if changes.get("is_public", False) is None:
        del changes["is_public"]

    updated, error = update_resource(current_user["id"], resource_id, changes)
    if updated is None:
        if error == RESOURCE_NOT_FOUND:
            raise _not_found()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error or "Failed to update resource",
        )
    return ResourceResponse(**updated)


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_resource(
    resource_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> Response:
    """Delete a resource owned by the current user and its stored file."""
    if not delete_resource(current_user["id"], resource_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{resource_id}/download", response_class=RedirectResponse)
def download_resource(
    resource_id: str,
    viewer: Annotated[CurrentUser | None, Depends(get_optional_user)],
) -> RedirectResponse:
    """Count a download and redirect to the stored file."""
    resource = record_download(resource_id, viewer["id"] if viewer else None)
    if resource is None:
        raise _not_found()
    return RedirectResponse(resource["file_url"], status_code=status.HTTP_302_FOUND)
