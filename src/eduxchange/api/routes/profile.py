"""Profile routes for the signed-in user."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from eduxchange.api.dependencies import get_current_user
from eduxchange.api.schemas.profiles import AvatarResponse, ProfileResponse, ProfileUpdateRequest
from eduxchange.services.auth import CurrentUser
from eduxchange.services.profile import get_profile, set_avatar, upsert_profile
from eduxchange.services.resources import count_resources

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def read_profile(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProfileResponse:
    """Get the current user's profile with their resource count."""
    profile = get_profile(current_user["id"])
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return ProfileResponse(**profile, resource_count=count_resources(current_user["id"]))


@router.put("", response_model=ProfileResponse)
def save_profile(
    data: ProfileUpdateRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ProfileResponse:
    """Create or update the current user's profile."""
    profile, error = upsert_profile(current_user["id"], data.model_dump(exclude_unset=True))
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error or "Failed to update profile",
        )
    return ProfileResponse(**profile, resource_count=count_resources(current_user["id"]))


@router.put(
    "/avatar",
    response_model=AvatarResponse,
    responses={400: {"description": "Invalid avatar upload"}},
)
async def upload_avatar(
    file: Annotated[UploadFile, File(description="Avatar image file")],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> AvatarResponse:
    """Upload a new avatar image."""
    data = await file.read()
    avatar_url, error = set_avatar(
        current_user["id"],
        filename=file.filename,
        content_type=file.content_type,
        data=data,
    )
    if avatar_url is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error or "Failed to upload avatar",
        )
    return AvatarResponse(avatar_url=avatar_url)
