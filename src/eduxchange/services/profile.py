"""Profile service for reading and editing a student's profile.

Profiles are created at sign-up with only the id and full name; this
service fills in the rest through the profile form and avatar upload.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, TypedDict

from eduxchange.constants.profile_options import YEAR_OF_STUDY_OPTIONS
from eduxchange.data.db import get_session
from eduxchange.data.models import Profile, User
from eduxchange.services.resource_form import clean_optional
from eduxchange.services.storage import (
    AVATARS_BUCKET,
    ObjectStore,
    StorageError,
    discard_object,
    get_object_store,
    guess_mime_type,
    upload_with_generated_path,
)

logger = logging.getLogger(__name__)

__all__ = [
    "MAX_AVATAR_BYTES",
    "ProfileData",
    "get_profile",
    "set_avatar",
    "upsert_profile",
]

MAX_AVATAR_BYTES = 2 * 1024 * 1024
PROFILE_UPDATE_FAILED = "Failed to update profile"
AVATAR_UPLOAD_FAILED = "Failed to upload avatar"

# Fields that can be updated on Profile
_PROFILE_FIELDS = (
    "full_name",
    "university",
    "department",
    "year_of_study",
    "bio",
)
_YEAR_VALUES = frozenset(value for value, _ in YEAR_OF_STUDY_OPTIONS)


class ProfileData(TypedDict, total=False):
    """TypedDict for profile form data."""

    full_name: str | None
    university: str | None
    department: str | None
    year_of_study: str | None
    bio: str | None


def _profile_to_dict(profile: Profile) -> dict[str, Any]:
    """Convert a Profile model to a dictionary."""
    return {
        "id": profile.id,
        "full_name": profile.full_name,
        "university": profile.university,
        "department": profile.department,
        "year_of_study": profile.year_of_study,
        "bio": profile.bio,
        "avatar_url": profile.avatar_url,
        "created_at": profile.created_at,
        "updated_at": profile.updated_at,
    }


def get_profile(user_id: str) -> dict[str, Any] | None:
    """Get a user's profile, or None if it does not exist."""
    try:
        with get_session() as session:
            profile = session.get(Profile, user_id)
            return _profile_to_dict(profile) if profile else None
    except Exception:
        logger.exception("Failed to get profile for %s", user_id)
        return None


def upsert_profile(
    user_id: str, profile_data: ProfileData
) -> tuple[dict[str, Any] | None, str | None]:
    """Create or update the user's profile in a single transaction.

    Blank text fields are stored as None.

    Returns:
        Tuple of (profile, error message). On success, error is None.
    """
    cleaned = {f: clean_optional(profile_data[f]) for f in _PROFILE_FIELDS if f in profile_data}
    year = cleaned.get("year_of_study")
    if year is not None and year not in _YEAR_VALUES:
        return None, "Please choose a valid year of study"

    try:
        with get_session() as session:
            if session.get(User, user_id) is None:
                return None, "User not found"

            profile = session.get(Profile, user_id)
            if profile is None:
                profile = Profile(id=user_id)
                session.add(profile)

            for field, value in cleaned.items():
                setattr(profile, field, value)
            profile.updated_at = datetime.now(UTC)
            session.flush()
            return _profile_to_dict(profile), None

    except Exception:
        logger.exception("Failed to upsert profile for %s", user_id)
        return None, PROFILE_UPDATE_FAILED


def set_avatar(
    user_id: str,
    *,
    filename: str | None,
    content_type: str | None,
    data: bytes,
    store: ObjectStore | None = None,
) -> tuple[str | None, str | None]:
    """Upload a new avatar image and point the profile at it.

    The previous avatar is removed once the profile is saved. If saving fails,
    the new upload is removed instead.

    Returns:
        Tuple of (avatar URL, error message). On success, error is None.
    """
    mime_type = guess_mime_type(filename, content_type)
    if not data:
        return None, "Please select an image"
    if not mime_type.startswith("image/"):
        return None, "Avatar must be an image"
    if len(data) > MAX_AVATAR_BYTES:
        return None, "Avatar image is too large"
    if get_profile(user_id) is None:
        return None, "Profile not found"

    path = None
    try:
        store = store or get_object_store()
        path = upload_with_generated_path(
            store,
            AVATARS_BUCKET,
            user_id,
            filename=filename,
            data=data,
            content_type=mime_type,
        )
        avatar_url = store.get_public_url(AVATARS_BUCKET, path)
    except StorageError:
        logger.exception("Failed to store avatar for %s", user_id)
        if path is not None:
            discard_object(store, AVATARS_BUCKET, path)
        return None, AVATAR_UPLOAD_FAILED

    previous_path = None
    error = None
    try:
        with get_session() as session:
            profile = session.get(Profile, user_id)
            if profile is None:
                error = "Profile not found"
            else:
                previous_path = profile.avatar_path
                profile.avatar_url = avatar_url
                profile.avatar_path = path
                profile.updated_at = datetime.now(UTC)
    except Exception:
        logger.exception("Failed to save avatar URL for %s", user_id)
        error = AVATAR_UPLOAD_FAILED

    if error is not None:
        discard_object(store, AVATARS_BUCKET, path)
        return None, error

    if previous_path and previous_path != path:
        discard_object(store, AVATARS_BUCKET, previous_path)
    logger.info("Updated avatar for %s", user_id)
    return avatar_url, None
