"""Pydantic schemas for profile API endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
    """Response schema for profile data."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str | None = None
    university: str | None = None
    department: str | None = None
    year_of_study: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    resource_count: int = 0
    created_at: datetime
    updated_at: datetime


class ProfileUpdateRequest(BaseModel):
    """Request schema for upserting a profile.

    Only provided fields are changed; blank strings clear a field.
    """

    full_name: str | None = Field(None, description="Display name")
    university: str | None = Field(None, description="University name")
    department: str | None = Field(None, description="Department or faculty")
    year_of_study: str | None = Field(None, description="e.g. '2nd Year', 'Graduate', 'PhD'")
    bio: str | None = Field(None, description="Short biography")


class AvatarResponse(BaseModel):
    avatar_url: str
