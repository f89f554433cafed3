"""Pydantic schemas for resource and dashboard API endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from eduxchange.constants.resource_types import ResourceType


class ResourceResponse(BaseModel):
    """Response schema for a resource."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    description: str | None = None
    resource_type: ResourceType
    subject: str | None = None
    course_code: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    external_link: str | None = None
    download_count: int = 0
    view_count: int = 0
    is_public: bool = True
    tags: list[str] | None = None
    created_at: datetime
    updated_at: datetime


class ResourceUpdateRequest(BaseModel):
    """Request schema for editing a resource.

    All fields are optional; only provided fields are updated. The resource
    type and attached file cannot be changed.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(None, description="Resource title")
    description: str | None = Field(None, description="Free-text description")
    subject: str | None = Field(None, description="Subject, e.g. Computer Science")
    course_code: str | None = Field(None, description="Course code, e.g. CS101")
    external_link: str | None = Field(None, description="URL for video and link resources")
    is_public: bool | None = Field(None, description="Visible to other users")
    tags: list[str] | None = Field(None, description="Up to 5 tags")


class DashboardResponse(BaseModel):
    """Totals and recent activity for the signed-in user."""

    total_resources: int
    total_views: int
    total_downloads: int
    recent_resources: list[ResourceResponse]
