"""Resource model for uploaded or linked academic material.

A resource belongs to exactly one user. File metadata columns are populated
only when a blob was uploaded; ``external_link`` only for linked content.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from eduxchange.constants.resource_types import ResourceType
from eduxchange.data.db import Base, UTCDateTime

if TYPE_CHECKING:
    from eduxchange.data.models.user import User


class Resource(Base):
    """A shared academic resource.

    Attributes:
        id: UUID string primary key.
        user_id: Owning user; never changes after creation.
        title: Required title.
        description: Optional free text.
        resource_type: One of the ResourceType values; immutable after creation.
        subject: Optional subject name.
        course_code: Optional course code (e.g. CS101).
        file_url: Public URL of the uploaded blob.
        file_name: Original file name of the upload.
        file_size: Size of the upload in bytes.
        mime_type: MIME type of the upload.
        storage_path: Object store key of the upload, used for cleanup.
        external_link: URL for linked content.
        download_count: Number of downloads.
        view_count: Number of detail page loads.
        is_public: Whether non-owners may view the resource.
        tags: Ordered list of up to five unique tags, or None.
        created_at: UTC timestamp when the resource was created.
        updated_at: UTC timestamp when the resource was last updated.
    """

    __tablename__ = "resources"
    __table_args__ = (
        CheckConstraint("view_count >= 0", name="ck_resources_view_count_positive"),
        CheckConstraint("download_count >= 0", name="ck_resources_download_count_positive"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    resource_type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    subject: Mapped[str | None] = mapped_column(String(255), nullable=True)
    course_code: Mapped[str | None] = mapped_column(String(64), nullable=True)

    file_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    storage_path: Mapped[str | None] = mapped_column(String(512), nullable=True)
    external_link: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON(none_as_null=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=lambda: datetime.now(UTC), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    user: Mapped[User] = relationship("User", back_populates="resources")

    @validates("resource_type")
    def validate_resource_type(self, key: str, value: str) -> str:
        """Reject unknown types and changes to an already-set type."""
        normalized = ResourceType(value).value
        current = self.__dict__.get("resource_type")
        if current is not None and current != normalized:
            raise ValueError("resource_type cannot be changed after creation")
        return normalized
