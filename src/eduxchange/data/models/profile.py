"""Profile model for a student's public details.

It has a 1:1 relationship with the User model and shares its primary key.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eduxchange.data.db import Base, UTCDateTime

if TYPE_CHECKING:
    from eduxchange.data.models.user import User


class Profile(Base):
    """Student profile.

    Attributes:
        id: Same value as the owning user's id.
        full_name: Display name captured at sign-up.
        university: University name.
        department: Department or faculty.
        year_of_study: One of the year-of-study options, free text.
        bio: Short biography.
        avatar_url: Public URL of the avatar in the object store.
        avatar_path: Object store key of the avatar, used for cleanup.
        created_at: UTC timestamp when the profile was created.
        updated_at: UTC timestamp when the profile was last updated.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    university: Mapped[str | None] = mapped_column(String(255), nullable=True)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    year_of_study: Mapped[str | None] = mapped_column(String(32), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    avatar_path: Mapped[str | None] = mapped_column(String(512), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    user: Mapped[User] = relationship("User", back_populates="profile")
