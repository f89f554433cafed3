"""User account model for the identity provider.

Passwords are stored as salted PBKDF2 hashes, never in plaintext.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eduxchange.data.db import Base, UTCDateTime

if TYPE_CHECKING:
    from eduxchange.data.models.auth_session import AuthSession
    from eduxchange.data.models.profile import Profile
    from eduxchange.data.models.resource import Resource


class User(Base):
    """Application user account.

    Attributes:
        id: UUID string; also the primary key of the user's profile.
        email: Unique, lower-cased login address.
        password_hash: Salted hash of the user's password.
        created_at: UTC timestamp when the account was created.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=lambda: datetime.now(UTC)
    )

    profile: Mapped[Profile | None] = relationship(
        "Profile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    resources: Mapped[list[Resource]] = relationship(
        "Resource", back_populates="user", cascade="all, delete-orphan"
    )
    sessions: Mapped[list[AuthSession]] = relationship(
        "AuthSession", back_populates="user", cascade="all, delete-orphan"
    )
