"""ORM models package for database tables.

This package provides SQLAlchemy ORM models representing database tables:
- User: Identity provider accounts
- AuthSession: Active sign-in tokens
- Profile: Student profile details, 1:1 with User
- Resource: Uploaded or linked academic resources

All models inherit from the shared Base declarative class defined in data.db.
"""

from eduxchange.data.db import Base
from eduxchange.data.models.auth_session import AuthSession
from eduxchange.data.models.profile import Profile
from eduxchange.data.models.resource import Resource
from eduxchange.data.models.user import User

__all__ = ["AuthSession", "Base", "Profile", "Resource", "User"]
