"""Identity provider: sign-up, sign-in, session lookup and sign-out.

Accounts live in the users table with salted PBKDF2 password hashes.
A successful sign-in issues an opaque session token stored in
auth_sessions; deleting that row signs the user out.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
import secrets
from typing import TypedDict

from eduxchange.data.db import get_session
from eduxchange.data.models import AuthSession, Profile, User

logger = logging.getLogger(__name__)

__all__ = [
    "CurrentUser",
    "MIN_PASSWORD_LENGTH",
    "get_user_for_token",
    "sign_in",
    "sign_out",
    "sign_up",
]

_PBKDF2_ITERATIONS = 100_000
_SALT_BYTES = 16
_TOKEN_BYTES = 32
MIN_PASSWORD_LENGTH = 6


class CurrentUser(TypedDict):
    id: str
    email: str


def _hash_password(password: str) -> str:
    """Return a salted PBKDF2 hash for the given password.

    The result is stored as ``<salt_hex>:<hash_hex>``.
    """
    salt = os.urandom(_SALT_BYTES)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return f"{salt.hex()}:{derived.hex()}"


def _verify_password(password: str, stored_hash: str) -> bool:
    """Verify a password against a stored ``salt:hash`` string."""
    try:
        salt_hex, hash_hex = stored_hash.split(":", 1)
    except ValueError:
        return False

    try:
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False

    candidate = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        _PBKDF2_ITERATIONS,
    )
    return hmac.compare_digest(candidate, expected)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def sign_up(email: str, password: str, full_name: str) -> tuple[CurrentUser | None, str | None]:
    """Create an account and its profile (id + full name).

    Returns:
        Tuple of (created user, error message). On success, error is None.
    """
    email_clean = _normalize_email(email)
    if not email_clean or "@" not in email_clean:
        return None, "Please enter a valid email address."
    if not password:
        return None, "Password cannot be empty."
    if len(password) < MIN_PASSWORD_LENGTH:
        return None, f"Password must be at least {MIN_PASSWORD_LENGTH} characters."

    try:
        with get_session() as session:
            existing = session.query(User).filter(User.email == email_clean).first()
            if existing is not None:
                return None, "Email already registered."

            user = User(email=email_clean, password_hash=_hash_password(password))
            session.add(user)
            session.flush()
            session.add(Profile(id=user.id, full_name=full_name.strip() or None))
            created: CurrentUser = {"id": user.id, "email": user.email}
    except Exception:
        logger.exception("Failed to sign up %s", email_clean)
        return None, "Failed to create account."

    logger.info("Created account %s", created["id"])
    return created, None


def sign_in(email: str, password: str) -> tuple[str | None, str | None]:
    """Authenticate by email and password and issue a session token.

    Returns:
        Tuple of (session token, error message). On success, error is None.
    """
    email_clean = _normalize_email(email)
    if not email_clean or not password:
        return None, "Email and password are required."

    try:
        with get_session() as session:
            user = session.query(User).filter(User.email == email_clean).first()
            if user is None or not _verify_password(password, user.password_hash):
                return None, "Invalid email or password."

            token = secrets.token_urlsafe(_TOKEN_BYTES)
            session.add(AuthSession(token=token, user_id=user.id))
    except Exception:
        logger.exception("Sign-in failed for %s", email_clean)
        return None, "Sign-in failed."

    return token, None


def get_user_for_token(token: str | None) -> CurrentUser | None:
    """Return the user owning an active session token, or None."""
    if not token:
        return None

    try:
        with get_session() as session:
            auth_session = session.get(AuthSession, token)
            if auth_session is None:
                return None
            user = session.get(User, auth_session.user_id)
            if user is None:
                return None
            return {"id": user.id, "email": user.email}
    except Exception:
        logger.exception("Failed to resolve session token")
        return None


def sign_out(token: str | None) -> bool:
    """End a session. Returns False if the token was not active."""
    if not token:
        return False

    try:
        with get_session() as session:
            deleted = session.query(AuthSession).filter(AuthSession.token == token).delete(
                synchronize_session=False
            )
            return deleted > 0
    except Exception:
        logger.exception("Failed to sign out session")
        return False
