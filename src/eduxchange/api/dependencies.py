"""Shared dependencies for API routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eduxchange.config import SESSION_COOKIE_NAME
from eduxchange.services.auth import CurrentUser, get_user_for_token

_bearer = HTTPBearer(auto_error=False)


def get_session_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)] = None,
    session_cookie: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> str | None:
    """Return the session token from the Authorization header or the session cookie."""
    if credentials is not None:
        return credentials.credentials
    return session_cookie


def get_current_user(
    token: Annotated[str | None, Depends(get_session_token)],
) -> CurrentUser:
    """Get the signed-in user for the request.

    Raises:
        HTTPException: If the token is missing or not an active session (401).
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication. Please sign in.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = get_user_for_token(token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_optional_user(
    token: Annotated[str | None, Depends(get_session_token)],
) -> CurrentUser | None:
    """Get the signed-in user if any, or None for anonymous access.

    Unlike ``get_current_user`` this does **not** raise 401.
    """
    return get_user_for_token(token)
