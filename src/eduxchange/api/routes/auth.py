"""Sign-up, sign-in and sign-out routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from eduxchange.api.dependencies import get_current_user, get_session_token
from eduxchange.api.schemas.auth import (
    CurrentUserResponse,
    LoginRequest,
    SignUpRequest,
    TokenResponse,
)
from eduxchange.services.auth import CurrentUser, sign_in, sign_out, sign_up

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=CurrentUserResponse,
    status_code=status.HTTP_201_CREATED,
)
def signup(data: SignUpRequest) -> CurrentUserResponse:
    """Create an account and its profile."""
    user, error = sign_up(data.email, data.password, data.full_name)
    if user is None:
        detail = error or "Failed to create account."
        code = (
            status.HTTP_409_CONFLICT
            if detail == "Email already registered."
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=detail)
    return CurrentUserResponse(**user)


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest) -> TokenResponse:
    """Sign in and receive a session token."""
    token, error = sign_in(data.email, data.password)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error or "Invalid email or password.",
        )
    return TokenResponse(access_token=token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    token: Annotated[str | None, Depends(get_session_token)],
) -> Response:
    """End the current session."""
    sign_out(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=CurrentUserResponse)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUserResponse:
    """Return the signed-in user."""
    return CurrentUserResponse(**current_user)
