"""Pydantic schemas for sign-up, sign-in and session endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SignUpRequest(BaseModel):
    """Request schema for creating an account."""

    email: str = Field(..., description="Login email address")
    password: str = Field(..., description="Password (at least 6 characters)")
    full_name: str = Field("", description="Display name stored on the profile")


class LoginRequest(BaseModel):
    """Request schema for signing in."""

    email: str
    password: str


class TokenResponse(BaseModel):
    """Session token returned by a successful sign-in."""

    access_token: str
    token_type: str = "bearer"


class CurrentUserResponse(BaseModel):
    """The signed-in user as seen by the identity provider."""

    id: str
    email: str
