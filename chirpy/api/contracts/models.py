"""Pydantic API response models used in OpenAPI contracts."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from chirpy.auth.models import AuthSession, UserRecord
from chirpy.chirps.models import ChirpRecord


class ApiErrorResponse(BaseModel):
    """Stable error envelope for API responses."""

    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")


class UserResponse(BaseModel):
    """Public user view; never carries the password hash."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    email: str
    is_chirpy_red: bool

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        return cls.model_validate(user.model_dump(exclude={"hashed_password"}))


class LoginResponse(UserResponse):
    """User view plus the freshly issued token pair."""

    token: str
    refresh_token: str

    @classmethod
    def from_session(cls, session: AuthSession) -> "LoginResponse":
        return cls(
            **session.user.model_dump(exclude={"hashed_password"}),
            token=session.token,
            refresh_token=session.refresh_token,
        )


class TokenResponse(BaseModel):
    """New session token minted from a refresh token."""

    token: str


class ChirpResponse(BaseModel):
    """Chirp view."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    body: str
    user_id: UUID

    @classmethod
    def from_record(cls, chirp: ChirpRecord) -> "ChirpResponse":
        return cls.model_validate(chirp.model_dump())
