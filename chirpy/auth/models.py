"""Pydantic models for the authentication domain."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class UserRecord(BaseModel):
    """Persisted user row."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    email: str
    hashed_password: str
    is_chirpy_red: bool = False


class RefreshTokenRecord(BaseModel):
    """Refresh token persistence record."""

    token: str
    user_id: UUID
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None


class CredentialsRequest(BaseModel):
    """Email/password payload used by register, login and profile update."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AuthSession(BaseModel):
    """Result of a successful login."""

    user: UserRecord
    token: str
    refresh_token: str
