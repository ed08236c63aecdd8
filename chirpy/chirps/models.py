"""Pydantic models for chirps."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ChirpRecord(BaseModel):
    """Persisted chirp row."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    body: str
    user_id: UUID


class CreateChirpRequest(BaseModel):
    """Chirp creation payload."""

    body: str
