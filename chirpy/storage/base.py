"""Storage collaborator contract used by the services."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from chirpy.auth.models import RefreshTokenRecord, UserRecord
from chirpy.chirps.models import ChirpRecord


class ChirpyRepository(Protocol):
    """Point operations on users, chirps and refresh tokens.

    Every method is a single read or a single write. Implementations raise
    ``Conflict`` for duplicate emails and ``StorageUnavailable`` for I/O
    failures; absence is reported with ``None``/``False``.
    """

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        """Insert a new user."""

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Return user by email."""

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        """Return user by id."""

    def update_user(
        self, user_id: UUID, email: str, password_hash: str
    ) -> UserRecord | None:
        """Replace email and password hash of an existing user."""

    def upgrade_user_tier(self, user_id: UUID) -> bool:
        """Mark user as Chirpy Red; ``False`` when the user does not exist."""

    def create_refresh_token(
        self, token: str, user_id: UUID, expires_at: datetime
    ) -> RefreshTokenRecord:
        """Persist a newly issued refresh token."""

    def get_refresh_token(self, token: str) -> RefreshTokenRecord | None:
        """Return refresh token record."""

    def revoke_refresh_token(self, token: str, revoked_at: datetime) -> bool:
        """Set ``revoked_at`` once; ``False`` when the token is unknown."""

    def get_user_id_from_refresh_token(self, token: str) -> UUID | None:
        """Return the owner of a refresh token."""

    def create_chirp(self, body: str, user_id: UUID) -> ChirpRecord:
        """Insert a new chirp."""

    def get_chirp_by_id(self, chirp_id: UUID) -> ChirpRecord | None:
        """Return chirp by id."""

    def list_chirps(self, author_id: UUID | None = None) -> list[ChirpRecord]:
        """List chirps ordered by creation time, oldest first."""

    def delete_chirp(self, chirp_id: UUID) -> bool:
        """Delete chirp; ``False`` when it does not exist."""

    def reset(self) -> None:
        """Delete all users, chirps and refresh tokens."""

    def close(self) -> None:
        """Release the underlying connection."""
