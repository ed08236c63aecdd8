"""Long-lived opaque refresh tokens backed by the repository."""

from __future__ import annotations

from datetime import timedelta
from uuid import UUID

from chirpy.auth.models import RefreshTokenRecord
from chirpy.core.clock import Clock, utc_now
from chirpy.core.exceptions import NotFound
from chirpy.core.security import make_refresh_token
from chirpy.storage.base import ChirpyRepository

DEFAULT_REFRESH_TTL = timedelta(days=60)


class RefreshTokenStore:
    """Issue, look up and revoke refresh tokens.

    Nothing is cached: every call reads the current row so that revocation
    and expiry apply to the very next request.
    """

    def __init__(
        self,
        repo: ChirpyRepository,
        *,
        ttl: timedelta = DEFAULT_REFRESH_TTL,
        now: Clock = utc_now,
    ) -> None:
        self._repo = repo
        self._ttl = ttl
        self._now = now

    def issue(self, user_id: UUID) -> RefreshTokenRecord:
        """Create and persist a fresh token for ``user_id``."""
        return self._repo.create_refresh_token(
            make_refresh_token(), user_id, self._now() + self._ttl
        )

    def lookup(self, token: str) -> RefreshTokenRecord:
        """Return the stored record or raise ``NotFound``."""
        record = self._repo.get_refresh_token(token)
        if record is None:
            raise NotFound("Refresh token not found")
        return record

    def is_usable(self, record: RefreshTokenRecord) -> bool:
        """Return whether the token is unrevoked and unexpired."""
        return record.revoked_at is None and record.expires_at > self._now()

    def revoke(self, token: str) -> None:
        """Revoke ``token``; revoking twice keeps the first revocation time."""
        if not self._repo.revoke_refresh_token(token, self._now()):
            raise NotFound("Refresh token not found")

    def resolve_owner(self, token: str) -> UUID:
        """Return the owner of ``token`` regardless of usability."""
        user_id = self._repo.get_user_id_from_refresh_token(token)
        if user_id is None:
            raise NotFound("Refresh token owner not found")
        return user_id
