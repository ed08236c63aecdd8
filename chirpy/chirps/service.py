"""Business logic for chirp endpoints."""

from __future__ import annotations

import logging
from uuid import UUID

from chirpy.auth.service import AuthService
from chirpy.chirps.models import ChirpRecord
from chirpy.chirps.profanity import clean_body
from chirpy.core.exceptions import MalformedInput, NotFound
from chirpy.storage.base import ChirpyRepository

LOGGER = logging.getLogger(__name__)

MAX_CHIRP_LENGTH = 140
SORT_ORDERS = ("asc", "desc")


class ChirpService:
    """Create, list, fetch and delete chirps."""

    def __init__(self, repo: ChirpyRepository, auth: AuthService) -> None:
        self._repo = repo
        self._auth = auth

    def create(self, user_id: UUID, body: str) -> ChirpRecord:
        """Validate length, mask profanity and store the chirp."""
        if len(body) > MAX_CHIRP_LENGTH:
            raise MalformedInput("Chirp is too long")
        chirp = self._repo.create_chirp(clean_body(body), user_id)
        LOGGER.info("chirp_created", extra={"user_id": user_id, "chirp_id": chirp.id})
        return chirp

    def list_chirps(
        self, *, author_id: UUID | None = None, sort: str = "asc"
    ) -> list[ChirpRecord]:
        """List chirps by creation time, optionally for one author."""
        if sort not in SORT_ORDERS:
            raise MalformedInput(f"Unsupported sort order: {sort}")
        chirps = self._repo.list_chirps(author_id)
        if sort == "desc":
            chirps.reverse()
        return chirps

    def get(self, chirp_id: UUID) -> ChirpRecord:
        """Return one chirp."""
        chirp = self._repo.get_chirp_by_id(chirp_id)
        if chirp is None:
            raise NotFound("Chirp not found")
        return chirp

    def delete(self, user_id: UUID, chirp_id: UUID) -> None:
        """Delete a chirp owned by ``user_id``."""
        self._auth.authorize_chirp_owner(user_id, chirp_id)
        if not self._repo.delete_chirp(chirp_id):
            # Removed between the ownership check and the delete.
            raise NotFound("Chirp not found")
        LOGGER.info("chirp_deleted", extra={"user_id": user_id, "chirp_id": chirp_id})
