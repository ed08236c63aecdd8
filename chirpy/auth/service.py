"""Authentication service for registration, login, refresh and authorization checks."""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Mapping
from uuid import UUID

from chirpy.auth.headers import extract_api_key, extract_bearer
from chirpy.auth.models import AuthSession, UserRecord
from chirpy.auth.refresh_tokens import RefreshTokenStore
from chirpy.auth.tokens import issue_session_token, validate_session_token
from chirpy.chirps.models import ChirpRecord
from chirpy.core.clock import Clock, utc_now
from chirpy.core.config import AuthConfig
from chirpy.core.exceptions import (
    Forbidden,
    InvalidApiKey,
    InvalidCredentials,
    MalformedInput,
    NotFound,
    RefreshTokenRejected,
    Unauthenticated,
)
from chirpy.core.security import constant_time_equals, hash_password, verify_password
from chirpy.storage.base import ChirpyRepository

LOGGER = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _unknown_user_hash() -> str:
    """Hash checked for unknown emails so both login failures cost the same."""
    return hash_password("chirpy-unknown-user")


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Authorization gateway composing hashing, token signing and refresh tokens.

    Holds only immutable configuration; every check reads current storage
    state through the repository.
    """

    def __init__(
        self, repo: ChirpyRepository, config: AuthConfig, *, now: Clock = utc_now
    ) -> None:
        """Initialize service dependencies."""
        self._repo = repo
        self._config = config
        self._now = now
        self._refresh_tokens = RefreshTokenStore(
            repo,
            ttl=timedelta(seconds=config.refresh_token_ttl_seconds),
            now=now,
        )

    def register(self, email: str, password: str) -> UserRecord:
        """Hash the password and create the user."""
        normalized = _normalize_email(email)
        if not normalized or not password:
            raise MalformedInput("Email and password are required")
        user = self._repo.create_user(normalized, hash_password(password))
        LOGGER.info("user_registered", extra={"user_id": user.id})
        return user

    def login(self, email: str, password: str) -> AuthSession:
        """Authenticate credentials and issue session/refresh token pair."""
        user = self._repo.get_user_by_email(_normalize_email(email))
        if user is None:
            verify_password(password, _unknown_user_hash())
            LOGGER.warning("login_rejected", extra={"reason": "unknown_email"})
            raise InvalidCredentials("Incorrect email or password")
        if not verify_password(password, user.hashed_password):
            LOGGER.warning(
                "login_rejected", extra={"reason": "bad_password", "user_id": user.id}
            )
            raise InvalidCredentials("Incorrect email or password")

        token = self.issue_session_token(user.id)
        refresh = self._refresh_tokens.issue(user.id)
        LOGGER.info("login_succeeded", extra={"user_id": user.id})
        return AuthSession(user=user, token=token, refresh_token=refresh.token)

    def issue_session_token(self, user_id: UUID) -> str:
        """Sign a session token for ``user_id`` with the configured TTL."""
        return issue_session_token(
            user_id,
            self._config.secret_key,
            timedelta(seconds=self._config.access_token_ttl_seconds),
            now=self._now(),
            issuer=self._config.issuer,
        )

    def authenticate_session(self, headers: Mapping[str, str]) -> UUID:
        """Return the subject of the bearer session token."""
        try:
            token = extract_bearer(headers)
            return validate_session_token(
                token,
                self._config.secret_key,
                now=self._now(),
                issuer=self._config.issuer,
            )
        except Unauthenticated as exc:
            LOGGER.warning("session_rejected", extra={"reason": type(exc).__name__})
            raise

    def refresh_session(self, headers: Mapping[str, str]) -> str:
        """Mint a new session token from the bearer refresh token.

        The refresh token itself is neither rotated nor invalidated.
        """
        token = extract_bearer(headers)
        try:
            record = self._refresh_tokens.lookup(token)
            if not self._refresh_tokens.is_usable(record):
                raise RefreshTokenRejected("Refresh token expired or revoked")
            user_id = self._refresh_tokens.resolve_owner(token)
        except NotFound as exc:
            LOGGER.warning("refresh_rejected", extra={"reason": "unknown_token"})
            raise RefreshTokenRejected("Invalid refresh token") from exc
        except RefreshTokenRejected:
            LOGGER.warning("refresh_rejected", extra={"reason": "unusable_token"})
            raise
        return self.issue_session_token(user_id)

    def revoke_session(self, headers: Mapping[str, str]) -> None:
        """Revoke the bearer refresh token."""
        token = extract_bearer(headers)
        self._refresh_tokens.revoke(token)
        LOGGER.info("refresh_token_revoked")

    def update_credentials(
        self, headers: Mapping[str, str], email: str, password: str
    ) -> UserRecord:
        """Replace the authenticated user's email and password."""
        user_id = self.authenticate_session(headers)
        normalized = _normalize_email(email)
        if not normalized or not password:
            raise MalformedInput("Email and password are required")
        user = self._repo.update_user(user_id, normalized, hash_password(password))
        if user is None:
            raise NotFound("User not found")
        LOGGER.info("user_updated", extra={"user_id": user_id})
        return user

    def authorize_chirp_owner(self, user_id: UUID, chirp_id: UUID) -> ChirpRecord:
        """Return the chirp when ``user_id`` authored it.

        Existence is checked before ownership, so a missing chirp is
        ``NotFound`` and someone else's chirp is ``Forbidden``.
        """
        chirp = self._repo.get_chirp_by_id(chirp_id)
        if chirp is None:
            raise NotFound("Chirp not found")
        if chirp.user_id != user_id:
            LOGGER.warning(
                "chirp_access_forbidden",
                extra={"user_id": user_id, "chirp_id": chirp_id},
            )
            raise Forbidden("Forbidden: wrong user")
        return chirp

    def authorize_webhook(self, headers: Mapping[str, str]) -> None:
        """Accept only requests carrying the configured Polka API key."""
        try:
            api_key = extract_api_key(headers)
            if not self._config.polka_key or not constant_time_equals(
                api_key, self._config.polka_key
            ):
                raise InvalidApiKey("Wrong API key")
        except Unauthenticated as exc:
            LOGGER.warning("webhook_rejected", extra={"reason": type(exc).__name__})
            raise
