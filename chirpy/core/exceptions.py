"""Domain error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations


class ChirpyError(Exception):
    """Base class for every expected, recoverable failure."""


class Unauthenticated(ChirpyError):
    """Missing, malformed, expired or otherwise invalid credential."""


class MissingHeader(Unauthenticated):
    """Authorization header is absent or empty."""


class MalformedScheme(Unauthenticated):
    """Authorization header does not carry the expected scheme prefix."""


class InvalidSignature(Unauthenticated):
    """Token signature does not verify under the server secret."""


class TokenExpired(Unauthenticated):
    """Token is past its expiry."""


class MalformedToken(Unauthenticated):
    """Token verified but its claims cannot be used."""


class InvalidCredentials(Unauthenticated):
    """Email/password pair did not authenticate."""


class RefreshTokenRejected(Unauthenticated):
    """Refresh token is unknown, revoked or expired."""


class InvalidApiKey(Unauthenticated):
    """Webhook API key does not match the configured key."""


class Forbidden(ChirpyError):
    """Authenticated, but not entitled to the resource."""


class NotFound(ChirpyError):
    """Referenced entity does not exist."""


class Conflict(ChirpyError):
    """Write collides with existing state (duplicate email)."""


class MalformedInput(ChirpyError):
    """Request input cannot be used."""


class StorageUnavailable(ChirpyError):
    """Persistent store failed to serve the request."""
