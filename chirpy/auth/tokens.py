"""Short-lived signed session tokens."""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from chirpy.core.exceptions import MalformedToken
from chirpy.core.security import build_signed_token, decode_signed_token

DEFAULT_ISSUER = "chirpy"


def issue_session_token(
    subject: UUID,
    secret_key: str,
    ttl: timedelta,
    *,
    now: datetime,
    issuer: str = DEFAULT_ISSUER,
) -> str:
    """Sign ``{iss, sub, iat, exp}`` claims for ``subject``."""
    issued_at = int(now.timestamp())
    payload = {
        "iss": issuer,
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + int(ttl.total_seconds()),
    }
    return build_signed_token(payload, secret_key)


def validate_session_token(
    token: str,
    secret_key: str,
    *,
    now: datetime,
    issuer: str = DEFAULT_ISSUER,
) -> UUID:
    """Return the subject of a valid session token.

    Signature is checked first, then expiry, then the claims.
    """
    payload = decode_signed_token(token, secret_key, now_ts=int(now.timestamp()))
    if payload.get("iss") != issuer:
        raise MalformedToken("Invalid token issuer")
    try:
        return UUID(str(payload.get("sub") or ""))
    except ValueError as exc:
        raise MalformedToken("Token subject is not a user id") from exc
