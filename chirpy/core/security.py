"""Security primitives for password hashing and token signing."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import secrets
from typing import Any

from chirpy.core.exceptions import InvalidSignature, MalformedToken, TokenExpired

PASSWORD_HASH_ALGORITHM = "pbkdf2_sha256"
PASSWORD_HASH_ROUNDS = 120_000
REFRESH_TOKEN_BYTES = 32


def _b64url_encode(raw: bytes) -> str:
    """Return URL-safe base64 string without padding."""
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(value: str) -> bytes:
    """Decode URL-safe base64 string with optional missing padding."""
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode((value + padding).encode("utf-8"))


def hash_password(password: str) -> str:
    """Hash password using PBKDF2-HMAC-SHA256 with random salt."""
    salt = os.urandom(16)
    derived = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, PASSWORD_HASH_ROUNDS
    )
    return (
        f"{PASSWORD_HASH_ALGORITHM}${PASSWORD_HASH_ROUNDS}"
        f"${_b64url_encode(salt)}${_b64url_encode(derived)}"
    )


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify password against a stored PBKDF2 hash.

    Malformed hashes and wrong passwords both yield ``False``.
    """
    try:
        algo, rounds_raw, salt_b64, digest_b64 = stored_hash.split("$", 3)
        if algo != PASSWORD_HASH_ALGORITHM:
            return False
        rounds = int(rounds_raw)
        if rounds <= 0:
            return False
        salt = _b64url_decode(salt_b64)
        expected = _b64url_decode(digest_b64)
    except (AttributeError, ValueError):
        return False

    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(derived, expected)


def build_signed_token(payload: dict[str, Any], secret_key: str) -> str:
    """Create compact HS256 token in the JWT 3-part structure."""
    header = {"alg": "HS256", "typ": "JWT"}
    header_part = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_part = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_part}.{payload_part}".encode("utf-8")
    signature = hmac.new(secret_key.encode("utf-8"), signing_input, hashlib.sha256).digest()
    signature_part = _b64url_encode(signature)
    return f"{header_part}.{payload_part}.{signature_part}"


def decode_signed_token(token: str, secret_key: str, *, now_ts: int) -> dict[str, Any]:
    """Decode and verify compact signed token.

    Raises ``InvalidSignature`` when the token cannot be verified under
    ``secret_key``, ``MalformedToken`` when the verified payload is unusable,
    and ``TokenExpired`` when ``exp`` is not after ``now_ts``.
    """
    try:
        header_part, payload_part, signature_part = token.split(".")
        got_sig = _b64url_decode(signature_part)
    except ValueError as exc:
        raise InvalidSignature("Malformed token") from exc

    signing_input = f"{header_part}.{payload_part}".encode("utf-8")
    expected_sig = hmac.new(secret_key.encode("utf-8"), signing_input, hashlib.sha256).digest()
    if not hmac.compare_digest(expected_sig, got_sig):
        raise InvalidSignature("Invalid token signature")

    try:
        payload = json.loads(_b64url_decode(payload_part).decode("utf-8"))
    except ValueError as exc:
        raise MalformedToken("Invalid token payload") from exc
    if not isinstance(payload, dict):
        raise MalformedToken("Invalid token payload")
    try:
        exp = int(payload["exp"])
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedToken("Token has no usable expiry") from exc

    if exp <= now_ts:
        raise TokenExpired("Token expired")

    return payload


def make_refresh_token() -> str:
    """Return a 256-bit random opaque token, hex encoded."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def constant_time_equals(left: str, right: str) -> bool:
    """Compare two secrets without leaking the mismatch position."""
    return hmac.compare_digest(left.encode("utf-8"), right.encode("utf-8"))
