from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from chirpy.auth.tokens import issue_session_token, validate_session_token
from chirpy.core.exceptions import (
    InvalidSignature,
    MalformedToken,
    TokenExpired,
    Unauthenticated,
)
from chirpy.core.security import (
    build_signed_token,
    hash_password,
    make_refresh_token,
    verify_password,
)
from tests.fakes import SECRET

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("password", "candidate", "expected"),
    [
        ("correctPassword123!", "correctPassword123!", True),
        ("correctPassword123!", "wrongPassword", False),
        ("correctPassword123!", "", False),
        ("anotherPassword456!", "correctPassword123!", False),
    ],
)
def test_verify_password_matches_only_the_plaintext(
    password: str, candidate: str, expected: bool
) -> None:
    assert verify_password(candidate, hash_password(password)) is expected


def test_hash_password_is_salted() -> None:
    first = hash_password("secret123")
    second = hash_password("secret123")

    assert first != second
    assert first.startswith("pbkdf2_sha256$120000$")


@pytest.mark.parametrize(
    "stored_hash",
    ["invalidhash", "", "md5$1$abc$def", "pbkdf2_sha256$notanumber$abc$def", "pbkdf2_sha256$0$abc$def"],
)
def test_verify_password_rejects_malformed_hash(stored_hash: str) -> None:
    assert verify_password("secret123", stored_hash) is False


def test_session_token_round_trip() -> None:
    user_id = uuid.uuid4()
    token = issue_session_token(user_id, SECRET, timedelta(hours=1), now=NOW)

    assert validate_session_token(token, SECRET, now=NOW) == user_id


def test_session_token_already_expired() -> None:
    token = issue_session_token(uuid.uuid4(), SECRET, timedelta(seconds=-1), now=NOW)

    with pytest.raises(TokenExpired):
        validate_session_token(token, SECRET, now=NOW)


def test_session_token_expires_after_ttl() -> None:
    token = issue_session_token(uuid.uuid4(), SECRET, timedelta(hours=1), now=NOW)

    with pytest.raises(TokenExpired):
        validate_session_token(token, SECRET, now=NOW + timedelta(hours=1))


def test_session_token_rejected_under_other_secret() -> None:
    token = issue_session_token(uuid.uuid4(), SECRET, timedelta(hours=1), now=NOW)

    with pytest.raises(InvalidSignature):
        validate_session_token(token, "another-secret", now=NOW)


def test_session_token_signature_checked_before_expiry() -> None:
    token = issue_session_token(uuid.uuid4(), SECRET, timedelta(seconds=-1), now=NOW)

    with pytest.raises(InvalidSignature):
        validate_session_token(token, "another-secret", now=NOW)


def test_session_token_tampered_payload_rejected() -> None:
    token = issue_session_token(uuid.uuid4(), SECRET, timedelta(hours=1), now=NOW)
    header, _payload, signature = token.split(".")
    forged = build_signed_token(
        {"iss": "chirpy", "sub": str(uuid.uuid4()), "exp": 9_999_999_999}, "attacker"
    ).split(".")[1]

    with pytest.raises(InvalidSignature):
        validate_session_token(f"{header}.{forged}.{signature}", SECRET, now=NOW)


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", "not.a.token"])
def test_session_token_garbage_is_unauthenticated(token: str) -> None:
    with pytest.raises(Unauthenticated):
        validate_session_token(token, SECRET, now=NOW)


def test_session_token_with_non_uuid_subject_is_malformed() -> None:
    token = build_signed_token(
        {"iss": "chirpy", "sub": "user-42", "exp": int(NOW.timestamp()) + 60}, SECRET
    )

    with pytest.raises(MalformedToken):
        validate_session_token(token, SECRET, now=NOW)


def test_session_token_with_foreign_issuer_is_malformed() -> None:
    token = issue_session_token(
        uuid.uuid4(), SECRET, timedelta(hours=1), now=NOW, issuer="someone-else"
    )

    with pytest.raises(MalformedToken):
        validate_session_token(token, SECRET, now=NOW)


def test_refresh_token_has_256_bits_of_entropy() -> None:
    token = make_refresh_token()

    assert len(token) == 64
    int(token, 16)
    assert token != make_refresh_token()
