from __future__ import annotations

import pytest
from starlette.datastructures import Headers

from chirpy.auth.headers import extract_api_key, extract_bearer
from chirpy.core.exceptions import MalformedScheme, MissingHeader


def test_extract_bearer_returns_token() -> None:
    assert extract_bearer({"Authorization": "Bearer abc123"}) == "abc123"


def test_extract_bearer_without_scheme_is_malformed() -> None:
    with pytest.raises(MalformedScheme):
        extract_bearer({"Authorization": "abc123"})


def test_extract_bearer_missing_header() -> None:
    with pytest.raises(MissingHeader):
        extract_bearer({})


def test_extract_bearer_empty_header_counts_as_missing() -> None:
    with pytest.raises(MissingHeader):
        extract_bearer({"Authorization": ""})


def test_extract_bearer_scheme_is_case_sensitive() -> None:
    with pytest.raises(MalformedScheme):
        extract_bearer({"Authorization": "bearer abc123"})


def test_extract_bearer_empty_token_is_malformed() -> None:
    with pytest.raises(MalformedScheme):
        extract_bearer({"Authorization": "Bearer "})


def test_extract_bearer_header_name_case_insensitive() -> None:
    assert extract_bearer({"authorization": "Bearer tok"}) == "tok"
    assert extract_bearer(Headers({"AUTHORIZATION": "Bearer tok"})) == "tok"


def test_extract_api_key() -> None:
    assert extract_api_key({"Authorization": "ApiKey f271c81f"}) == "f271c81f"


def test_extract_api_key_rejects_bearer_scheme() -> None:
    with pytest.raises(MalformedScheme):
        extract_api_key({"Authorization": "Bearer f271c81f"})


def test_extract_api_key_missing_header() -> None:
    with pytest.raises(MissingHeader):
        extract_api_key({"Content-Type": "application/json"})
