"""Credential extraction from the Authorization header."""

from __future__ import annotations

from typing import Mapping

from chirpy.core.exceptions import MalformedScheme, MissingHeader

BEARER_SCHEME = "Bearer "
API_KEY_SCHEME = "ApiKey "


def _authorization(headers: Mapping[str, str]) -> str:
    """Return the Authorization header value, matching the name case-insensitively."""
    value = headers.get("Authorization")
    if value is None:
        value = next(
            (v for k, v in headers.items() if k.lower() == "authorization"), None
        )
    return value or ""


def _extract(headers: Mapping[str, str], scheme: str) -> str:
    authorization = _authorization(headers)
    if not authorization:
        raise MissingHeader("Authorization header not found")
    if not authorization.startswith(scheme):
        raise MalformedScheme(f"{scheme.strip()} scheme not found in Authorization header")
    credential = authorization[len(scheme):]
    if not credential:
        raise MalformedScheme(f"Empty {scheme.strip()} credential")
    return credential


def extract_bearer(headers: Mapping[str, str]) -> str:
    """Return ``<token>`` from ``Authorization: Bearer <token>``."""
    return _extract(headers, BEARER_SCHEME)


def extract_api_key(headers: Mapping[str, str]) -> str:
    """Return ``<key>`` from ``Authorization: ApiKey <key>``."""
    return _extract(headers, API_KEY_SCHEME)
