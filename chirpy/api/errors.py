"""Shared API error types and helpers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import HTTPException

from chirpy.core.exceptions import (
    ChirpyError,
    Conflict,
    Forbidden,
    MalformedInput,
    NotFound,
    StorageUnavailable,
    Unauthenticated,
)


class ApiErrorCode(StrEnum):
    """Machine-readable API error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ApiError(HTTPException):
    """HTTP exception carrying stable API error envelope."""

    def __init__(
        self, *, status_code: int, error_code: ApiErrorCode, message: str
    ) -> None:
        """Build an HTTP exception with standard detail structure."""
        super().__init__(
            status_code=status_code,
            detail={"error_code": str(error_code), "message": message},
        )


# Ordered: first matching base class wins.
_DOMAIN_ERRORS: list[tuple[type[ChirpyError], int, ApiErrorCode]] = [
    (Unauthenticated, 401, ApiErrorCode.UNAUTHENTICATED),
    (Forbidden, 403, ApiErrorCode.FORBIDDEN),
    (NotFound, 404, ApiErrorCode.NOT_FOUND),
    (Conflict, 409, ApiErrorCode.CONFLICT),
    (MalformedInput, 400, ApiErrorCode.MALFORMED_INPUT),
    (StorageUnavailable, 503, ApiErrorCode.STORAGE_UNAVAILABLE),
]


def to_api_error(exc: ChirpyError) -> ApiError:
    """Map a domain error onto its client-visible HTTP error.

    Every ``Unauthenticated`` variant gets the same message so clients
    cannot tell which credential check failed.
    """
    for error_type, status_code, error_code in _DOMAIN_ERRORS:
        if isinstance(exc, error_type):
            message = "Unauthorized" if status_code == 401 else (str(exc) or error_code)
            return ApiError(status_code=status_code, error_code=error_code, message=message)
    return ApiError(
        status_code=500,
        error_code=ApiErrorCode.INTERNAL_SERVER_ERROR,
        message=str(exc) or "Internal server error",
    )


def to_error_payload(detail: Any, status_code: int) -> dict[str, str]:
    """Normalize HTTP exception detail into stable error payload."""
    if isinstance(detail, dict):
        error_code = str(detail.get("error_code") or f"HTTP_{status_code}")
        message = str(detail.get("message") or detail.get("detail") or "HTTP error")
        return {"error_code": error_code, "message": message}
    return {
        "error_code": f"HTTP_{status_code}",
        "message": str(detail or "HTTP error"),
    }
