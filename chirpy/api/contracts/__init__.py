"""Public API response contracts."""

from chirpy.api.contracts.models import (
    ApiErrorResponse,
    ChirpResponse,
    LoginResponse,
    TokenResponse,
    UserResponse,
)

__all__ = [
    "ApiErrorResponse",
    "ChirpResponse",
    "LoginResponse",
    "TokenResponse",
    "UserResponse",
]
