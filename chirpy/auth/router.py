"""Authentication API router."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from chirpy.api.contracts import (
    ApiErrorResponse,
    LoginResponse,
    TokenResponse,
    UserResponse,
)
from chirpy.auth.models import CredentialsRequest
from chirpy.auth.service import AuthService

_UNAUTHORIZED = {401: {"model": ApiErrorResponse}}


def create_auth_router(service: AuthService) -> APIRouter:
    """Build router with user, login, refresh and revoke endpoints."""
    router = APIRouter(tags=["auth"])

    @router.post(
        "/api/users",
        status_code=201,
        response_model=UserResponse,
        responses={409: {"model": ApiErrorResponse}},
    )
    def create_user(req: CredentialsRequest) -> UserResponse:
        """Register a new user."""
        return UserResponse.from_record(service.register(req.email, req.password))

    @router.put("/api/users", response_model=UserResponse, responses=_UNAUTHORIZED)
    def update_user(req: CredentialsRequest, request: Request) -> UserResponse:
        """Change email and password of the authenticated user."""
        user = service.update_credentials(request.headers, req.email, req.password)
        return UserResponse.from_record(user)

    @router.post("/api/login", response_model=LoginResponse, responses=_UNAUTHORIZED)
    def login(req: CredentialsRequest) -> LoginResponse:
        """Authenticate and return session and refresh tokens."""
        return LoginResponse.from_session(service.login(req.email, req.password))

    @router.post("/api/refresh", response_model=TokenResponse, responses=_UNAUTHORIZED)
    def refresh(request: Request) -> TokenResponse:
        """Mint a session token from the bearer refresh token."""
        return TokenResponse(token=service.refresh_session(request.headers))

    @router.post(
        "/api/revoke",
        status_code=204,
        responses={**_UNAUTHORIZED, 404: {"model": ApiErrorResponse}},
    )
    def revoke(request: Request) -> Response:
        """Revoke the bearer refresh token."""
        service.revoke_session(request.headers)
        return Response(status_code=204)

    return router
