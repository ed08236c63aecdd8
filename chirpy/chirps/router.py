"""FastAPI router for chirp endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Request, Response

from chirpy.api.contracts import ApiErrorResponse, ChirpResponse
from chirpy.auth.service import AuthService
from chirpy.chirps.models import CreateChirpRequest
from chirpy.chirps.service import ChirpService
from chirpy.core.exceptions import ChirpyError, MalformedInput, NotFound


def _parse_chirp_id(raw: str, error: type[ChirpyError]) -> UUID:
    try:
        return UUID(raw)
    except ValueError as exc:
        raise error(f"Bad chirp id: {raw}") from exc


def create_chirps_router(service: ChirpService, auth: AuthService) -> APIRouter:
    """Build chirps router."""
    router = APIRouter(tags=["chirps"])

    @router.post(
        "/api/chirps",
        status_code=201,
        response_model=ChirpResponse,
        responses={400: {"model": ApiErrorResponse}, 401: {"model": ApiErrorResponse}},
    )
    def create_chirp(req: CreateChirpRequest, request: Request) -> ChirpResponse:
        """Post a chirp as the authenticated user."""
        user_id = auth.authenticate_session(request.headers)
        return ChirpResponse.from_record(service.create(user_id, req.body))

    @router.get("/api/chirps", response_model=list[ChirpResponse])
    def list_chirps(
        author_id: UUID | None = Query(default=None),
        sort: str = Query(default="asc"),
    ) -> list[ChirpResponse]:
        """List chirps, oldest first unless ``sort=desc``."""
        chirps = service.list_chirps(author_id=author_id, sort=sort)
        return [ChirpResponse.from_record(chirp) for chirp in chirps]

    @router.get(
        "/api/chirps/{chirp_id}",
        response_model=ChirpResponse,
        responses={404: {"model": ApiErrorResponse}},
    )
    def get_chirp(chirp_id: str) -> ChirpResponse:
        """Fetch one chirp."""
        return ChirpResponse.from_record(service.get(_parse_chirp_id(chirp_id, NotFound)))

    @router.delete(
        "/api/chirps/{chirp_id}",
        status_code=204,
        responses={
            401: {"model": ApiErrorResponse},
            403: {"model": ApiErrorResponse},
            404: {"model": ApiErrorResponse},
        },
    )
    def delete_chirp(chirp_id: str, request: Request) -> Response:
        """Delete a chirp owned by the authenticated user."""
        user_id = auth.authenticate_session(request.headers)
        service.delete(user_id, _parse_chirp_id(chirp_id, MalformedInput))
        return Response(status_code=204)

    return router
