"""Admin and health endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import HTMLResponse, PlainTextResponse

from chirpy.admin.metrics import AdminService
from chirpy.api.contracts import ApiErrorResponse


def create_admin_router(service: AdminService) -> APIRouter:
    """Build router with health, metrics and reset endpoints."""
    router = APIRouter(tags=["admin"])

    @router.get("/api/healthz", response_class=PlainTextResponse)
    def healthz() -> str:
        return "OK"

    @router.get("/admin/metrics", response_class=HTMLResponse)
    def metrics() -> str:
        return service.render_metrics()

    @router.post(
        "/admin/reset",
        response_class=PlainTextResponse,
        responses={403: {"model": ApiErrorResponse}},
    )
    def reset() -> str:
        service.reset()
        return "Hits reset to 0"

    return router
