"""Billing provider webhook router."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from fastapi.concurrency import run_in_threadpool

from chirpy.api.contracts import ApiErrorResponse
from chirpy.billing.service import BillingWebhookService


def create_billing_router(service: BillingWebhookService) -> APIRouter:
    """Build router for the Polka webhook."""
    router = APIRouter(tags=["billing"])

    @router.post(
        "/api/polka/webhooks",
        status_code=204,
        responses={
            400: {"model": ApiErrorResponse},
            401: {"model": ApiErrorResponse},
            404: {"model": ApiErrorResponse},
        },
    )
    async def polka_webhook(request: Request) -> Response:
        """Receive a subscription event; always 204 once accepted."""
        body = await request.body()
        await run_in_threadpool(service.handle, request.headers, body)
        return Response(status_code=204)

    return router
