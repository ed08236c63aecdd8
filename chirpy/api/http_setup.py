"""HTTP middleware and exception handler wiring for FastAPI apps."""

from __future__ import annotations

import time
import uuid
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chirpy.admin.metrics import HitCounter
from chirpy.api.contracts import ApiErrorResponse
from chirpy.api.errors import ApiErrorCode, to_api_error, to_error_payload
from chirpy.core.config import AppConfig
from chirpy.core.exceptions import ChirpyError
from chirpy.core.logging import reset_correlation_id, set_correlation_id

STATIC_PREFIX = "/app"
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


def _validation_message(exc: RequestValidationError) -> str:
    """Summarize validation errors as ``loc: msg`` pairs without server internals."""
    parts = [
        f"{'.'.join(str(item) for item in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    ]
    return "; ".join(parts) or "Invalid request"


def register_http_middleware(
    app: FastAPI, *, config: AppConfig, logger: Any, hit_counter: HitCounter
) -> None:
    """Attach request size, hit counting and observability middleware."""

    @app.middleware("http")
    async def request_size_limit_middleware(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length:
            try:
                parsed_length = int(content_length)
            except ValueError:
                parsed_length = 0
            if parsed_length > config.security.request_max_bytes:
                return JSONResponse(
                    status_code=413,
                    content=ApiErrorResponse(
                        error_code=ApiErrorCode.REQUEST_TOO_LARGE,
                        message=(
                            "Request size exceeds configured limit "
                            f"({config.security.request_max_bytes} bytes)."
                        ),
                    ).model_dump(),
                )
        return await call_next(request)

    @app.middleware("http")
    async def static_hits_middleware(request: Request, call_next):
        path = request.url.path
        if path == STATIC_PREFIX or path.startswith(f"{STATIC_PREFIX}/"):
            hit_counter.increment()
        return await call_next(request)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        correlation_id = (
            request.headers.get("x-request-id")
            or request.headers.get("x-correlation-id")
            or uuid.uuid4().hex
        )
        token = set_correlation_id(correlation_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = correlation_id
            response.headers.update(SECURITY_HEADERS)
            logger.info(
                "request_completed",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000),
                },
            )
            return response
        finally:
            reset_correlation_id(token)


def register_exception_handlers(app: FastAPI, *, logger: Any) -> None:
    """Attach API exception handlers that return stable error contracts."""

    @app.exception_handler(ChirpyError)
    async def handle_domain_error(request: Request, exc: ChirpyError) -> JSONResponse:
        api_error = to_api_error(exc)
        log = logger.error if api_error.status_code >= 500 else logger.warning
        log(
            "domain_error",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": api_error.status_code,
                "reason": type(exc).__name__,
            },
        )
        return JSONResponse(
            status_code=api_error.status_code,
            content=ApiErrorResponse(
                **to_error_payload(api_error.detail, api_error.status_code)
            ).model_dump(),
        )

    @app.exception_handler(HTTPException)
    async def handle_http_exception(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        payload = to_error_payload(exc.detail, exc.status_code)
        logger.warning(
            "http_exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": exc.status_code,
            },
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ApiErrorResponse(**payload).model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_exception(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        logger.warning(
            "validation_exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": 422,
            },
        )
        return JSONResponse(
            status_code=422,
            content=ApiErrorResponse(
                error_code=ApiErrorCode.VALIDATION_ERROR,
                message=_validation_message(exc),
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            "unexpected_exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": 500,
            },
        )
        return JSONResponse(
            status_code=500,
            content=ApiErrorResponse(
                error_code=ApiErrorCode.INTERNAL_SERVER_ERROR,
                message="Internal server error",
            ).model_dump(),
        )
