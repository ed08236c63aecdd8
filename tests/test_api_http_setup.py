from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import Any, Awaitable, Coroutine, cast

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import Response

from chirpy.admin.metrics import HitCounter
from chirpy.api.http_setup import register_exception_handlers, register_http_middleware
from chirpy.core.config import (
    AppConfig,
    LoggingConfig,
    SecurityConfig,
    StorageConfig,
)
from chirpy.core.exceptions import (
    ChirpyError,
    Conflict,
    Forbidden,
    InvalidSignature,
    StorageUnavailable,
)
from tests.fakes import auth_config

LOGGER = logging.getLogger(__name__)


def _config() -> AppConfig:
    return AppConfig(
        platform="dev",
        static_dir="static",
        auth=auth_config(),
        storage=StorageConfig(
            sqlite_path="runtime/test.db",
            mongodb_uri="",
            mongodb_db="chirpy",
        ),
        logging=LoggingConfig(level="INFO"),
        security=SecurityConfig(request_max_bytes=8),
    )


def _request(path: str, method: str = "GET", headers: list[tuple[bytes, bytes]] | None = None) -> Request:
    scope: dict[str, Any] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": b"",
        "root_path": "",
        "headers": headers or [],
        "client": ("127.0.0.1", 1234),
        "server": ("testserver", 80),
    }

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(scope, receive)


def _app(counter: HitCounter | None = None) -> FastAPI:
    app = FastAPI()
    register_http_middleware(
        app, config=_config(), logger=LOGGER, hit_counter=counter or HitCounter()
    )
    register_exception_handlers(app, logger=LOGGER)
    return app


def _dispatch_by_name(app: FastAPI, name: str):
    for middleware in app.user_middleware:
        dispatch = middleware.kwargs.get("dispatch")
        if callable(dispatch) and getattr(dispatch, "__name__", "") == name:
            return dispatch
    raise AssertionError(f"Dispatch {name!r} not found")


def _resolve_response(result: Response | Awaitable[Response]) -> Response:
    if inspect.iscoroutine(result):
        return asyncio.run(cast(Coroutine[Any, Any, Response], result))
    return cast(Response, result)


async def _ok(_request: Request) -> Response:
    return Response(content="ok", status_code=200)


def test_http_setup_adds_security_headers_and_request_id() -> None:
    dispatch = _dispatch_by_name(_app(), "request_logging_middleware")

    request = _request("/ok", headers=[(b"x-request-id", b"req-123")])

    response = asyncio.run(dispatch(request, _ok))
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_http_setup_rejects_large_request_before_handler() -> None:
    dispatch = _dispatch_by_name(_app(), "request_size_limit_middleware")
    request = _request("/api/users", method="POST", headers=[(b"content-length", b"20")])

    response = asyncio.run(dispatch(request, _ok))
    assert response.status_code == 413
    assert b"REQUEST_TOO_LARGE" in response.body


def test_http_setup_counts_only_static_hits() -> None:
    counter = HitCounter()
    dispatch = _dispatch_by_name(_app(counter), "static_hits_middleware")

    for path in ("/app", "/app/", "/app/index.html", "/api/healthz", "/application"):
        asyncio.run(dispatch(_request(path), _ok))

    assert counter.value == 3


def test_http_setup_serializes_http_exception_payload() -> None:
    app = _app()
    request = _request("/not-found")
    handler = app.exception_handlers[HTTPException]
    response: Response = _resolve_response(
        handler(
            request,
            HTTPException(
                status_code=404,
                detail={"error_code": "NOT_FOUND", "message": "missing"},
            ),
        )
    )
    assert response.status_code == 404
    assert b"NOT_FOUND" in response.body


def test_http_setup_maps_domain_errors_to_status_codes() -> None:
    app = _app()
    handler = app.exception_handlers[ChirpyError]
    cases = [
        (InvalidSignature("bad signature"), 401, b"Unauthorized"),
        (Forbidden("not yours"), 403, b"FORBIDDEN"),
        (Conflict("taken"), 409, b"CONFLICT"),
        (StorageUnavailable("down"), 503, b"STORAGE_UNAVAILABLE"),
    ]

    for exc, status_code, marker in cases:
        response: Response = _resolve_response(handler(_request("/api/chirps"), exc))
        assert response.status_code == status_code
        assert marker in response.body


def test_http_setup_hides_authentication_failure_detail() -> None:
    app = _app()
    handler = app.exception_handlers[ChirpyError]

    response: Response = _resolve_response(
        handler(_request("/api/chirps"), InvalidSignature("signature mismatch"))
    )

    assert b"signature mismatch" not in response.body


def test_http_setup_handles_unexpected_exceptions() -> None:
    app = _app()
    request = _request("/boom")
    handler = app.exception_handlers[Exception]
    response: Response = _resolve_response(handler(request, RuntimeError("boom")))
    assert response.status_code == 500
    assert b"INTERNAL_SERVER_ERROR" in response.body


def test_http_setup_validation_message_lists_fields_only() -> None:
    app = _app()
    handler = app.exception_handlers[RequestValidationError]
    exc = RequestValidationError(
        [
            {"type": "missing", "loc": ("body", "email"), "msg": "Field required", "input": {}},
            {"type": "missing", "loc": ("body", "password"), "msg": "Field required", "input": {}},
        ]
    )

    response: Response = _resolve_response(handler(_request("/api/users", method="POST"), exc))

    assert response.status_code == 422
    assert json.loads(response.body) == {
        "error_code": "VALIDATION_ERROR",
        "message": "body.email: Field required; body.password: Field required",
    }
