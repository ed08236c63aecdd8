from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.routing import APIRoute

from chirpy.api.app import create_app
from chirpy.core.config import AppConfig, LoggingConfig, SecurityConfig, StorageConfig
from tests.fakes import auth_config


def _app(tmp_path: Path) -> FastAPI:
    (tmp_path / "static").mkdir(exist_ok=True)
    config = AppConfig(
        platform="",
        static_dir="static",
        auth=auth_config(),
        storage=StorageConfig(sqlite_path="chirpy.db", mongodb_uri="", mongodb_db="chirpy"),
        logging=LoggingConfig(level="INFO"),
        security=SecurityConfig(request_max_bytes=1024),
    )
    return create_app(config, app_root=tmp_path)


def _response_ref(schema: dict, path: str, method: str, status: str) -> str:
    operation = schema["paths"][path][method]
    return operation["responses"][status]["content"]["application/json"]["schema"]["$ref"]


def test_health_endpoint_contract_function(tmp_path: Path) -> None:
    route = next(
        (
            candidate
            for candidate in _app(tmp_path).routes
            if isinstance(candidate, APIRoute) and candidate.path == "/api/healthz"
        ),
        None,
    )

    assert route is not None
    assert route.endpoint() == "OK"


def test_openapi_user_contracts_never_expose_password_hash(tmp_path: Path) -> None:
    schema = _app(tmp_path).openapi()

    assert _response_ref(schema, "/api/users", "post", "201").endswith("UserResponse")
    assert _response_ref(schema, "/api/login", "post", "200").endswith("LoginResponse")
    properties = schema["components"]["schemas"]["LoginResponse"]["properties"]
    assert {"token", "refresh_token", "is_chirpy_red"} <= set(properties)
    assert "hashed_password" not in properties


def test_openapi_contains_error_contract_for_auth_failures(tmp_path: Path) -> None:
    schema = _app(tmp_path).openapi()

    assert _response_ref(schema, "/api/refresh", "post", "401").endswith("ApiErrorResponse")
    assert _response_ref(schema, "/api/chirps/{chirp_id}", "delete", "403").endswith(
        "ApiErrorResponse"
    )
    assert "204" in schema["paths"]["/api/polka/webhooks"]["post"]["responses"]
