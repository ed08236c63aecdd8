"""FastAPI application factory."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from chirpy.admin.metrics import AdminService, HitCounter
from chirpy.admin.router import create_admin_router
from chirpy.api.http_setup import (
    STATIC_PREFIX,
    register_exception_handlers,
    register_http_middleware,
)
from chirpy.auth.router import create_auth_router
from chirpy.auth.service import AuthService
from chirpy.billing.router import create_billing_router
from chirpy.billing.service import BillingWebhookService
from chirpy.chirps.router import create_chirps_router
from chirpy.chirps.service import ChirpService
from chirpy.core.clock import Clock, utc_now
from chirpy.core.config import AppConfig
from chirpy.storage import ChirpyRepository, create_repository

LOGGER = logging.getLogger(__name__)


def _static_directory(config: AppConfig, app_root: Path) -> Path:
    """Resolve the directory served under ``/app``.

    The app root (which holds ``.env``) and the SQLite file must stay outside it.
    """
    static_dir = (app_root / config.static_dir).resolve()
    protected = [app_root.resolve()]
    if not config.storage.mongodb_uri:
        protected.append((app_root / config.storage.sqlite_path).resolve())
    for path in protected:
        if path.is_relative_to(static_dir):
            raise RuntimeError(
                f"Refusing to serve {static_dir} under {STATIC_PREFIX}: it contains {path}"
            )
    return static_dir


def create_app(
    config: AppConfig,
    *,
    app_root: Path,
    repo: ChirpyRepository | None = None,
    now: Clock = utc_now,
) -> FastAPI:
    """Wire storage, services and routers into a FastAPI app.

    A store that cannot be opened here is fatal.
    """
    static_dir = _static_directory(config, app_root)
    if repo is None:
        repo = create_repository(config.storage, app_root=app_root)

    app = FastAPI(title="Chirpy API", version="1.0.0")
    hit_counter = HitCounter()
    register_http_middleware(app, config=config, logger=LOGGER, hit_counter=hit_counter)
    register_exception_handlers(app, logger=LOGGER)

    auth_service = AuthService(repo, config.auth, now=now)
    chirp_service = ChirpService(repo, auth_service)
    billing_service = BillingWebhookService(repo, auth_service)
    admin_service = AdminService(repo, hit_counter, is_dev=config.is_dev)

    app.include_router(create_admin_router(admin_service))
    app.include_router(create_auth_router(auth_service))
    app.include_router(create_chirps_router(chirp_service, auth_service))
    app.include_router(create_billing_router(billing_service))

    app.mount(
        STATIC_PREFIX,
        StaticFiles(directory=str(static_dir), html=True),
        name="static",
    )

    @app.on_event("shutdown")
    def close_repository() -> None:
        repo.close()

    LOGGER.info("app_created", extra={"reason": config.platform or "default"})
    return app
