"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEV_PLATFORM = "dev"
_DEV_FALLBACK_SECRET = "dev-insecure-secret-change-me"


@dataclass(frozen=True)
class AuthConfig:
    """Authentication-related configuration."""

    secret_key: str
    polka_key: str
    access_token_ttl_seconds: int
    refresh_token_ttl_seconds: int
    issuer: str


@dataclass(frozen=True)
class StorageConfig:
    """Persistent store selection."""

    sqlite_path: str
    mongodb_uri: str
    mongodb_db: str


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    request_max_bytes: int


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    platform: str
    static_dir: str
    auth: AuthConfig
    storage: StorageConfig
    logging: LoggingConfig
    security: SecurityConfig

    @property
    def is_dev(self) -> bool:
        """Return whether destructive admin operations are permitted."""
        return self.platform == DEV_PLATFORM

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment."""
        platform = os.getenv("PLATFORM", "").strip().lower()
        secret_key = os.getenv("SECRET", "").strip()
        if not secret_key:
            if platform != DEV_PLATFORM:
                raise RuntimeError("SECRET must be set outside the dev platform")
            secret_key = _DEV_FALLBACK_SECRET
        polka_key = os.getenv("POLKA_KEY", "").strip()
        access_ttl = int(os.getenv("CHIRPY_ACCESS_TOKEN_TTL_SECONDS", "3600"))
        refresh_ttl = int(
            os.getenv("CHIRPY_REFRESH_TOKEN_TTL_SECONDS", str(60 * 24 * 60 * 60))
        )
        issuer = os.getenv("CHIRPY_TOKEN_ISSUER", "chirpy").strip() or "chirpy"
        sqlite_path = (
            os.getenv("CHIRPY_SQLITE_PATH", "runtime/chirpy.db").strip()
            or "runtime/chirpy.db"
        )
        mongodb_uri = os.getenv("MONGODB_URI", "").strip()
        mongodb_db = os.getenv("MONGODB_DB", "chirpy").strip() or "chirpy"
        static_dir = os.getenv("CHIRPY_STATIC_DIR", "static").strip() or "static"
        log_level = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"
        request_max_bytes = int(os.getenv("REQUEST_MAX_BYTES", str(1024 * 1024)))

        return AppConfig(
            platform=platform,
            static_dir=static_dir,
            auth=AuthConfig(
                secret_key=secret_key,
                polka_key=polka_key,
                access_token_ttl_seconds=access_ttl,
                refresh_token_ttl_seconds=refresh_ttl,
                issuer=issuer,
            ),
            storage=StorageConfig(
                sqlite_path=sqlite_path,
                mongodb_uri=mongodb_uri,
                mongodb_db=mongodb_db,
            ),
            logging=LoggingConfig(level=log_level),
            security=SecurityConfig(request_max_bytes=request_max_bytes),
        )
