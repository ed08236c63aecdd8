"""Persistent storage backends."""

from __future__ import annotations

import logging
from pathlib import Path

from chirpy.core.config import StorageConfig
from chirpy.storage.base import ChirpyRepository
from chirpy.storage.mongo import MongoRepository
from chirpy.storage.sqlite import SQLiteRepository

LOGGER = logging.getLogger(__name__)


def create_repository(config: StorageConfig, *, app_root: Path) -> ChirpyRepository:
    """Open MongoDB when ``MONGODB_URI`` is configured, SQLite otherwise."""
    if config.mongodb_uri:
        LOGGER.info("storage_backend_selected", extra={"reason": "mongodb"})
        return MongoRepository.connect(config.mongodb_uri, config.mongodb_db)
    database_path = (app_root / config.sqlite_path).resolve()
    LOGGER.info("storage_backend_selected", extra={"reason": "sqlite"})
    return SQLiteRepository(database_path=database_path)


__all__ = [
    "ChirpyRepository",
    "MongoRepository",
    "SQLiteRepository",
    "create_repository",
]
