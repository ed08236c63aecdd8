"""SQLite migration runner for the chirpy schema."""

from __future__ import annotations

import logging
import re
import sqlite3
from pathlib import Path

LOGGER = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "sql"
_MIGRATION_NAME = re.compile(r"^\d{4}_[a-z0-9_]+\.sql$")


def pending_migrations(applied_ids: set[str]) -> list[Path]:
    """Return migration files not yet recorded, in ascending order."""
    return [
        path
        for path in sorted(MIGRATIONS_DIR.glob("*.sql"))
        if _MIGRATION_NAME.match(path.name) and path.name not in applied_ids
    ]


def apply_migrations(database_path: Path) -> list[str]:
    """Apply pending SQL migrations in ascending order.

    Each migration is committed together with its ``schema_migrations`` row,
    so a failing script leaves the earlier ones recorded. Returns the ids of
    the migrations applied by this call.
    """
    database_path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(str(database_path))
    applied: list[str] = []
    try:
        connection.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
              migration_id TEXT PRIMARY KEY,
              applied_at INTEGER NOT NULL
            )
            """
        )
        connection.commit()
        recorded = {
            row[0]
            for row in connection.execute("SELECT migration_id FROM schema_migrations")
        }

        for migration_file in pending_migrations(recorded):
            migration_id = migration_file.name
            script = migration_file.read_text(encoding="utf-8")
            connection.executescript(
                "BEGIN;\n"
                f"{script}\n"
                "INSERT INTO schema_migrations(migration_id, applied_at) "
                f"VALUES ('{migration_id}', strftime('%s','now'));\n"
                "COMMIT;"
            )
            LOGGER.info("migration_applied", extra={"reason": migration_id})
            applied.append(migration_id)
    finally:
        connection.close()
    return applied
