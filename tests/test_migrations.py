from __future__ import annotations

import sqlite3
from pathlib import Path

from chirpy.core.migrations import apply_migrations


def test_apply_migrations_creates_chirpy_tables(tmp_path: Path) -> None:
    db_path = tmp_path / "state.db"

    applied = apply_migrations(db_path)

    connection = sqlite3.connect(str(db_path))
    try:
        cursor = connection.cursor()
        tables = {
            row[0]
            for row in cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }

        assert {"schema_migrations", "users", "chirps", "refresh_tokens"} <= tables

        migration_ids = {
            row[0]
            for row in cursor.execute(
                "SELECT migration_id FROM schema_migrations"
            ).fetchall()
        }
        assert migration_ids == set(applied)
        assert "0001_users.sql" in migration_ids
        assert "0004_users_chirpy_red.sql" in migration_ids

        user_columns = {row[1] for row in cursor.execute("PRAGMA table_info(users)")}
        assert "is_chirpy_red" in user_columns
    finally:
        connection.close()


def test_apply_migrations_is_idempotent(tmp_path: Path) -> None:
    db_path = tmp_path / "state.db"

    apply_migrations(db_path)
    second = apply_migrations(db_path)

    assert second == []
