"""SQLite-backed repository for users, chirps and refresh tokens."""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Iterator
from uuid import UUID

from chirpy.auth.models import RefreshTokenRecord, UserRecord
from chirpy.chirps.models import ChirpRecord
from chirpy.core.clock import Clock, utc_now
from chirpy.core.exceptions import (
    ChirpyError,
    Conflict,
    MalformedInput,
    NotFound,
    StorageUnavailable,
)
from chirpy.core.migrations import apply_migrations


def _ts(value: datetime) -> str:
    """Serialize datetime for lexicographically ordered TEXT columns."""
    return value.isoformat(timespec="microseconds")


def _integrity_error(exc: sqlite3.IntegrityError) -> ChirpyError:
    """Translate a constraint failure without leaking the driver message."""
    detail = str(exc)
    if detail.startswith("UNIQUE constraint failed: users.email"):
        return Conflict("Email already registered")
    if detail.startswith("FOREIGN KEY constraint failed"):
        # Referenced user is gone, e.g. a session outliving a reset.
        return NotFound("User not found")
    return MalformedInput("Invalid record")


class SQLiteRepository:
    """Repository over a single SQLite connection guarded by a lock."""

    def __init__(self, *, database_path: Path, now: Clock = utc_now) -> None:
        """Apply migrations and open the connection."""
        try:
            apply_migrations(database_path)
            self._connection = sqlite3.connect(
                str(database_path), check_same_thread=False
            )
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot open database: {exc}") from exc
        self._connection.row_factory = sqlite3.Row
        self._connection.execute("PRAGMA foreign_keys = ON")
        self._lock = Lock()
        self._now = now

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Serialize access and translate driver errors."""
        with self._lock:
            try:
                with self._connection:
                    yield self._connection
            except sqlite3.IntegrityError as exc:
                raise _integrity_error(exc) from exc
            except sqlite3.Error as exc:
                raise StorageUnavailable("Storage unavailable") from exc

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        """Insert a new user."""
        now = _ts(self._now())
        user_id = str(uuid.uuid4())
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO users (id, created_at, updated_at, email, hashed_password)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, now, now, email, password_hash),
            )
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return UserRecord.model_validate(dict(row))

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Return user by email."""
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        return UserRecord.model_validate(dict(row)) if row else None

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        """Return user by id."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE id = ?", (str(user_id),)
            ).fetchone()
        return UserRecord.model_validate(dict(row)) if row else None

    def update_user(
        self, user_id: UUID, email: str, password_hash: str
    ) -> UserRecord | None:
        """Replace email and password hash of an existing user."""
        with self._transaction() as conn:
            conn.execute(
                """
                UPDATE users SET email = ?, hashed_password = ?, updated_at = ?
                WHERE id = ?
                """,
                (email, password_hash, _ts(self._now()), str(user_id)),
            )
            row = conn.execute(
                "SELECT * FROM users WHERE id = ?", (str(user_id),)
            ).fetchone()
        return UserRecord.model_validate(dict(row)) if row else None

    def upgrade_user_tier(self, user_id: UUID) -> bool:
        """Mark user as Chirpy Red."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE users SET is_chirpy_red = 1, updated_at = ? WHERE id = ?",
                (_ts(self._now()), str(user_id)),
            )
        return cursor.rowcount > 0

    def create_refresh_token(
        self, token: str, user_id: UUID, expires_at: datetime
    ) -> RefreshTokenRecord:
        """Persist a newly issued refresh token."""
        now = _ts(self._now())
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO refresh_tokens (token, created_at, updated_at, user_id, expires_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (token, now, now, str(user_id), _ts(expires_at)),
            )
            row = conn.execute(
                "SELECT * FROM refresh_tokens WHERE token = ?", (token,)
            ).fetchone()
        return RefreshTokenRecord.model_validate(dict(row))

    def get_refresh_token(self, token: str) -> RefreshTokenRecord | None:
        """Return refresh token record."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM refresh_tokens WHERE token = ?", (token,)
            ).fetchone()
        return RefreshTokenRecord.model_validate(dict(row)) if row else None

    def revoke_refresh_token(self, token: str, revoked_at: datetime) -> bool:
        """Set ``revoked_at`` unless already set."""
        with self._transaction() as conn:
            conn.execute(
                """
                UPDATE refresh_tokens SET revoked_at = ?, updated_at = ?
                WHERE token = ? AND revoked_at IS NULL
                """,
                (_ts(revoked_at), _ts(revoked_at), token),
            )
            row = conn.execute(
                "SELECT 1 FROM refresh_tokens WHERE token = ?", (token,)
            ).fetchone()
        return row is not None

    def get_user_id_from_refresh_token(self, token: str) -> UUID | None:
        """Return the owner of a refresh token."""
        with self._transaction() as conn:
            row = conn.execute(
                """
                SELECT users.id AS id FROM users
                JOIN refresh_tokens ON refresh_tokens.user_id = users.id
                WHERE refresh_tokens.token = ?
                """,
                (token,),
            ).fetchone()
        return UUID(row["id"]) if row else None

    def create_chirp(self, body: str, user_id: UUID) -> ChirpRecord:
        """Insert a new chirp."""
        now = _ts(self._now())
        chirp_id = str(uuid.uuid4())
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO chirps (id, created_at, updated_at, body, user_id)
                VALUES (?, ?, ?, ?, ?)
                """,
                (chirp_id, now, now, body, str(user_id)),
            )
            row = conn.execute("SELECT * FROM chirps WHERE id = ?", (chirp_id,)).fetchone()
        return ChirpRecord.model_validate(dict(row))

    def get_chirp_by_id(self, chirp_id: UUID) -> ChirpRecord | None:
        """Return chirp by id."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM chirps WHERE id = ?", (str(chirp_id),)
            ).fetchone()
        return ChirpRecord.model_validate(dict(row)) if row else None

    def list_chirps(self, author_id: UUID | None = None) -> list[ChirpRecord]:
        """List chirps ordered by creation time, oldest first."""
        with self._transaction() as conn:
            if author_id is None:
                rows = conn.execute(
                    "SELECT * FROM chirps ORDER BY created_at ASC, rowid ASC"
                ).fetchall()
            else:
                rows = conn.execute(
                    """
                    SELECT * FROM chirps WHERE user_id = ?
                    ORDER BY created_at ASC, rowid ASC
                    """,
                    (str(author_id),),
                ).fetchall()
        return [ChirpRecord.model_validate(dict(row)) for row in rows]

    def delete_chirp(self, chirp_id: UUID) -> bool:
        """Delete chirp."""
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM chirps WHERE id = ?", (str(chirp_id),))
        return cursor.rowcount > 0

    def reset(self) -> None:
        """Delete all users, chirps and refresh tokens."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM refresh_tokens")
            conn.execute("DELETE FROM chirps")
            conn.execute("DELETE FROM users")

    def close(self) -> None:
        """Close the SQLite connection."""
        with self._lock:
            self._connection.close()
