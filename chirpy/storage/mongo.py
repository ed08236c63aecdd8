"""MongoDB-backed repository for users, chirps and refresh tokens."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator
from uuid import UUID

from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from chirpy.auth.models import RefreshTokenRecord, UserRecord
from chirpy.chirps.models import ChirpRecord
from chirpy.core.clock import Clock, utc_now
from chirpy.core.exceptions import Conflict, NotFound, StorageUnavailable

_NO_ID = {"_id": 0}


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Map driver errors onto the domain taxonomy."""
    try:
        yield
    except DuplicateKeyError as exc:
        raise Conflict("Record already exists") from exc
    except PyMongoError as exc:
        raise StorageUnavailable("Storage unavailable") from exc


class MongoRepository:
    """Repository over the ``users``, ``chirps`` and ``refresh_tokens`` collections."""

    def __init__(self, database: Any, *, now: Clock = utc_now, client: Any = None) -> None:
        """Bind collections and ensure indexes."""
        self._client = client
        self._users = database["users"]
        self._chirps = database["chirps"]
        self._refresh = database["refresh_tokens"]
        self._now = now
        with _translate_errors():
            self._users.create_index("id", unique=True)
            self._users.create_index("email", unique=True)
            self._chirps.create_index("id", unique=True)
            self._chirps.create_index([("user_id", ASCENDING), ("created_at", ASCENDING)])
            self._refresh.create_index("token", unique=True)

    @classmethod
    def connect(cls, uri: str, db_name: str, *, now: Clock = utc_now) -> "MongoRepository":
        """Open a client, verify connectivity and bind the database."""
        client: Any = MongoClient(uri, serverSelectionTimeoutMS=3000, tz_aware=True)
        with _translate_errors():
            client.admin.command("ping")
        return cls(client[db_name], now=now, client=client)

    def _require_user(self, user_id: UUID) -> None:
        """Reject writes referencing a missing user, as SQLite's foreign keys do."""
        with _translate_errors():
            exists = self._users.find_one({"id": str(user_id)}, {"_id": 1})
        if exists is None:
            raise NotFound("User not found")

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        """Insert a new user."""
        now = self._now()
        doc = {
            "id": str(uuid.uuid4()),
            "created_at": now,
            "updated_at": now,
            "email": email,
            "hashed_password": password_hash,
            "is_chirpy_red": False,
        }
        with _translate_errors():
            self._users.insert_one(dict(doc))
        return UserRecord.model_validate(doc)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Return user by email."""
        with _translate_errors():
            doc = self._users.find_one({"email": email}, _NO_ID)
        return UserRecord.model_validate(doc) if doc else None

    def get_user_by_id(self, user_id: UUID) -> UserRecord | None:
        """Return user by id."""
        with _translate_errors():
            doc = self._users.find_one({"id": str(user_id)}, _NO_ID)
        return UserRecord.model_validate(doc) if doc else None

    def update_user(
        self, user_id: UUID, email: str, password_hash: str
    ) -> UserRecord | None:
        """Replace email and password hash of an existing user."""
        with _translate_errors():
            self._users.update_one(
                {"id": str(user_id)},
                {
                    "$set": {
                        "email": email,
                        "hashed_password": password_hash,
                        "updated_at": self._now(),
                    }
                },
            )
            doc = self._users.find_one({"id": str(user_id)}, _NO_ID)
        return UserRecord.model_validate(doc) if doc else None

    def upgrade_user_tier(self, user_id: UUID) -> bool:
        """Mark user as Chirpy Red."""
        with _translate_errors():
            result = self._users.update_one(
                {"id": str(user_id)},
                {"$set": {"is_chirpy_red": True, "updated_at": self._now()}},
            )
        return result.matched_count > 0

    def create_refresh_token(
        self, token: str, user_id: UUID, expires_at: datetime
    ) -> RefreshTokenRecord:
        """Persist a newly issued refresh token."""
        self._require_user(user_id)
        now = self._now()
        doc = {
            "token": token,
            "created_at": now,
            "updated_at": now,
            "user_id": str(user_id),
            "expires_at": expires_at,
            "revoked_at": None,
        }
        with _translate_errors():
            self._refresh.insert_one(dict(doc))
        return RefreshTokenRecord.model_validate(doc)

    def get_refresh_token(self, token: str) -> RefreshTokenRecord | None:
        """Return refresh token record."""
        with _translate_errors():
            doc = self._refresh.find_one({"token": token}, _NO_ID)
        return RefreshTokenRecord.model_validate(doc) if doc else None

    def revoke_refresh_token(self, token: str, revoked_at: datetime) -> bool:
        """Set ``revoked_at`` unless already set."""
        with _translate_errors():
            self._refresh.update_one(
                {"token": token, "revoked_at": None},
                {"$set": {"revoked_at": revoked_at, "updated_at": revoked_at}},
            )
            doc = self._refresh.find_one({"token": token}, _NO_ID)
        return doc is not None

    def get_user_id_from_refresh_token(self, token: str) -> UUID | None:
        """Return the owner of a refresh token."""
        with _translate_errors():
            doc = self._refresh.find_one({"token": token}, _NO_ID)
            if doc is None:
                return None
            user = self._users.find_one({"id": doc["user_id"]}, _NO_ID)
        return UUID(user["id"]) if user else None

    def create_chirp(self, body: str, user_id: UUID) -> ChirpRecord:
        """Insert a new chirp."""
        self._require_user(user_id)
        now = self._now()
        doc = {
            "id": str(uuid.uuid4()),
            "created_at": now,
            "updated_at": now,
            "body": body,
            "user_id": str(user_id),
        }
        with _translate_errors():
            self._chirps.insert_one(dict(doc))
        return ChirpRecord.model_validate(doc)

    def get_chirp_by_id(self, chirp_id: UUID) -> ChirpRecord | None:
        """Return chirp by id."""
        with _translate_errors():
            doc = self._chirps.find_one({"id": str(chirp_id)}, _NO_ID)
        return ChirpRecord.model_validate(doc) if doc else None

    def list_chirps(self, author_id: UUID | None = None) -> list[ChirpRecord]:
        """List chirps ordered by creation time, oldest first."""
        query = {} if author_id is None else {"user_id": str(author_id)}
        with _translate_errors():
            docs = list(self._chirps.find(query, _NO_ID).sort("created_at", ASCENDING))
        return [ChirpRecord.model_validate(doc) for doc in docs]

    def delete_chirp(self, chirp_id: UUID) -> bool:
        """Delete chirp."""
        with _translate_errors():
            result = self._chirps.delete_one({"id": str(chirp_id)})
        return result.deleted_count > 0

    def reset(self) -> None:
        """Delete all users, chirps and refresh tokens."""
        with _translate_errors():
            self._refresh.delete_many({})
            self._chirps.delete_many({})
            self._users.delete_many({})

    def close(self) -> None:
        """Close the MongoDB client when this repository owns it."""
        if self._client is not None:
            self._client.close()
