from __future__ import annotations

import json
import uuid

import pytest

from chirpy.auth.service import AuthService
from chirpy.billing.service import BillingWebhookService
from chirpy.core.exceptions import InvalidApiKey, MalformedInput, MissingHeader, NotFound
from tests.fakes import POLKA_KEY, InMemoryRepository, auth_config

API_KEY_HEADERS = {"Authorization": f"ApiKey {POLKA_KEY}"}


def _build_service() -> tuple[BillingWebhookService, InMemoryRepository]:
    repo = InMemoryRepository()
    auth = AuthService(repo, auth_config())
    return BillingWebhookService(repo, auth), repo


def _body(event: str, user_id: str) -> bytes:
    return json.dumps({"event": event, "data": {"user_id": user_id}}).encode("utf-8")


def test_webhook_upgrades_user() -> None:
    service, repo = _build_service()
    user = repo.create_user("a@x.com", "hash")

    upgraded = service.handle(API_KEY_HEADERS, _body("user.upgraded", str(user.id)))

    assert upgraded is True
    assert repo.users[user.id].is_chirpy_red is True


def test_webhook_wrong_key_never_touches_storage() -> None:
    service, repo = _build_service()

    with pytest.raises(InvalidApiKey):
        service.handle({"Authorization": "ApiKey nope"}, b"not even json")
    with pytest.raises(MissingHeader):
        service.handle({}, _body("user.upgraded", str(uuid.uuid4())))

    assert repo.calls == []


def test_webhook_ignores_other_events() -> None:
    service, repo = _build_service()
    user = repo.create_user("a@x.com", "hash")
    repo.calls.clear()

    upgraded = service.handle(API_KEY_HEADERS, _body("user.downgraded", str(user.id)))

    assert upgraded is False
    assert repo.calls == []
    assert repo.users[user.id].is_chirpy_red is False


def test_webhook_unknown_user_not_found() -> None:
    service, _repo = _build_service()

    with pytest.raises(NotFound):
        service.handle(API_KEY_HEADERS, _body("user.upgraded", str(uuid.uuid4())))


def test_webhook_rejects_bad_payloads() -> None:
    service, repo = _build_service()

    with pytest.raises(MalformedInput):
        service.handle(API_KEY_HEADERS, b"{broken")
    with pytest.raises(MalformedInput):
        service.handle(API_KEY_HEADERS, _body("user.upgraded", "not-a-uuid"))
    assert "upgrade_user_tier" not in repo.calls
