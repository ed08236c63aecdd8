"""Polka billing webhook handling."""

from __future__ import annotations

import logging
from typing import Mapping
from uuid import UUID

from pydantic import ValidationError

from chirpy.auth.service import AuthService
from chirpy.billing.models import USER_UPGRADED_EVENT, WebhookEvent
from chirpy.core.exceptions import MalformedInput, NotFound
from chirpy.storage.base import ChirpyRepository

LOGGER = logging.getLogger(__name__)


class BillingWebhookService:
    """Apply subscription events sent by the billing provider."""

    def __init__(self, repo: ChirpyRepository, auth: AuthService) -> None:
        self._repo = repo
        self._auth = auth

    def handle(self, headers: Mapping[str, str], body: bytes) -> bool:
        """Authorize and apply a raw event body; return whether a user was upgraded.

        The API key is checked before the body is even parsed. Unknown event
        types are acknowledged without touching storage.
        """
        self._auth.authorize_webhook(headers)
        try:
            event = WebhookEvent.model_validate_json(body)
        except ValidationError as exc:
            raise MalformedInput("Invalid webhook payload") from exc
        if event.event != USER_UPGRADED_EVENT:
            LOGGER.info("webhook_ignored", extra={"event": event.event})
            return False
        try:
            user_id = UUID(event.data.user_id)
        except ValueError as exc:
            raise MalformedInput("Invalid user id") from exc
        if not self._repo.upgrade_user_tier(user_id):
            raise NotFound("User not found")
        LOGGER.info("user_upgraded", extra={"user_id": user_id, "event": event.event})
        return True
