"""Polka webhook payload models."""

from __future__ import annotations

from pydantic import BaseModel, Field

USER_UPGRADED_EVENT = "user.upgraded"


class WebhookData(BaseModel):
    """Event data block."""

    user_id: str = ""


class WebhookEvent(BaseModel):
    """Billing provider event envelope."""

    event: str
    data: WebhookData = Field(default_factory=WebhookData)
