"""Schemas for typing indicators."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TypingRequest(BaseModel):
    """Payload for starting or stopping a typing indicator."""

    user_id: str
    channel_id: str | None = None
    group_id: str | None = None
    recipient_id: str | None = None


class TypingIndicatorRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    channel_id: str | None = None
    group_id: str | None = None
    recipient_id: str | None = None
    started_at: datetime
