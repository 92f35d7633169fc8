"""Conversation list entries returned to the client sidebar."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from app.schemas.messages import MessageRead
from app.schemas.users import UserRead


class ConversationType(str, Enum):
    CHANNEL = "channel"
    GROUP = "group"
    DIRECT = "direct"


class ConversationRead(BaseModel):
    """One channel, group or direct thread the user takes part in.

    For direct conversations ``id`` is the peer's user id.
    """

    id: str
    name: str
    type: ConversationType
    participants: list[UserRead] = Field(default_factory=list)
    last_message: MessageRead | None = None
    unread_count: int = Field(0, ge=0)
