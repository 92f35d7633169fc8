"""Schemas related to chat messages."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, constr

from app.models.enums import MessageType
from app.schemas.users import UserRead


class LinkPreview(BaseModel):
    """Metadata extracted from the first URL of a text message."""

    url: str
    title: str | None = None
    description: str | None = None
    image: str | None = None


class MessageCreate(BaseModel):
    """Payload for sending a message to a channel, group or user."""

    content: constr(min_length=1)
    type: MessageType = MessageType.TEXT
    author_id: str
    channel_id: str | None = None
    group_id: str | None = None
    recipient_id: str | None = None
    image_url: str | None = None
    reply_to_id: str | None = None


class MessageRead(BaseModel):
    """Serialized representation of a chat message."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    content: str
    type: MessageType
    author_id: str
    channel_id: str | None = None
    group_id: str | None = None
    recipient_id: str | None = None
    image_url: str | None = None
    link_preview: LinkPreview | None = None
    reply_to_id: str | None = None
    edited_at: datetime | None = None
    created_at: datetime


class MessageWithAuthor(MessageRead):
    """Message joined with its author, readers and reply target."""

    author: UserRead
    read_by: list[UserRead] = Field(default_factory=list)
    reply_to: MessageRead | None = None


class MessageReadRequest(BaseModel):
    """Payload for acknowledging a message."""

    user_id: str


class MessageReceiptRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    message_id: str
    user_id: str
    read_at: datetime
