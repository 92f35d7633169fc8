"""Schemas for channels and their memberships."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, constr

from app.models.enums import ChannelType, MemberRole


class ChannelCreate(BaseModel):
    """Payload for creating a channel."""

    name: constr(strip_whitespace=True, min_length=1, max_length=50)
    description: str | None = None
    type: ChannelType
    created_by: str


class ChannelRead(BaseModel):
    """Serialized channel."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    type: ChannelType
    created_by: str
    created_at: datetime
    updated_at: datetime


class ChannelJoinRequest(BaseModel):
    """Payload for adding a user to a channel."""

    user_id: str
    role: MemberRole = Field(default=MemberRole.MEMBER)


class ChannelMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    channel_id: str
    user_id: str
    role: MemberRole
    joined_at: datetime
