"""Schemas for group conversations."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, constr


class GroupCreate(BaseModel):
    """Payload for creating a group with its initial members."""

    name: constr(strip_whitespace=True, max_length=128) | None = None
    created_by: str
    member_ids: list[str] = Field(..., min_length=1, description="Initial member identifiers")


class GroupRead(BaseModel):
    """Serialized group."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime
