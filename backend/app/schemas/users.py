"""Schemas related to user profiles."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, constr

from app.models.enums import AuthProvider, UserStatus


class UserCreate(BaseModel):
    """Payload sent after a successful social login."""

    email: constr(strip_whitespace=True, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    display_name: constr(strip_whitespace=True, min_length=1, max_length=128)
    avatar_url: str | None = None
    provider: AuthProvider
    provider_id: constr(min_length=1, max_length=255)


class UserRead(BaseModel):
    """Public user profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    display_name: str
    avatar_url: str | None = None
    provider: AuthProvider
    provider_id: str
    status: UserStatus = UserStatus.OFFLINE
    last_seen: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserStatusUpdate(BaseModel):
    """Payload for changing a user's presence status."""

    status: UserStatus = Field(..., description="New presence status")
