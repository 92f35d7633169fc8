from __future__ import annotations

from enum import Enum


class UserStatus(str, Enum):
    """User-configurable presence indicator."""

    ONLINE = "online"
    AWAY = "away"
    BUSY = "busy"
    OFFLINE = "offline"


class AuthProvider(str, Enum):
    """Social login providers a user can originate from."""

    GOOGLE = "google"
    GITHUB = "github"
    DISCORD = "discord"


class ChannelType(str, Enum):
    """Visibility of a channel."""

    PUBLIC = "public"
    PRIVATE = "private"


class MessageType(str, Enum):
    """Kinds of message payloads."""

    TEXT = "text"
    IMAGE = "image"
    SYSTEM = "system"


class MemberRole(str, Enum):
    """Roles that a user can have inside a channel."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
