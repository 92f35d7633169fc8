"""Database models package."""

from .base import Base
from .chat import (
    Channel,
    ChannelMember,
    Group,
    GroupMember,
    Message,
    MessageReceipt,
    TypingIndicator,
    User,
)
from .enums import AuthProvider, ChannelType, MemberRole, MessageType, UserStatus

__all__ = [
    "Base",
    "User",
    "Channel",
    "ChannelMember",
    "Group",
    "GroupMember",
    "Message",
    "MessageReceipt",
    "TypingIndicator",
    "AuthProvider",
    "ChannelType",
    "MemberRole",
    "MessageType",
    "UserStatus",
]
