"""Pydantic schemas for API payloads."""

from .channels import ChannelCreate, ChannelJoinRequest, ChannelMemberRead, ChannelRead
from .conversations import ConversationRead, ConversationType
from .groups import GroupCreate, GroupRead
from .media import ImageUploadRequest, ImageUploadResponse, LinkPreviewRequest
from .messages import (
    LinkPreview,
    MessageCreate,
    MessageRead,
    MessageReadRequest,
    MessageReceiptRead,
    MessageWithAuthor,
)
from .typing import TypingIndicatorRead, TypingRequest
from .users import UserCreate, UserRead, UserStatusUpdate

__all__ = [
    "UserCreate",
    "UserRead",
    "UserStatusUpdate",
    "ChannelCreate",
    "ChannelRead",
    "ChannelJoinRequest",
    "ChannelMemberRead",
    "GroupCreate",
    "GroupRead",
    "LinkPreview",
    "MessageCreate",
    "MessageRead",
    "MessageWithAuthor",
    "MessageReadRequest",
    "MessageReceiptRead",
    "ConversationRead",
    "ConversationType",
    "TypingRequest",
    "TypingIndicatorRead",
    "ImageUploadRequest",
    "ImageUploadResponse",
    "LinkPreviewRequest",
]
