"""Application service helpers."""

from .channels import create_channel, get_user_channels, join_channel
from .conversations import get_user_conversations
from .groups import create_group
from .link_preview import fetch_link_preview
from .messages import get_messages, mark_message_read, search_messages, send_message
from .typing_indicators import TypingLocation, get_typing_indicators, start_typing, stop_typing
from .users import create_user, get_user_by_id, update_user_status

__all__ = [
    "create_user",
    "get_user_by_id",
    "update_user_status",
    "create_channel",
    "join_channel",
    "get_user_channels",
    "create_group",
    "get_user_conversations",
    "send_message",
    "get_messages",
    "mark_message_read",
    "search_messages",
    "TypingLocation",
    "start_typing",
    "stop_typing",
    "get_typing_indicators",
    "fetch_link_preview",
]
