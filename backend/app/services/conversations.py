"""Build the per-user conversation list with unread counters."""

from __future__ import annotations

import logging

from sqlalchemy import and_, or_, select, func
from sqlalchemy.orm import Session

from app.core.timeutils import as_utc
from app.models import Message, MessageReceipt, User
from app.schemas.conversations import ConversationRead, ConversationType
from app.schemas.messages import MessageRead
from app.schemas.users import UserRead
from app.services.membership import (
    list_channel_participants,
    list_channels_for_user,
    list_group_participants,
    list_groups_for_user,
)

logger = logging.getLogger(__name__)

UNNAMED_GROUP = "Unnamed Group"


def direct_thread_condition(user_id: str, peer_id: str):
    """SQL condition matching direct messages exchanged between two users."""

    return and_(
        Message.channel_id.is_(None),
        Message.group_id.is_(None),
        or_(
            and_(Message.author_id == user_id, Message.recipient_id == peer_id),
            and_(Message.author_id == peer_id, Message.recipient_id == user_id),
        ),
    )


def count_unread(db: Session, user_id: str, condition) -> int:
    """Count messages matching ``condition`` that ``user_id`` has no receipt for."""

    stmt = (
        select(func.count(Message.id))
        .outerjoin(
            MessageReceipt,
            and_(MessageReceipt.message_id == Message.id, MessageReceipt.user_id == user_id),
        )
        .where(condition, MessageReceipt.id.is_(None))
    )
    return int(db.execute(stmt).scalar_one())


def _last_message(db: Session, condition) -> Message | None:
    stmt = (
        select(Message)
        .where(condition)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(1)
    )
    return db.execute(stmt).scalars().first()


def _build(
    *,
    conversation_id: str,
    name: str,
    kind: ConversationType,
    participants: list[User],
    last_message: Message | None,
    unread_count: int,
) -> ConversationRead:
    return ConversationRead(
        id=conversation_id,
        name=name,
        type=kind,
        participants=[UserRead.model_validate(user) for user in participants],
        last_message=MessageRead.model_validate(last_message) if last_message else None,
        unread_count=unread_count,
    )


def _channel_conversations(db: Session, user_id: str) -> list[ConversationRead]:
    conversations: list[ConversationRead] = []
    for channel in list_channels_for_user(db, user_id):
        condition = Message.channel_id == channel.id
        conversations.append(
            _build(
                conversation_id=channel.id,
                name=channel.name,
                kind=ConversationType.CHANNEL,
                participants=list_channel_participants(db, channel.id),
                last_message=_last_message(db, condition),
                unread_count=count_unread(db, user_id, condition),
            )
        )
    return conversations


def group_display_name(group_name: str | None, participants: list[User], user_id: str) -> str:
    """Name a group after its other members when it has no explicit name."""

    if group_name:
        return group_name
    others = [user.display_name for user in participants if user.id != user_id]
    return ", ".join(others) or UNNAMED_GROUP


def _group_conversations(db: Session, user_id: str) -> list[ConversationRead]:
    conversations: list[ConversationRead] = []
    for group in list_groups_for_user(db, user_id):
        participants = list_group_participants(db, group.id)
        condition = Message.group_id == group.id
        conversations.append(
            _build(
                conversation_id=group.id,
                name=group_display_name(group.name, participants, user_id),
                kind=ConversationType.GROUP,
                participants=participants,
                last_message=_last_message(db, condition),
                unread_count=count_unread(db, user_id, condition),
            )
        )
    return conversations


def _direct_peer_ids(db: Session, user_id: str) -> list[str]:
    stmt = (
        select(Message.author_id, Message.recipient_id)
        .where(
            Message.channel_id.is_(None),
            Message.group_id.is_(None),
            Message.recipient_id.is_not(None),
            or_(Message.author_id == user_id, Message.recipient_id == user_id),
        )
        .order_by(Message.created_at.desc(), Message.id.desc())
    )
    peers: dict[str, None] = {}
    for author_id, recipient_id in db.execute(stmt).all():
        peer_id = recipient_id if author_id == user_id else author_id
        peers.setdefault(peer_id, None)
    return list(peers)


def _direct_conversations(db: Session, user: User) -> list[ConversationRead]:
    conversations: list[ConversationRead] = []
    for peer_id in _direct_peer_ids(db, user.id):
        peer = db.get(User, peer_id)
        if peer is None:
            continue
        incoming = and_(
            Message.channel_id.is_(None),
            Message.group_id.is_(None),
            Message.author_id == peer_id,
            Message.author_id != user.id,
            Message.recipient_id == user.id,
        )
        conversations.append(
            _build(
                conversation_id=peer.id,
                name=peer.display_name,
                kind=ConversationType.DIRECT,
                participants=[user, peer],
                last_message=_last_message(db, direct_thread_condition(user.id, peer_id)),
                unread_count=count_unread(db, user.id, incoming),
            )
        )
    return conversations


def get_user_conversations(db: Session, user_id: str) -> list[ConversationRead]:
    """Return every channel, group and direct conversation of ``user_id``.

    Conversations are ordered by their latest message, newest first. Those
    without any message follow in their original relative order.
    """

    user = db.get(User, user_id)
    if user is None:
        return []

    conversations = [
        *_channel_conversations(db, user_id),
        *_group_conversations(db, user_id),
        *_direct_conversations(db, user),
    ]

    active = [item for item in conversations if item.last_message is not None]
    idle = [item for item in conversations if item.last_message is None]
    active.sort(key=lambda item: as_utc(item.last_message.created_at), reverse=True)

    logger.debug("Resolved %d conversations for user %s", len(conversations), user_id)
    return active + idle


__all__ = [
    "UNNAMED_GROUP",
    "count_unread",
    "direct_thread_condition",
    "get_user_conversations",
    "group_display_name",
]
