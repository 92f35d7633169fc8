"""Message routing, history, read receipts and search."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.config import get_settings
from app.core.errors import (
    AuthorNotFound,
    ChatError,
    InvalidDestination,
    NotAMember,
    NotFoundError,
    RecipientNotFound,
    ReplyCrossConversation,
    ReplyTargetNotFound,
)
from app.models import Message, MessageReceipt, MessageType, User
from app.schemas.messages import (
    LinkPreview,
    MessageCreate,
    MessageRead,
    MessageReceiptRead,
    MessageWithAuthor,
)
from app.schemas.users import UserRead
from app.search import MessageSearchFilters, MessageSearchService
from app.services.conversations import direct_thread_condition
from app.services.link_preview import extract_first_url, fetch_link_preview
from app.services.membership import is_channel_member, is_group_member

logger = logging.getLogger(__name__)

settings = get_settings()

PreviewFetcher = Callable[[str], Awaitable[LinkPreview | None]]


def _message_options() -> tuple:
    return (
        selectinload(Message.author),
        selectinload(Message.receipts).selectinload(MessageReceipt.user),
        selectinload(Message.reply_to),
    )


def serialize_message(message: Message) -> MessageWithAuthor:
    """Join a message with its author, readers and reply target."""

    base = MessageRead.model_validate(message)
    return MessageWithAuthor(
        **base.model_dump(),
        author=UserRead.model_validate(message.author),
        read_by=[UserRead.model_validate(receipt.user) for receipt in message.receipts],
        reply_to=MessageRead.model_validate(message.reply_to) if message.reply_to else None,
    )


def _is_same_conversation(target: Message, payload: MessageCreate) -> bool:
    if payload.channel_id:
        return target.channel_id == payload.channel_id
    if payload.group_id:
        return target.group_id == payload.group_id
    if target.channel_id is not None or target.group_id is not None:
        return False
    pair = {payload.author_id, payload.recipient_id}
    return {target.author_id, target.recipient_id} == pair


def _validate_destination(db: Session, payload: MessageCreate) -> None:
    destinations = [value for value in (payload.channel_id, payload.group_id, payload.recipient_id) if value]
    if len(destinations) != 1:
        raise InvalidDestination()

    if payload.channel_id and not is_channel_member(db, payload.channel_id, payload.author_id):
        raise NotAMember("User is not a member of the specified channel")
    if payload.group_id and not is_group_member(db, payload.group_id, payload.author_id):
        raise NotAMember("User is not a member of the specified group")
    if payload.recipient_id and db.get(User, payload.recipient_id) is None:
        raise RecipientNotFound()

    if payload.reply_to_id:
        target = db.get(Message, payload.reply_to_id)
        if target is None:
            raise ReplyTargetNotFound()
        if not _is_same_conversation(target, payload):
            raise ReplyCrossConversation()


async def _resolve_preview(fetcher: PreviewFetcher, content: str) -> LinkPreview | None:
    url = extract_first_url(content)
    if url is None:
        return None
    try:
        return await fetcher(url)
    except Exception:
        logger.exception("Link preview fetcher failed for %s", url)
        return None


async def send_message(
    db: Session,
    payload: MessageCreate,
    *,
    preview_fetcher: PreviewFetcher = fetch_link_preview,
) -> MessageWithAuthor:
    """Validate and persist a message addressed to exactly one destination."""

    if db.get(User, payload.author_id) is None:
        logger.info("Rejected message from unknown author %s", payload.author_id)
        raise AuthorNotFound()
    try:
        _validate_destination(db, payload)
    except ChatError as exc:
        logger.info("Rejected message from %s: %s", payload.author_id, exc.message)
        raise

    link_preview = None
    if payload.type == MessageType.TEXT:
        link_preview = await _resolve_preview(preview_fetcher, payload.content)

    message = Message(
        content=payload.content,
        type=payload.type,
        author_id=payload.author_id,
        channel_id=payload.channel_id or None,
        group_id=payload.group_id or None,
        recipient_id=payload.recipient_id or None,
        image_url=payload.image_url or None,
        link_preview=link_preview.model_dump() if link_preview else None,
        reply_to_id=payload.reply_to_id or None,
    )
    db.add(message)
    db.commit()

    stored = db.execute(
        select(Message).where(Message.id == message.id).options(*_message_options())
    ).scalar_one()
    return serialize_message(stored)


def get_messages(
    db: Session,
    *,
    channel_id: str | None = None,
    group_id: str | None = None,
    recipient_id: str | None = None,
    author_id: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[MessageWithAuthor]:
    """Return one page of a conversation's history, newest first.

    Exactly one selector is accepted: a channel, a group, or a
    ``recipient_id``/``author_id`` pair naming a direct thread.
    """

    if channel_id and not (group_id or recipient_id or author_id):
        condition = Message.channel_id == channel_id
    elif group_id and not (channel_id or recipient_id or author_id):
        condition = Message.group_id == group_id
    elif recipient_id and author_id and not (channel_id or group_id):
        condition = direct_thread_condition(author_id, recipient_id)
    else:
        return []

    if limit is None:
        limit = settings.chat_history_default_limit
    limit = max(1, min(limit, settings.chat_history_max_limit))

    stmt = (
        select(Message)
        .where(condition)
        .options(*_message_options())
        .order_by(Message.created_at.desc(), Message.id.desc())
        .offset(max(0, offset))
        .limit(limit)
    )
    return [serialize_message(message) for message in db.execute(stmt).scalars().all()]


def _find_receipt(db: Session, message_id: str, user_id: str) -> MessageReceipt | None:
    stmt = select(MessageReceipt).where(
        MessageReceipt.message_id == message_id,
        MessageReceipt.user_id == user_id,
    )
    return db.execute(stmt).scalar_one_or_none()


def mark_message_read(db: Session, message_id: str, user_id: str) -> MessageReceiptRead:
    """Record that ``user_id`` has read ``message_id``; repeated calls are no-ops."""

    if db.get(Message, message_id) is None:
        raise NotFoundError("Message not found")
    if db.get(User, user_id) is None:
        raise NotFoundError("User not found")

    existing = _find_receipt(db, message_id, user_id)
    if existing is not None:
        return MessageReceiptRead.model_validate(existing)

    receipt = MessageReceipt(message_id=message_id, user_id=user_id)
    db.add(receipt)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Another request stored the receipt first
        existing = _find_receipt(db, message_id, user_id)
        if existing is None:
            raise
        return MessageReceiptRead.model_validate(existing)

    db.refresh(receipt)
    return MessageReceiptRead.model_validate(receipt)


def search_messages(
    db: Session,
    query: str,
    user_id: str,
    *,
    channel_id: str | None = None,
    group_id: str | None = None,
    limit: int | None = None,
) -> list[MessageWithAuthor]:
    """Search message content across conversations visible to ``user_id``."""

    if limit is None:
        limit = settings.search_default_limit
    service = MessageSearchService(db)
    messages = service.search(
        user_id,
        query,
        limit=max(1, limit),
        filters=MessageSearchFilters(channel_id=channel_id, group_id=group_id),
        options=_message_options(),
    )
    return [serialize_message(message) for message in messages]


__all__ = [
    "PreviewFetcher",
    "get_messages",
    "mark_message_read",
    "search_messages",
    "send_message",
    "serialize_message",
]
