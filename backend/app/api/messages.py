"""HTTP endpoints for sending, listing and searching messages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.schemas import MessageCreate, MessageReadRequest, MessageReceiptRead, MessageWithAuthor
from app.services import get_messages, mark_message_read, search_messages, send_message

router = APIRouter(prefix="/messages", tags=["messages"])

settings = get_settings()


@router.post("", response_model=MessageWithAuthor, status_code=status.HTTP_201_CREATED)
async def create_message(payload: MessageCreate, db: Session = Depends(get_db)) -> MessageWithAuthor:
    """Send a message to a channel, a group or a single recipient."""

    return await send_message(db, payload)


@router.get("", response_model=list[MessageWithAuthor])
def list_messages(
    channel_id: str | None = Query(default=None),
    group_id: str | None = Query(default=None),
    recipient_id: str | None = Query(default=None),
    author_id: str | None = Query(default=None),
    limit: int = Query(default=settings.chat_history_default_limit, ge=1),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
) -> list[MessageWithAuthor]:
    """Return conversation history, newest first."""

    return get_messages(
        db,
        channel_id=channel_id,
        group_id=group_id,
        recipient_id=recipient_id,
        author_id=author_id,
        limit=limit,
        offset=offset,
    )


@router.get("/search", response_model=list[MessageWithAuthor])
def search(
    query: str = Query(..., min_length=1),
    user_id: str = Query(...),
    channel_id: str | None = Query(default=None),
    group_id: str | None = Query(default=None),
    limit: int = Query(default=settings.search_default_limit, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[MessageWithAuthor]:
    return search_messages(db, query, user_id, channel_id=channel_id, group_id=group_id, limit=limit)


@router.post("/{message_id}/read", response_model=MessageReceiptRead)
def mark_read(
    message_id: str,
    payload: MessageReadRequest,
    db: Session = Depends(get_db),
) -> MessageReceiptRead:
    return mark_message_read(db, message_id, payload.user_id)
