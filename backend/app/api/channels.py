"""Channel endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas import ChannelCreate, ChannelJoinRequest, ChannelMemberRead, ChannelRead
from app.services import create_channel, join_channel

router = APIRouter(prefix="/channels", tags=["channels"])


@router.post("", response_model=ChannelRead, status_code=status.HTTP_201_CREATED)
def create_channel_endpoint(payload: ChannelCreate, db: Session = Depends(get_db)) -> ChannelRead:
    """Create a channel owned by ``created_by``."""

    return create_channel(db, payload)


@router.post(
    "/{channel_id}/members",
    response_model=ChannelMemberRead,
    status_code=status.HTTP_201_CREATED,
)
def join_channel_endpoint(
    channel_id: str,
    payload: ChannelJoinRequest,
    db: Session = Depends(get_db),
) -> ChannelMemberRead:
    return join_channel(db, channel_id, payload.user_id, payload.role)
