"""Channel creation and membership management."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.models import Channel, ChannelMember, MemberRole, User
from app.schemas.channels import ChannelCreate
from app.services.membership import is_channel_member, list_channels_for_user

logger = logging.getLogger(__name__)


def create_channel(db: Session, payload: ChannelCreate) -> Channel:
    """Create a channel and enrol its creator as owner."""

    if db.get(User, payload.created_by) is None:
        raise NotFoundError("User not found")

    channel = Channel(
        name=payload.name,
        description=payload.description,
        type=payload.type,
        created_by=payload.created_by,
    )
    channel.members.append(ChannelMember(user_id=payload.created_by, role=MemberRole.OWNER))
    db.add(channel)
    db.commit()
    db.refresh(channel)

    logger.info("Channel %s created by %s", channel.id, payload.created_by)
    return channel


def join_channel(
    db: Session,
    channel_id: str,
    user_id: str,
    role: MemberRole = MemberRole.MEMBER,
) -> ChannelMember:
    if db.get(User, user_id) is None:
        raise NotFoundError("User not found")
    if db.get(Channel, channel_id) is None:
        raise NotFoundError("Channel not found")
    if is_channel_member(db, channel_id, user_id):
        raise ConflictError("User is already a member of this channel")

    membership = ChannelMember(channel_id=channel_id, user_id=user_id, role=role)
    db.add(membership)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("User is already a member of this channel") from exc

    db.refresh(membership)
    return membership


def get_user_channels(db: Session, user_id: str) -> list[Channel]:
    return list_channels_for_user(db, user_id)


__all__ = ["create_channel", "join_channel", "get_user_channels"]
