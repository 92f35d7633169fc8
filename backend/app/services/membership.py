"""Read-only queries over channel and group membership."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Channel, ChannelMember, Group, GroupMember, User


def list_channels_for_user(db: Session, user_id: str) -> list[Channel]:
    """Return channels the user belongs to, in order of joining."""

    stmt = (
        select(Channel)
        .join(ChannelMember, ChannelMember.channel_id == Channel.id)
        .where(ChannelMember.user_id == user_id)
        .order_by(ChannelMember.joined_at, Channel.id)
    )
    return list(db.execute(stmt).scalars().all())


def list_groups_for_user(db: Session, user_id: str) -> list[Group]:
    """Return groups the user belongs to, in order of joining."""

    stmt = (
        select(Group)
        .join(GroupMember, GroupMember.group_id == Group.id)
        .where(GroupMember.user_id == user_id)
        .order_by(GroupMember.joined_at, Group.id)
    )
    return list(db.execute(stmt).scalars().all())


def is_channel_member(db: Session, channel_id: str, user_id: str) -> bool:
    stmt = select(ChannelMember.id).where(
        ChannelMember.channel_id == channel_id,
        ChannelMember.user_id == user_id,
    )
    return db.execute(stmt.limit(1)).first() is not None


def is_group_member(db: Session, group_id: str, user_id: str) -> bool:
    stmt = select(GroupMember.id).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
    )
    return db.execute(stmt.limit(1)).first() is not None


def list_channel_participants(db: Session, channel_id: str) -> list[User]:
    stmt = (
        select(User)
        .join(ChannelMember, ChannelMember.user_id == User.id)
        .where(ChannelMember.channel_id == channel_id)
        .order_by(ChannelMember.joined_at, ChannelMember.id)
    )
    return list(db.execute(stmt).scalars().all())


def list_group_participants(db: Session, group_id: str) -> list[User]:
    stmt = (
        select(User)
        .join(GroupMember, GroupMember.user_id == User.id)
        .where(GroupMember.group_id == group_id)
        .order_by(GroupMember.joined_at, GroupMember.id)
    )
    return list(db.execute(stmt).scalars().all())


__all__ = [
    "list_channels_for_user",
    "list_groups_for_user",
    "is_channel_member",
    "is_group_member",
    "list_channel_participants",
    "list_group_participants",
]
