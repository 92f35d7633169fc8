"""Database-backed search over the messages a user can see."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from app.models import ChannelMember, GroupMember, Message


@dataclass(frozen=True)
class MessageSearchFilters:
    """Optional conversation filters applied to a search."""

    channel_id: str | None = None
    group_id: str | None = None


class MessageSearchService:
    """Case-insensitive substring search restricted to the caller's conversations."""

    def __init__(self, session: Session):
        self._session = session

    def search(
        self,
        user_id: str,
        query: str,
        *,
        limit: int,
        filters: MessageSearchFilters | None = None,
        options: Sequence = (),
    ) -> list[Message]:
        """Return matching messages, newest first.

        A channel or group filter the user does not belong to yields no results.
        """

        if filters is None:
            filters = MessageSearchFilters()

        access = self._access_condition(user_id, filters)
        if access is None:
            return []

        stmt = (
            select(Message)
            .where(self._build_matcher(query), access)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
        )
        if options:
            stmt = stmt.options(*options)
        return list(self._session.execute(stmt).scalars().all())

    # Internal helpers -----------------------------------------------------

    def _build_matcher(self, query: str):
        escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return Message.content.ilike(f"%{escaped}%", escape="\\")

    def _is_member(self, model, column, target_id: str, user_id: str) -> bool:
        stmt = select(model.id).where(column == target_id, model.user_id == user_id).limit(1)
        return self._session.execute(stmt).first() is not None

    def _access_condition(self, user_id: str, filters: MessageSearchFilters):
        scoped: list = []
        if filters.channel_id:
            if not self._is_member(ChannelMember, ChannelMember.channel_id, filters.channel_id, user_id):
                return None
            scoped.append(Message.channel_id == filters.channel_id)
        if filters.group_id:
            if not self._is_member(GroupMember, GroupMember.group_id, filters.group_id, user_id):
                return None
            scoped.append(Message.group_id == filters.group_id)
        if scoped:
            return or_(*scoped)

        member_channels = select(ChannelMember.channel_id).where(ChannelMember.user_id == user_id)
        member_groups = select(GroupMember.group_id).where(GroupMember.user_id == user_id)
        direct = and_(
            Message.channel_id.is_(None),
            Message.group_id.is_(None),
            or_(Message.author_id == user_id, Message.recipient_id == user_id),
        )
        return or_(
            direct,
            Message.channel_id.in_(member_channels),
            Message.group_id.in_(member_groups),
        )
