"""Group conversation creation."""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.core.timeutils import utcnow
from app.models import Group, GroupMember, User
from app.schemas.groups import GroupCreate

logger = logging.getLogger(__name__)


def create_group(db: Session, payload: GroupCreate) -> Group:
    """Create a group whose members are ``member_ids`` plus the creator."""

    member_ids = list(dict.fromkeys([payload.created_by, *payload.member_ids]))

    found = set(db.execute(select(User.id).where(User.id.in_(member_ids))).scalars().all())
    missing = [member_id for member_id in member_ids if member_id not in found]
    if missing:
        raise NotFoundError(f"Users not found: {', '.join(missing)}")

    group = Group(name=payload.name or None, created_by=payload.created_by)
    # Stagger join times so members keep the order they were listed in
    joined_at = utcnow()
    for offset, member_id in enumerate(member_ids):
        group.members.append(
            GroupMember(user_id=member_id, joined_at=joined_at + timedelta(microseconds=offset))
        )
    db.add(group)
    db.commit()
    db.refresh(group)

    logger.info("Group %s created by %s with %d members", group.id, payload.created_by, len(member_ids))
    return group


__all__ = ["create_group"]
