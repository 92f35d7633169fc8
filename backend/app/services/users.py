"""User registration and presence updates."""

from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.core.timeutils import utcnow
from app.models import User, UserStatus
from app.schemas.users import UserCreate

logger = logging.getLogger(__name__)


def _find_existing(db: Session, payload: UserCreate) -> User | None:
    stmt = select(User).where(
        or_(
            (User.provider == payload.provider) & (User.provider_id == payload.provider_id),
            User.email == payload.email,
        )
    )
    return db.execute(stmt.limit(1)).scalars().first()


def create_user(db: Session, payload: UserCreate) -> User:
    """Return the user for a social identity, creating it on first login."""

    existing = _find_existing(db, payload)
    if existing is not None:
        return existing

    user = User(
        email=payload.email,
        display_name=payload.display_name,
        avatar_url=payload.avatar_url,
        provider=payload.provider,
        provider_id=payload.provider_id,
        status=UserStatus.OFFLINE,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = _find_existing(db, payload)
        if existing is None:
            raise
        return existing

    db.refresh(user)
    logger.info("Registered user %s via %s", user.id, user.provider.value)
    return user


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def update_user_status(db: Session, user_id: str, status: UserStatus) -> User:
    """Change presence status and stamp ``last_seen``."""

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    user.status = status
    user.last_seen = utcnow()
    db.commit()
    db.refresh(user)
    return user


__all__ = ["create_user", "get_user_by_id", "update_user_status"]
