"""Lifecycle of ephemeral "user is typing" markers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.errors import NotFoundError
from app.core.timeutils import as_utc, utcnow
from app.models import TypingIndicator, User
from app.schemas.typing import TypingIndicatorRead

logger = logging.getLogger(__name__)

settings = get_settings()


@dataclass(frozen=True)
class TypingLocation:
    """Where a user is typing. Two locations are equal when all fields match."""

    channel_id: str | None = None
    group_id: str | None = None
    recipient_id: str | None = None

    @classmethod
    def of(
        cls,
        channel_id: str | None = None,
        group_id: str | None = None,
        recipient_id: str | None = None,
    ) -> "TypingLocation":
        return cls(channel_id or None, group_id or None, recipient_id or None)

    @property
    def is_empty(self) -> bool:
        return not (self.channel_id or self.group_id or self.recipient_id)

    @property
    def key(self) -> str:
        parts = [
            f"{label}:{value}"
            for label, value in (
                ("channel", self.channel_id),
                ("group", self.group_id),
                ("direct", self.recipient_id),
            )
            if value
        ]
        return ";".join(parts) or "none"


def _find(db: Session, user_id: str, location: TypingLocation) -> TypingIndicator | None:
    stmt = select(TypingIndicator).where(
        TypingIndicator.user_id == user_id,
        TypingIndicator.location_key == location.key,
    )
    return db.execute(stmt).scalar_one_or_none()


def _refreshed_at(previous: datetime) -> datetime:
    now = utcnow()
    previous = as_utc(previous)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def purge_stale_indicators(db: Session) -> int:
    """Delete indicators of every user older than the cleanup window."""

    cutoff = utcnow() - timedelta(seconds=settings.typing_cleanup_seconds)
    result = db.execute(
        delete(TypingIndicator)
        .where(TypingIndicator.started_at < cutoff)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


def start_typing(db: Session, user_id: str, location: TypingLocation) -> TypingIndicatorRead:
    """Create or refresh the indicator for ``user_id`` at ``location``."""

    if db.get(User, user_id) is None:
        raise NotFoundError("User not found")

    removed = purge_stale_indicators(db)
    if removed:
        logger.debug("Removed %d stale typing indicators", removed)

    indicator = _find(db, user_id, location)
    if indicator is not None:
        indicator.started_at = _refreshed_at(indicator.started_at)
    else:
        indicator = TypingIndicator(
            user_id=user_id,
            channel_id=location.channel_id,
            group_id=location.group_id,
            recipient_id=location.recipient_id,
            location_key=location.key,
            started_at=utcnow(),
        )
        db.add(indicator)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # A concurrent request inserted the same (user, location) row
        indicator = _find(db, user_id, location)
        if indicator is None:
            raise
        indicator.started_at = _refreshed_at(indicator.started_at)
        db.commit()

    db.refresh(indicator)
    return TypingIndicatorRead.model_validate(indicator)


def stop_typing(db: Session, user_id: str, location: TypingLocation | None = None) -> None:
    """Remove the user's indicator at ``location``, or all of them without one."""

    stmt = delete(TypingIndicator).where(TypingIndicator.user_id == user_id)
    if location is not None and not location.is_empty:
        stmt = stmt.where(TypingIndicator.location_key == location.key)
    db.execute(stmt.execution_options(synchronize_session="fetch"))
    db.commit()


def get_typing_indicators(db: Session, location: TypingLocation | None = None) -> list[TypingIndicatorRead]:
    """Return indicators started within the visibility window."""

    cutoff = utcnow() - timedelta(seconds=settings.typing_visibility_seconds)
    stmt = select(TypingIndicator).where(TypingIndicator.started_at >= cutoff)
    if location is not None:
        if location.channel_id:
            stmt = stmt.where(TypingIndicator.channel_id == location.channel_id)
        if location.group_id:
            stmt = stmt.where(TypingIndicator.group_id == location.group_id)
        if location.recipient_id:
            stmt = stmt.where(TypingIndicator.recipient_id == location.recipient_id)
    stmt = stmt.order_by(TypingIndicator.started_at, TypingIndicator.id)
    return [TypingIndicatorRead.model_validate(row) for row in db.execute(stmt).scalars().all()]


__all__ = [
    "TypingLocation",
    "get_typing_indicators",
    "purge_stale_indicators",
    "start_typing",
    "stop_typing",
]
