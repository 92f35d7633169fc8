"""Typing indicator endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas import TypingIndicatorRead, TypingRequest
from app.services import TypingLocation, get_typing_indicators, start_typing, stop_typing

router = APIRouter(prefix="/typing", tags=["typing"])


def _location(payload: TypingRequest) -> TypingLocation:
    return TypingLocation.of(payload.channel_id, payload.group_id, payload.recipient_id)


@router.post("/start", response_model=TypingIndicatorRead)
def start(payload: TypingRequest, db: Session = Depends(get_db)) -> TypingIndicatorRead:
    return start_typing(db, payload.user_id, _location(payload))


@router.post("/stop", status_code=status.HTTP_204_NO_CONTENT)
def stop(payload: TypingRequest, db: Session = Depends(get_db)) -> Response:
    stop_typing(db, payload.user_id, _location(payload))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[TypingIndicatorRead])
def list_indicators(
    channel_id: str | None = Query(default=None),
    group_id: str | None = Query(default=None),
    recipient_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[TypingIndicatorRead]:
    """Return users currently typing, optionally scoped to one conversation."""

    return get_typing_indicators(db, TypingLocation.of(channel_id, group_id, recipient_id))
