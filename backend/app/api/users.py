"""User profile, presence and conversation list endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas import ChannelRead, ConversationRead, UserCreate, UserRead, UserStatusUpdate
from app.services import (
    create_user,
    get_user_by_id,
    get_user_channels,
    get_user_conversations,
    update_user_status,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserCreate, db: Session = Depends(get_db)) -> UserRead:
    """Create the user on first login or return the existing account."""

    return create_user(db, payload)


@router.get("/{user_id}", response_model=UserRead)
def read_user(user_id: str, db: Session = Depends(get_db)) -> UserRead:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.patch("/{user_id}/status", response_model=UserRead)
def change_status(user_id: str, payload: UserStatusUpdate, db: Session = Depends(get_db)) -> UserRead:
    return update_user_status(db, user_id, payload.status)


@router.get("/{user_id}/channels", response_model=list[ChannelRead])
def list_user_channels(user_id: str, db: Session = Depends(get_db)) -> list[ChannelRead]:
    return get_user_channels(db, user_id)


@router.get("/{user_id}/conversations", response_model=list[ConversationRead])
def list_conversations(user_id: str, db: Session = Depends(get_db)) -> list[ConversationRead]:
    """Return channels, groups and direct threads ordered by latest activity."""

    return get_user_conversations(db, user_id)
