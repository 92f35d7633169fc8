"""Group conversation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas import GroupCreate, GroupRead
from app.services import create_group

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("", response_model=GroupRead, status_code=status.HTTP_201_CREATED)
def create_group_endpoint(payload: GroupCreate, db: Session = Depends(get_db)) -> GroupRead:
    return create_group(db, payload)
