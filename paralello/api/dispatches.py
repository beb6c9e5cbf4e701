"""Scheduled message (dispatch) endpoints."""

from datetime import datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from paralello.config import settings
from paralello.core.scheduling import utc_naive
from paralello.database import get_db
from paralello.models.dispatch import DispatchStatus, MessageCategory, ScheduledMessage

router = APIRouter()


class DispatchCreate(BaseModel):
    """Dispatch create schema; one row is created per client."""

    organization_id: int
    client_ids: List[int]
    scheduled_at: datetime
    message: str
    category: MessageCategory = MessageCategory.OTHER
    created_by: Optional[int] = None


class DispatchUpdate(BaseModel):
    """Dispatch update schema."""

    scheduled_at: Optional[datetime] = None
    message: Optional[str] = None
    category: Optional[MessageCategory] = None


def _dispatch_dict(m: ScheduledMessage) -> dict:
    return {
        "id": m.id,
        "organization_id": m.organization_id,
        "client_id": m.client_id,
        "scheduled_at": m.scheduled_at.isoformat() + "Z",
        "message": m.message,
        "category": m.category.value,
        "status": m.status.value,
        "sent_at": m.sent_at.isoformat() + "Z" if m.sent_at else None,
    }


def _to_storage(value: datetime) -> datetime:
    """Naive values are wall-clock times in the configured zone."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=ZoneInfo(settings.timezone))
    stored = utc_naive(value)
    if stored <= utc_naive(datetime.now(timezone.utc)):
        raise HTTPException(status_code=422, detail="scheduled_at must be in the future")
    return stored


def _get_dispatch(db: Session, dispatch_id: int) -> ScheduledMessage:
    dispatch = db.query(ScheduledMessage).filter(ScheduledMessage.id == dispatch_id).first()
    if not dispatch:
        raise HTTPException(status_code=404, detail="Dispatch not found")
    return dispatch


@router.get("/")
def list_dispatches(
    organization_id: Optional[int] = None,
    status: Optional[str] = None,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    """List dispatches, soonest first."""
    query = db.query(ScheduledMessage)
    if organization_id is not None:
        query = query.filter(ScheduledMessage.organization_id == organization_id)
    if status:
        try:
            query = query.filter(ScheduledMessage.status == DispatchStatus(status))
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown status {status}")
    messages = query.order_by(ScheduledMessage.scheduled_at.asc()).limit(limit).all()
    return [_dispatch_dict(m) for m in messages]


@router.post("/")
def create_dispatches(data: DispatchCreate, db: Session = Depends(get_db)):
    """Schedule the same message for each selected client."""
    if not data.client_ids:
        raise HTTPException(status_code=422, detail="At least one client is required")
    if not data.message.strip():
        raise HTTPException(status_code=422, detail="Message must not be empty")

    scheduled_at = _to_storage(data.scheduled_at)
    messages = [
        ScheduledMessage(
            organization_id=data.organization_id,
            client_id=client_id,
            scheduled_at=scheduled_at,
            message=data.message,
            category=data.category,
            status=DispatchStatus.PENDING,
            created_by=data.created_by,
        )
        for client_id in data.client_ids
    ]
    db.add_all(messages)
    db.commit()
    return [_dispatch_dict(m) for m in messages]


@router.put("/{dispatch_id}")
def update_dispatch(dispatch_id: int, data: DispatchUpdate, db: Session = Depends(get_db)):
    """Edit a pending dispatch."""
    dispatch = _get_dispatch(db, dispatch_id)
    if not dispatch.is_editable:
        raise HTTPException(status_code=409, detail=f"Dispatch is {dispatch.status.value}")

    update_data = data.dict(exclude_unset=True)
    if update_data.get("scheduled_at") is not None:
        update_data["scheduled_at"] = _to_storage(update_data["scheduled_at"])
    for key, value in update_data.items():
        setattr(dispatch, key, value)
    db.commit()
    db.refresh(dispatch)
    return _dispatch_dict(dispatch)


@router.post("/{dispatch_id}/cancel")
def cancel_dispatch(dispatch_id: int, db: Session = Depends(get_db)):
    """Cancel a pending dispatch."""
    dispatch = _get_dispatch(db, dispatch_id)
    if not dispatch.is_editable:
        raise HTTPException(status_code=409, detail=f"Dispatch is {dispatch.status.value}")
    dispatch.status = DispatchStatus.CANCELLED
    db.commit()
    return _dispatch_dict(dispatch)
