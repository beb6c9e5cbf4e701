"""Suggestion review endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from paralello.core.review import approve_suggestion, choose_option, pending_suggestions, reject_suggestion
from paralello.database import get_db
from paralello.models.automation import ActiveSuggestion

router = APIRouter()


class ApproveRequest(BaseModel):
    approved_by: Optional[int] = None
    message: Optional[str] = None


class ChooseRequest(BaseModel):
    index: int


def _suggestion_dict(s: ActiveSuggestion) -> dict:
    return {
        "id": s.id,
        "automation_id": s.automation_id,
        "client_id": s.client_id,
        "client_name": s.client.name if s.client else None,
        "suggestion_date": s.suggestion_date.isoformat(),
        "suggested_options": s.suggested_options,
        "suggested_message": s.suggested_message,
        "context_summary": s.context_summary,
        "status": s.status.value,
        "created_at": s.created_at.isoformat() if s.created_at else None,
    }


def _get_suggestion(db: Session, suggestion_id: int) -> ActiveSuggestion:
    suggestion = db.query(ActiveSuggestion).filter(ActiveSuggestion.id == suggestion_id).first()
    if not suggestion:
        raise HTTPException(status_code=404, detail="Suggestion not found")
    return suggestion


@router.get("/")
def list_pending(organization_id: Optional[int] = None, db: Session = Depends(get_db)):
    """Suggestions awaiting approval."""
    return [_suggestion_dict(s) for s in pending_suggestions(db, organization_id)]


@router.post("/{suggestion_id}/choose")
def choose(suggestion_id: int, data: ChooseRequest, db: Session = Depends(get_db)):
    """Pick one of the generated options."""
    return _suggestion_dict(choose_option(db, _get_suggestion(db, suggestion_id), data.index))


@router.post("/{suggestion_id}/approve")
def approve(suggestion_id: int, data: ApproveRequest, db: Session = Depends(get_db)):
    """Approve a suggestion for sending."""
    suggestion = approve_suggestion(db, _get_suggestion(db, suggestion_id), data.approved_by, data.message)
    return _suggestion_dict(suggestion)


@router.post("/{suggestion_id}/reject")
def reject(suggestion_id: int, db: Session = Depends(get_db)):
    """Reject a suggestion."""
    return _suggestion_dict(reject_suggestion(db, _get_suggestion(db, suggestion_id)))
