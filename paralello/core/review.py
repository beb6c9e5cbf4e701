"""Human review of generated suggestions."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from paralello.core.errors import StateError, ValidationError
from paralello.models.automation import ActiveAutomation, ActiveSuggestion, SuggestionStatus

logger = logging.getLogger(__name__)


def pending_suggestions(db: Session, organization_id: Optional[int] = None) -> List[ActiveSuggestion]:
    """Pending suggestions, newest first."""
    query = db.query(ActiveSuggestion).filter(ActiveSuggestion.status == SuggestionStatus.PENDING)
    if organization_id is not None:
        query = query.join(ActiveAutomation).filter(ActiveAutomation.organization_id == organization_id)
    return query.order_by(ActiveSuggestion.created_at.desc()).all()


def _require_pending(suggestion: ActiveSuggestion) -> None:
    if suggestion.status != SuggestionStatus.PENDING:
        raise StateError(f"Suggestion {suggestion.id} is {suggestion.status.value}, not pending")


def choose_option(db: Session, suggestion: ActiveSuggestion, index: int) -> ActiveSuggestion:
    """Select which candidate message will be sent."""
    _require_pending(suggestion)
    options = suggestion.suggested_options or []
    if not 0 <= index < len(options):
        raise ValidationError(f"Option index {index} out of range (0-{len(options) - 1})")
    suggestion.suggested_message = options[index]
    db.commit()
    return suggestion


def approve_suggestion(
    db: Session,
    suggestion: ActiveSuggestion,
    approved_by: Optional[int] = None,
    message: Optional[str] = None,
) -> ActiveSuggestion:
    """Approve a pending suggestion, optionally with an edited message."""
    _require_pending(suggestion)
    if message is not None:
        if not message.strip():
            raise ValidationError("Approved message must not be empty")
        suggestion.suggested_message = message.strip()
    suggestion.status = SuggestionStatus.APPROVED
    suggestion.approved_by = approved_by
    suggestion.approved_at = datetime.utcnow()
    db.commit()
    logger.info(f"Suggestion {suggestion.id} approved by {approved_by}")
    return suggestion


def reject_suggestion(db: Session, suggestion: ActiveSuggestion) -> ActiveSuggestion:
    _require_pending(suggestion)
    suggestion.status = SuggestionStatus.REJECTED
    db.commit()
    logger.info(f"Suggestion {suggestion.id} rejected")
    return suggestion


def mark_sent(db: Session, suggestion: ActiveSuggestion, sent_at: Optional[datetime] = None) -> ActiveSuggestion:
    """Record delivery of an approved suggestion."""
    if suggestion.status != SuggestionStatus.APPROVED:
        raise StateError(f"Suggestion {suggestion.id} is {suggestion.status.value}, not approved")
    suggestion.status = SuggestionStatus.SENT
    suggestion.sent_at = sent_at or datetime.utcnow()
    db.commit()
    return suggestion
