"""AI agent conversation updates with the manual-override gate."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from paralello.core.errors import ValidationError
from paralello.models.conversation import AIConversation, AIConversationMessage

logger = logging.getLogger(__name__)

_OPTIONAL_FIELDS = (
    "contact_name",
    "contact_phone",
    "summary",
    "sentiment",
    "sentiment_score",
    "session_metrics",
    "resolution_reason",
)


@dataclass
class ConversationMessage:
    role: str
    content: str
    tokens_used: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ConversationUpdate:
    """Status update pushed by an AI agent for one contact."""

    contact_identifier: str
    status: str
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    summary: Optional[str] = None
    sentiment: Optional[str] = None
    sentiment_score: Optional[float] = None
    session_metrics: Optional[Dict[str, Any]] = None
    resolution_reason: Optional[str] = None
    messages: List[ConversationMessage] = field(default_factory=list)


def apply_conversation_update(db: Session, agent_id: int, update: ConversationUpdate) -> Dict[str, Any]:
    """
    Upsert the conversation for (agent, contact) and log its messages.

    When a human has taken over the conversation (manual override) nothing is
    written and the result reports ``skipped``.
    """
    if not update.contact_identifier or not update.status:
        raise ValidationError("Missing required fields: contact_identifier, status")

    conversation = (
        db.query(AIConversation)
        .filter(
            AIConversation.agent_id == agent_id,
            AIConversation.contact_identifier == update.contact_identifier,
        )
        .first()
    )

    if conversation is not None and conversation.is_manual_override:
        logger.info(f"Manual override active for conversation {conversation.id}, update ignored")
        return {
            "success": True,
            "skipped": True,
            "message": "Manual override active. Update ignored.",
            "id": conversation.id,
        }

    if conversation is None:
        conversation = AIConversation(agent_id=agent_id, contact_identifier=update.contact_identifier)
        db.add(conversation)

    conversation.status = update.status
    for name in _OPTIONAL_FIELDS:
        value = getattr(update, name)
        if value is not None:
            setattr(conversation, name, value)
    conversation.last_interaction_at = datetime.utcnow()
    db.flush()

    for message in update.messages:
        db.add(
            AIConversationMessage(
                conversation_id=conversation.id,
                role=message.role,
                content=message.content,
                tokens_used=message.tokens_used or 0,
                metadata_=message.metadata or {},
            )
        )
    db.commit()
    return {"success": True, "conversation_id": conversation.id}


def set_manual_override(db: Session, conversation: AIConversation, enabled: bool) -> AIConversation:
    """Hand a conversation to (or back from) a human operator."""
    conversation.is_manual_override = enabled
    db.commit()
    return conversation
