"""AI agent conversation endpoints."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from paralello.core.conversations import (
    ConversationMessage,
    ConversationUpdate,
    apply_conversation_update,
    set_manual_override,
)
from paralello.database import get_db
from paralello.models.conversation import AIConversation

router = APIRouter()


class MessagePayload(BaseModel):
    role: str
    content: str
    tokens_used: int = 0
    metadata: Dict[str, Any] = {}


class ConversationUpdatePayload(BaseModel):
    contact_identifier: str
    status: str
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    summary: Optional[str] = None
    sentiment: Optional[str] = None
    sentiment_score: Optional[float] = None
    session_metrics: Optional[Dict[str, Any]] = None
    resolution_reason: Optional[str] = None
    messages: List[MessagePayload] = []


class OverrideRequest(BaseModel):
    enabled: bool


@router.post("/agents/{agent_id}")
def update_conversation(agent_id: int, payload: ConversationUpdatePayload, db: Session = Depends(get_db)):
    """Status update from an AI agent; ignored while a human has taken over."""
    data = payload.dict()
    messages = [ConversationMessage(**m) for m in data.pop("messages")]
    return apply_conversation_update(db, agent_id, ConversationUpdate(**data, messages=messages))


@router.put("/{conversation_id}/override")
def toggle_override(conversation_id: int, data: OverrideRequest, db: Session = Depends(get_db)):
    """Take over (or release) a conversation."""
    conversation = db.query(AIConversation).filter(AIConversation.id == conversation_id).first()
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")
    set_manual_override(db, conversation, data.enabled)
    return {"id": conversation.id, "is_manual_override": conversation.is_manual_override}
