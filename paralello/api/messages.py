"""Client chat endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from paralello.api.deps import get_whatsapp_relay_factory
from paralello.core.errors import ExternalServiceError
from paralello.core.messaging import send_client_message
from paralello.database import get_db
from paralello.models.message import Message
from paralello.models.organization import Client

logger = logging.getLogger(__name__)

router = APIRouter()


class SendMessageRequest(BaseModel):
    content: str
    instance_id: Optional[str] = None


def _message_dict(m: Message) -> dict:
    return {
        "id": m.id,
        "sender_type": m.sender_type,
        "content": m.content,
        "delivery_status": m.delivery_status,
        "provider_message_id": m.provider_message_id,
        "created_at": m.created_at.isoformat() if m.created_at else None,
    }


@router.get("/{client_id}/messages")
def list_messages(client_id: int, limit: int = 50, db: Session = Depends(get_db)):
    """Client feed, newest first."""
    messages = (
        db.query(Message)
        .filter(Message.client_id == client_id)
        .order_by(Message.created_at.desc())
        .limit(limit)
        .all()
    )
    return [_message_dict(m) for m in messages]


@router.post("/{client_id}/messages")
def send_message(
    client_id: int,
    data: SendMessageRequest,
    db: Session = Depends(get_db),
    relay_factory=Depends(get_whatsapp_relay_factory),
):
    """Post to the client feed and relay it over WhatsApp."""
    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    try:
        message = send_client_message(db, relay_factory(), client, data.content, data.instance_id)
    except ExternalServiceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _message_dict(message)
