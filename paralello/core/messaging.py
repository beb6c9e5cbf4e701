"""Outbound chat messages typed by agency staff."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from paralello.core.context import FeedContext, MessageContext, TaskContext
from paralello.core.errors import ExternalServiceError, ValidationError
from paralello.models.message import Message
from paralello.models.organization import Client
from paralello.providers.webhook import WhatsAppRelay

logger = logging.getLogger(__name__)


def record_message(
    db: Session,
    organization_id: int,
    context: MessageContext,
    content: str,
    sender_type: str = "agency",
) -> Message:
    """Store a message in its feed, task thread or DM channel."""
    if not content or not content.strip():
        raise ValidationError("Message content must not be empty")
    message = Message.for_context(
        context,
        organization_id=organization_id,
        sender_type=sender_type,
        content=content.strip(),
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def send_client_message(
    db: Session,
    relay: WhatsAppRelay,
    client: Client,
    content: str,
    instance_id: Optional[str] = None,
) -> Message:
    """
    Save a message to the client's feed, then deliver it over WhatsApp.

    The row is kept with ``delivery_status='failed'`` when the relay rejects it,
    and the error is re-raised.
    """
    message = record_message(db, client.organization_id, FeedContext(client.id), content)
    message.delivery_status = "pending"
    db.commit()

    try:
        provider_id = relay.send_text(
            organization_id=client.organization_id,
            client_id=client.id,
            message_id=message.id,
            text=message.content,
            instance_id=instance_id,
        )
    except ExternalServiceError:
        message.delivery_status = "failed"
        db.commit()
        raise

    message.delivery_status = "sent"
    if provider_id:
        message.provider_message_id = provider_id
    db.commit()
    logger.info(f"Message {message.id} relayed for client {client.id}")
    return message


def post_task_comment(db: Session, organization_id: int, task_id: int, content: str) -> Message:
    """Internal comment on a task thread; never relayed."""
    return record_message(db, organization_id, TaskContext(task_id), content, sender_type="member")
