"""Message model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from paralello.core.context import MessageContext, context_from_columns, context_to_columns
from paralello.database import Base


class Message(Base):
    """Message model - one entry in a client feed, task thread or DM channel."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    # Exactly one of the three context columns is set
    client_id = Column(Integer, ForeignKey("clients.id"), index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), index=True)
    channel_id = Column(Integer, index=True)
    sender_type = Column(String(50), nullable=False, default="agency")
    content = Column(Text, nullable=False)
    provider_message_id = Column(String(255), index=True)
    delivery_status = Column(String(20))  # pending, sent, failed; feed messages only
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_message_client_created", "client_id", "created_at"),
    )

    @classmethod
    def for_context(cls, context: MessageContext, **fields) -> "Message":
        """Create a message bound to ``context``."""
        return cls(**context_to_columns(context), **fields)

    @property
    def context(self) -> MessageContext:
        return context_from_columns(self)

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, sender_type='{self.sender_type}')>"
