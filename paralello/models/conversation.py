"""AI agent conversation models."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from paralello.database import Base


class AIConversation(Base):
    """AI conversation model - one agent thread with one contact."""

    __tablename__ = "ai_conversations"

    id = Column(Integer, primary_key=True, index=True)
    agent_id = Column(Integer, nullable=False, index=True)
    contact_identifier = Column(String(255), nullable=False)  # Phone or email
    contact_name = Column(String(255))
    contact_phone = Column(String(50))
    status = Column(String(50), nullable=False)
    summary = Column(Text)
    sentiment = Column(String(20))
    sentiment_score = Column(Float)
    session_metrics = Column(JSON)
    resolution_reason = Column(Text)
    is_manual_override = Column(Boolean, default=False, nullable=False)
    last_interaction_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    messages = relationship("AIConversationMessage", back_populates="conversation", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("agent_id", "contact_identifier", name="uq_conversation_agent_contact"),
    )

    def __repr__(self) -> str:
        return f"<AIConversation(id={self.id}, contact='{self.contact_identifier}')>"


class AIConversationMessage(Base):
    """AI conversation message model."""

    __tablename__ = "ai_conversation_messages"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(Integer, ForeignKey("ai_conversations.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    tokens_used = Column(Integer, default=0)
    metadata_ = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)

    conversation = relationship("AIConversation", back_populates="messages")
