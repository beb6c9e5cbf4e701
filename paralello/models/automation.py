"""Active automation and suggestion models."""

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from paralello.database import Base


class ActiveAutomation(Base):
    """Active automation model - recurring AI check-in rule for a client."""

    __tablename__ = "active_automations"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    weekdays = Column(JSON, default=list)  # 0 = Sunday .. 6 = Saturday
    time_of_day = Column(String(5), default="09:00")
    context_days = Column(Integer, default=7)
    assigned_approver = Column(Integer)
    custom_prompt = Column(Text)
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client")
    suggestions = relationship("ActiveSuggestion", back_populates="automation", cascade="all, delete-orphan")

    def runs_on(self, weekday: int) -> bool:
        return isinstance(self.weekdays, list) and weekday in self.weekdays

    def __repr__(self) -> str:
        return f"<ActiveAutomation(id={self.id}, client_id={self.client_id})>"


class SuggestionStatus(str, enum.Enum):
    """Suggestion lifecycle: pending -> approved | rejected, approved -> sent."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SENT = "sent"


class ActiveSuggestion(Base):
    """Active suggestion model - one generated batch of candidate messages."""

    __tablename__ = "active_suggestions"

    id = Column(Integer, primary_key=True, index=True)
    automation_id = Column(Integer, ForeignKey("active_automations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    suggestion_date = Column(Date, nullable=False)  # Local calendar day of generation
    suggested_options = Column(JSON, default=list)  # List of strings
    suggested_message = Column(Text, nullable=False)
    context_summary = Column(Text)
    status = Column(Enum(SuggestionStatus), nullable=False, default=SuggestionStatus.PENDING, index=True)
    approved_by = Column(Integer)
    approved_at = Column(DateTime)
    sent_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    automation = relationship("ActiveAutomation", back_populates="suggestions")
    client = relationship("Client")

    __table_args__ = (
        UniqueConstraint("automation_id", "suggestion_date", name="uq_suggestion_automation_day"),
    )

    def __repr__(self) -> str:
        return f"<ActiveSuggestion(id={self.id}, automation_id={self.automation_id}, status={self.status})>"
