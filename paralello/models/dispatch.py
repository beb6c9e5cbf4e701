"""Scheduled message (dispatch) model."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import relationship

from paralello.database import Base


class MessageCategory(str, enum.Enum):
    """Dispatch category tag."""

    HOLIDAY = "holiday"
    MEETING = "meeting"
    PAYMENT = "payment"
    REMINDER = "reminder"
    OTHER = "other"


class DispatchStatus(str, enum.Enum):
    """Dispatch lifecycle: pending -> sent | failed | cancelled."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ScheduledMessage(Base):
    """Scheduled message model - one-off message bound to a future instant."""

    __tablename__ = "scheduled_messages"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    scheduled_at = Column(DateTime, nullable=False, index=True)
    message = Column(Text, nullable=False)
    category = Column(Enum(MessageCategory), nullable=False, default=MessageCategory.OTHER)
    status = Column(Enum(DispatchStatus), nullable=False, default=DispatchStatus.PENDING, index=True)
    sent_at = Column(DateTime)
    created_by = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)

    client = relationship("Client")

    __table_args__ = (
        Index("idx_dispatch_status_scheduled", "status", "scheduled_at"),
    )

    @property
    def is_editable(self) -> bool:
        """Only pending dispatches may change."""
        return self.status == DispatchStatus.PENDING

    def __repr__(self) -> str:
        return f"<ScheduledMessage(id={self.id}, status={self.status})>"
