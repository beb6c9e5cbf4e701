"""Scheduled report models."""

import enum
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from paralello.core.scheduling import CadenceKind
from paralello.database import Base


class ExecutionStatus(str, enum.Enum):
    """Report execution outcome."""

    SUCCESS = "success"
    FAILED = "failed"


class ScheduledReport(Base):
    """Scheduled report model - recurring metrics report for one client."""

    __tablename__ = "scheduled_reports"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    frequency = Column(Enum(CadenceKind), nullable=False)
    weekday = Column(Integer)  # 0-6, weekly only
    day_of_month = Column(Integer)  # 1-31, monthly only
    time_of_day = Column(String(5), nullable=False)  # HH:mm
    metrics = Column(JSON, default=list)  # List of placeholder names
    template = Column(Text, default="")
    is_active = Column(Boolean, default=True, index=True)
    next_run = Column(DateTime, index=True)
    last_run = Column(DateTime)
    created_by = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client")
    executions = relationship("ReportExecution", back_populates="report", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_report_active_next_run", "is_active", "next_run"),
    )

    def __repr__(self) -> str:
        return f"<ScheduledReport(id={self.id}, frequency={self.frequency}, next_run={self.next_run})>"


class ReportExecution(Base):
    """Report execution model - history of report sends."""

    __tablename__ = "report_executions"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(Integer, ForeignKey("scheduled_reports.id"), nullable=False, index=True)
    status = Column(Enum(ExecutionStatus), nullable=False)
    message_sent = Column(Text)
    metrics_snapshot = Column(JSON)
    error_message = Column(Text)
    executed_at = Column(DateTime, default=datetime.utcnow)

    report = relationship("ScheduledReport", back_populates="executions")

    def __repr__(self) -> str:
        return f"<ReportExecution(id={self.id}, report_id={self.report_id}, status={self.status})>"
