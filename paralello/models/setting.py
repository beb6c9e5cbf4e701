"""System setting model."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from paralello.database import Base


class SystemSetting(Base):
    """System setting model - key-value store for platform-wide settings."""

    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(JSON)
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<SystemSetting(id={self.id}, key='{self.key}')>"
