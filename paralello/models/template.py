"""Template model."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from paralello.database import Base


class Template(Base):
    """Template model - reusable message body with placeholders."""

    __tablename__ = "templates"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), index=True)  # Null for shared defaults
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False, default="other")
    content = Column(Text, nullable=False)
    is_default = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Template(id={self.id}, name='{self.name}')>"
