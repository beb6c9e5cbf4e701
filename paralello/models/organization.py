"""Organization and client models."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from paralello.database import Base


class Organization(Base):
    """Organization model - the tenant boundary."""

    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    clients = relationship("Client", back_populates="organization")

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name='{self.name}')>"


class Client(Base):
    """Client model - an agency customer reachable over WhatsApp."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    whatsapp = Column(String(50))
    whatsapp_group_id = Column(String(100))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    organization = relationship("Organization", back_populates="clients")

    @property
    def whatsapp_target(self):
        """Group id when the client has one, else the direct number."""
        return self.whatsapp_group_id or self.whatsapp

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name='{self.name}')>"
