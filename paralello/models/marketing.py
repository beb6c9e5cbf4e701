"""Marketing metric source models used by scheduled reports."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String

from paralello.database import Base


class MarketingLead(Base):
    """Lead captured for a client."""

    __tablename__ = "marketing_leads"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(255))
    first_interaction_at = Column(DateTime, nullable=False, index=True)


class MarketingConversion(Base):
    """Conversion (sale) attributed to a client."""

    __tablename__ = "marketing_conversions"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    revenue = Column(Float, default=0)
    converted_at = Column(DateTime, nullable=False, index=True)


class MarketingDailyPerformance(Base):
    """Manually entered daily ad performance."""

    __tablename__ = "marketing_daily_performance"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    investment = Column(Float, default=0)
    clicks = Column(Integer, default=0)
    impressions = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_performance_client_date", "client_id", "date"),
    )
