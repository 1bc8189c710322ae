"""SQLAlchemy ORM models for analyses, results and cached conversions"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Boolean, Float, DateTime, ForeignKey, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Analysis(Base):
    """Wallet analysis request"""

    __tablename__ = "analyses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    wallet_address = Column(Text, nullable=False)
    blockchain = Column(Text, nullable=False)
    currency = Column(Text, nullable=False)
    last_fetch = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    results = relationship("AnalysisResultRecord", back_populates="analysis", cascade="all, delete-orphan")


class AnalysisResultRecord(Base):
    """Cost, score and recommendation computed for an analysis"""

    __tablename__ = "analysis_results"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    analysis_id = Column(Uuid(as_uuid=True), ForeignKey("analyses.id", ondelete="CASCADE"), nullable=False, index=True)
    cost_saved_or_lost = Column(Float, nullable=True)
    cost_type = Column(Text, nullable=True)
    currency = Column(Text, nullable=True)
    discipline_score = Column(Float, nullable=True)
    recommendation = Column(Text, nullable=True)
    preview_visible = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    analysis = relationship("Analysis", back_populates="results")


class ConversionCache(Base):
    """Normalized conversions fetched for a wallet, reused when computing results"""

    __tablename__ = "analysis_cache"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    wallet_address = Column(Text, nullable=False, index=True)
    blockchain = Column(Text, nullable=False)
    transfers = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
