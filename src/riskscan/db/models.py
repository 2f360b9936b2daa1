"""Database models for riskscan using SQLAlchemy."""

from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base


def _utc_now() -> datetime:
    return datetime.now(UTC)


Base = declarative_base()


class ScanJobRecord(Base):
    """Persisted scan job document."""

    __tablename__ = "scan_jobs"

    id = Column(String(36), primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    target_url = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, running, completed, failed

    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    started_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    risk_score = Column(Integer, nullable=True)
    findings = Column(JSON, nullable=True)
    error = Column(Text, nullable=True)
