"""Database models for RedFox using SQLAlchemy."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base


def _utc_now() -> datetime:
    return datetime.now(UTC)


Base = declarative_base()


class ScanSessionRecord(Base):
    """One scan session in the local history."""

    __tablename__ = "scan_sessions"

    id = Column(String(32), primary_key=True)
    target = Column(String, nullable=False)
    mode = Column(String, nullable=False)
    policy = Column(String, default="exhaustive")
    state = Column(String, nullable=False)  # pending, running, completed, stopped, aborted
    stop_reason = Column(String, nullable=True)
    error = Column(Text, nullable=True)

    attempted = Column(Integer, default=0)
    succeeded = Column(Integer, default=0)
    failed = Column(Integer, default=0)
    errored = Column(Integer, default=0)
    total_candidates = Column(Integer, nullable=True)
    resume_offset = Column(Integer, default=0)

    report_path = Column(String, nullable=True)
    request = Column(Text, nullable=True)  # JSON-encoded scan parameters

    created_at = Column(DateTime(timezone=True), default=_utc_now)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=_utc_now, onupdate=_utc_now)
