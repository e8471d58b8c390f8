"""Database models for ScanHub using SQLAlchemy."""

from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base


def _utc_now() -> datetime:
    return datetime.now(UTC)


Base = declarative_base()


class ScanTaskRecord(Base):
    """Stored scan task plus its externally observed status."""

    __tablename__ = "scan_tasks"

    id = Column(String, primary_key=True)
    target_urls = Column(JSON, nullable=False)
    protocol_types = Column(JSON, nullable=False)  # protocol names, declaration order
    scanning_depth = Column(Integer, nullable=False)
    credential_kind = Column(String, nullable=True)  # jwt | basic; secrets are not stored
    scope = Column(String, default="strict")
    start_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utc_now)

    status = Column(String, default="PENDING", nullable=False)
    status_message = Column(Text, default="")
    updated_at = Column(DateTime(timezone=True), default=_utc_now, onupdate=_utc_now)


class ScanResultRecord(Base):
    """Stored aggregated scan result."""

    __tablename__ = "scan_results"

    result_id = Column(String, primary_key=True)
    scan_task_id = Column(String, nullable=False, index=True)
    vulnerabilities = Column(JSON, nullable=False)
    execution_logs = Column(JSON, nullable=False)
    highest_severity = Column(String, nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
