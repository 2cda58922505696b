"""Database schema definition and ORM models.

The ``applications`` table keeps the column names of the hosted tracker
(user_id, job_title, company, job_url, salary, ...) so existing rows and
dashboards keep working; conversion to and from the domain model happens
here.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Index, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from tracker.domain.models import ApplicationRecord
from tracker.utils.timestamps import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

Base = declarative_base()


class ApplicationModel(Base):
    """ORM model for the applications table."""

    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, nullable=False)
    user_id = Column(String(64), nullable=False)

    job_title = Column(Text, nullable=False)
    company = Column(String(255), nullable=False)
    job_url = Column(Text, nullable=False)
    status = Column(String(50), nullable=False)
    platform = Column(String(50), nullable=False, default="")
    job_description = Column(Text, nullable=False, default="")
    location = Column(String(255), nullable=False, default="")
    salary = Column(String(255), nullable=False, default="")

    # Stored as ISO 8601 strings
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_applications_user", "user_id"),
        Index("idx_applications_user_url", "user_id", "job_url"),
        Index("idx_applications_user_status", "user_id", "status"),
    )

    def to_domain(self) -> ApplicationRecord:
        return ApplicationRecord(
            id=self.id,
            actor_id=self.user_id,
            title=self.job_title,
            organization=self.company,
            source_url=self.job_url,
            status=self.status,
            platform=self.platform or "",
            description=self.job_description or "",
            location=self.location or "",
            compensation=self.salary or "",
            created_at=parse_db_timestamp(self.created_at),
        )

    @classmethod
    def from_domain(cls, record: ApplicationRecord) -> "ApplicationModel":
        """Build a row from a domain record; id and created_at must already be set."""
        return cls(
            id=record.id,
            user_id=record.actor_id,
            job_title=record.title,
            company=record.organization,
            job_url=record.source_url,
            status=record.status,
            platform=record.platform,
            job_description=record.description,
            location=record.location,
            salary=record.compensation,
            created_at=format_db_timestamp(record.created_at),
        )


def format_db_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime for storage (UTC, microsecond precision, 'Z' suffix)."""
    if dt is None:
        return None
    return format_timestamp(dt, include_microseconds=True)


def parse_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp back into an aware UTC datetime.

    Rows written by other clients may carry an explicit offset instead of 'Z'.
    """
    return parse_timestamp(value)


def create_schema(engine: Engine) -> None:
    """Create tables and indexes if they don't exist (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
