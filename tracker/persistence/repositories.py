"""Data access layer for application records.

Repositories encapsulate database operations and return domain models
rather than ORM models.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tracker.domain.models import ApplicationRecord, ApplicationStatus
from tracker.utils.timestamps import utc_now

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import ApplicationModel, format_db_timestamp

logger = logging.getLogger(__name__)


class ApplicationRepository:
    """Repository for application-record database operations."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def insert(self, record: ApplicationRecord) -> ApplicationRecord:
        """Insert a new record, assigning id and created_at when absent.

        Args:
            record: Record to persist

        Returns:
            The persisted record with id and created_at populated

        Raises:
            DataIntegrityError: On constraint violation
            PersistenceError: If any other database error occurs
        """
        to_store = record.model_copy(
            update={
                "id": record.id or str(uuid.uuid4()),
                "created_at": record.created_at or utc_now(),
            }
        )

        try:
            model = ApplicationModel.from_domain(to_store)
            self.session.add(model)
            self.session.flush()

            logger.debug(f"Inserted application {model.id} for actor {model.user_id}")
            return model.to_domain()

        except IntegrityError as e:
            logger.error(f"Integrity error inserting application: {e}", exc_info=True)
            raise DataIntegrityError(f"Failed to insert application: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting application: {e}", exc_info=True)
            raise PersistenceError(f"Failed to insert application: {e}") from e

    def get_by_id(self, record_id: str) -> Optional[ApplicationRecord]:
        """Retrieve a record by primary key, or None if it does not exist."""
        try:
            model = self.session.get(ApplicationModel, record_id)
            return model.to_domain() if model else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving application {record_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve application: {e}") from e

    def update_status(self, record_id: str, status: str) -> ApplicationRecord:
        """Change the status of an existing record.

        Raises:
            RecordNotFoundError: If no record has this id
            PersistenceError: If a database error occurs
        """
        try:
            model = self.session.get(ApplicationModel, record_id)
            if model is None:
                raise RecordNotFoundError(f"Application not found: {record_id}")

            model.status = status
            self.session.flush()
            return model.to_domain()

        except SQLAlchemyError as e:
            logger.error(f"Error updating application {record_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update application: {e}") from e

    def exists_for_url(self, actor_id: str, source_url: str) -> bool:
        """Whether the actor already has a record pointing at ``source_url``."""
        try:
            stmt = (
                select(ApplicationModel.id)
                .where(
                    ApplicationModel.user_id == actor_id,
                    ApplicationModel.job_url == source_url,
                )
                .limit(1)
            )
            return self.session.execute(stmt).first() is not None

        except SQLAlchemyError as e:
            logger.error(f"Error checking application url for {actor_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check application url: {e}") from e

    def list_for_actor(
        self, actor_id: str, status: Optional[str] = None, limit: Optional[int] = None
    ) -> List[ApplicationRecord]:
        """List an actor's records, newest first, optionally filtered by status."""
        try:
            stmt = select(ApplicationModel).where(ApplicationModel.user_id == actor_id)
            if status is not None:
                stmt = stmt.where(ApplicationModel.status == status)
            stmt = stmt.order_by(ApplicationModel.created_at.desc())
            if limit is not None:
                stmt = stmt.limit(limit)

            models = self.session.execute(stmt).scalars().all()
            return [model.to_domain() for model in models]

        except SQLAlchemyError as e:
            logger.error(f"Error listing applications for {actor_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list applications: {e}") from e

    def count_for_actor(self, actor_id: str) -> int:
        """Total number of records owned by the actor."""
        try:
            stmt = select(func.count()).select_from(ApplicationModel).where(
                ApplicationModel.user_id == actor_id
            )
            return self.session.execute(stmt).scalar_one()

        except SQLAlchemyError as e:
            logger.error(f"Error counting applications for {actor_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count applications: {e}") from e

    def count_by_status(self, actor_id: str) -> Dict[str, int]:
        """Map of status value to record count for the actor."""
        try:
            stmt = (
                select(ApplicationModel.status, func.count())
                .where(ApplicationModel.user_id == actor_id)
                .group_by(ApplicationModel.status)
            )
            return {status: count for status, count in self.session.execute(stmt).all()}

        except SQLAlchemyError as e:
            logger.error(f"Error grouping applications for {actor_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count applications by status: {e}") from e

    def count_created_since(
        self, actor_id: str, since: datetime, status: Optional[str] = None
    ) -> int:
        """Count records created at or after ``since``."""
        try:
            stmt = select(func.count()).select_from(ApplicationModel).where(
                ApplicationModel.user_id == actor_id,
                ApplicationModel.created_at >= format_db_timestamp(since),
            )
            if status is not None:
                stmt = stmt.where(ApplicationModel.status == status)
            return self.session.execute(stmt).scalar_one()

        except SQLAlchemyError as e:
            logger.error(f"Error counting recent applications for {actor_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count recent applications: {e}") from e

    def metrics(self, actor_id: str, since: datetime) -> Dict[str, int]:
        """Dashboard counters: total, created since ``since`` (any status), interviews, rejections."""
        by_status = self.count_by_status(actor_id)
        return {
            "totalApplications": sum(by_status.values()),
            "appliedToday": self.count_created_since(actor_id, since),
            "interviews": by_status.get(ApplicationStatus.INTERVIEW.value, 0),
            "rejections": by_status.get(ApplicationStatus.REJECTED.value, 0),
        }
