"""Application store used by the recorder and the HTTP layer."""

from datetime import datetime
from typing import Dict, List, Optional, Protocol

from tracker.domain.models import ApplicationRecord
from tracker.persistence.database import get_session
from tracker.persistence.exceptions import RecordNotFoundError
from tracker.persistence.repositories import ApplicationRepository


class ApplicationStore(Protocol):
    """Anything that can append application records."""

    def insert(self, record: ApplicationRecord) -> ApplicationRecord: ...

    def exists_for_url(self, actor_id: str, source_url: str) -> bool: ...


class SqlApplicationStore:
    """Store backed by the SQLAlchemy repository.

    Every call opens its own session, so each insert commits (or rolls
    back) independently of the others.
    """

    def insert(self, record: ApplicationRecord) -> ApplicationRecord:
        with get_session() as session:
            return ApplicationRepository(session).insert(record)

    def exists_for_url(self, actor_id: str, source_url: str) -> bool:
        with get_session() as session:
            return ApplicationRepository(session).exists_for_url(actor_id, source_url)

    def list_for_actor(
        self, actor_id: str, status: Optional[str] = None, limit: Optional[int] = None
    ) -> List[ApplicationRecord]:
        with get_session() as session:
            return ApplicationRepository(session).list_for_actor(actor_id, status=status, limit=limit)

    def update_status(self, actor_id: str, record_id: str, status: str) -> ApplicationRecord:
        """Change the status of one of the actor's records.

        Raises:
            RecordNotFoundError: If the record does not exist or belongs to another actor
        """
        with get_session() as session:
            repo = ApplicationRepository(session)
            existing = repo.get_by_id(record_id)
            if existing is None or existing.actor_id != actor_id:
                raise RecordNotFoundError(f"Application not found: {record_id}")
            return repo.update_status(record_id, status)

    def metrics(self, actor_id: str, since: datetime) -> Dict[str, int]:
        with get_session() as session:
            return ApplicationRepository(session).metrics(actor_id, since)
