"""Pipeline orchestration for listing ingestion."""

import threading
from typing import Optional
from uuid import uuid4

from tracker.config.models import AppConfig
from tracker.domain.models import ActorIdentity
from tracker.extraction.browser import browser_session
from tracker.extraction.exceptions import ExtractionError
from tracker.extraction.factory import get_extractor
from tracker.logging import get_logger
from tracker.logging.context import log_context
from tracker.recording.recorder import BulkRecorder
from tracker.recording.store import ApplicationStore
from tracker.utils.timestamps import utc_now

from .models import IngestionRunResult

logger = get_logger(__name__, component="pipeline")


class IngestionPipeline:
    """
    Runs the extractor and then the recorder for one actor.

    The recorder only starts after extraction has finished and the browser
    has been closed. Runs never overlap: a second call while one is active
    returns a skipped result immediately.
    """

    def __init__(self, app_config: AppConfig, store: ApplicationStore):
        """
        Initialize the ingestion pipeline.

        Args:
            app_config: Application configuration
            store: Destination for recorded listings
        """
        self.app_config = app_config
        self.recorder = BulkRecorder(store, app_config.recording)
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run_once(self, actor: ActorIdentity, run_id: Optional[str] = None) -> IngestionRunResult:
        """
        Extract listings and record them for ``actor``.

        Returns:
            IngestionRunResult; ``skipped`` is set when another run holds the lock

        Raises:
            ExtractionError: If the first page could not be loaded or the
                browser could not start. Later failures are reported through
                the extraction stop reason.
        """
        run_started_at = utc_now()
        run_id = run_id or uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                logger.warning(
                    "Ingestion run skipped: previous run still in progress",
                    extra={"event": "pipeline.run.skipped", "reason": "lock_held"},
                )
            return IngestionRunResult(
                run_id=run_id,
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                actor=actor,
                skipped=True,
            )

        try:
            with log_context(run_id=run_id, actor_id=actor.actor_id):
                source = self.app_config.source
                logger.info(
                    "Ingestion run started",
                    extra={
                        "event": "pipeline.run.started",
                        "source": source.name,
                        "actor_source": actor.source,
                        "max_pages": self.app_config.extraction.max_pages,
                    },
                )

                try:
                    extractor = get_extractor(source, self.app_config.extraction)
                    with browser_session(self.app_config.extraction) as page:
                        extraction = extractor.extract(page)
                except ExtractionError as e:
                    logger.error(
                        f"Ingestion run failed during extraction: {e}",
                        extra={
                            "event": "pipeline.run.failed",
                            "error_type": type(e).__name__,
                        },
                    )
                    raise

                recording = self.recorder.record(extraction.listings, actor)

                result = IngestionRunResult(
                    run_id=run_id,
                    run_started_at=run_started_at,
                    run_finished_at=utc_now(),
                    actor=actor,
                    extraction=extraction,
                    recording=recording,
                )

                logger.info(
                    "Ingestion run completed",
                    extra={
                        "event": "pipeline.run.completed",
                        "duration_ms": int(result.duration_seconds * 1000),
                        "pages_scraped": extraction.pages_scraped,
                        "listings": len(extraction.listings),
                        "attempted": recording.attempted,
                        "successful": recording.successful,
                        "failed": recording.failed,
                        "skipped_listings": recording.skipped,
                        "stop_reason": extraction.stop_reason.value,
                    },
                )

                return result

        finally:
            self._lock.release()
