"""Bulk recorder: one independent insert per extracted listing."""

from typing import Optional, Sequence, Set

from tracker.config.models import RecordingConfig
from tracker.domain.models import ActorIdentity, ApplicationRecord, ExtractedListing
from tracker.logging import get_logger

from .models import RecordResult
from .store import ApplicationStore

logger = get_logger(__name__, component="recording")


class BulkRecorder:
    """
    Persists listings as application records for one actor.

    Inserts run sequentially. A failed insert is logged and counted, and the
    loop moves on to the next listing; nothing is retried.
    """

    def __init__(self, store: ApplicationStore, recording_config: Optional[RecordingConfig] = None):
        """
        Initialize the recorder.

        Args:
            store: Destination for records
            recording_config: Recording options (defaults when omitted)
        """
        self.store = store
        self.recording_config = recording_config or RecordingConfig()

    def record(self, listings: Sequence[ExtractedListing], actor: ActorIdentity) -> RecordResult:
        """
        Write one record per listing on behalf of ``actor``.

        Args:
            listings: Listings in extraction order
            actor: Owner of the new records

        Returns:
            RecordResult; ``successful <= attempted <= len(listings)`` always holds
        """
        result = RecordResult()
        seen_urls: Set[str] = set()
        skip_existing = self.recording_config.skip_existing_urls

        logger.info(
            f"Recording {len(listings)} listings",
            extra={
                "event": "recording.started",
                "count": len(listings),
                "skip_existing_urls": skip_existing,
            },
        )

        for index, listing in enumerate(listings):
            if skip_existing and listing.has_resolved_url():
                if listing.source_url in seen_urls or self._already_recorded(actor, listing):
                    result.skipped += 1
                    logger.debug(
                        "Skipping already recorded listing",
                        extra={"event": "recording.insert.skipped", "source_url": listing.source_url},
                    )
                    continue
                seen_urls.add(listing.source_url)

            result.attempted += 1
            try:
                self.store.insert(ApplicationRecord.from_listing(listing, actor))
                result.successful += 1
            except Exception as e:
                result.failed += 1
                logger.error(
                    f"Failed to record listing '{listing.title}' at {listing.organization}: {e}",
                    extra={
                        "event": "recording.insert.failed",
                        "index": index,
                        "source_url": listing.source_url,
                        "error_type": type(e).__name__,
                    },
                )

        logger.info(
            f"Recorded {result.successful} of {result.attempted} listings",
            extra={
                "event": "recording.completed",
                "attempted": result.attempted,
                "successful": result.successful,
                "failed": result.failed,
                "skipped": result.skipped,
            },
        )
        return result

    def _already_recorded(self, actor: ActorIdentity, listing: ExtractedListing) -> bool:
        try:
            return self.store.exists_for_url(actor.actor_id, listing.source_url)
        except Exception as e:
            logger.warning(
                f"Could not check for existing record, inserting anyway: {e}",
                extra={
                    "event": "recording.lookup.failed",
                    "source_url": listing.source_url,
                    "error_type": type(e).__name__,
                },
            )
            return False
