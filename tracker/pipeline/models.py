"""Data models for ingestion run tracking and reporting."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from tracker.domain.models import ActorIdentity
from tracker.extraction.models import ExtractionResult
from tracker.recording.models import RecordResult


@dataclass
class IngestionRunResult:
    """
    Results from one extract-then-record run.

    Attributes:
        run_id: Identifier shared by every log record of the run
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        actor: Identity the records were written for
        extraction: What the extractor gathered and why it stopped
        recording: Insert counters
        duration_seconds: Wall-clock time for the run
        skipped: Whether the run was skipped because another was in progress
    """

    run_id: str
    run_started_at: datetime
    run_finished_at: datetime
    actor: Optional[ActorIdentity] = None
    extraction: Optional[ExtractionResult] = None
    recording: Optional[RecordResult] = None
    duration_seconds: float = 0.0
    skipped: bool = False

    def __post_init__(self):
        """Compute duration if not set."""
        if self.duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.duration_seconds = delta.total_seconds()

    @property
    def listings(self):
        return self.extraction.listings if self.extraction else []

    @property
    def successful_inserts(self) -> int:
        return self.recording.successful if self.recording else 0

    @property
    def attempted_inserts(self) -> int:
        return self.recording.attempted if self.recording else 0
