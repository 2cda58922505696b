"""Result types produced by listing extractors."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from tracker.domain.models import ExtractedListing


class StopReason(str, Enum):
    """Why the pagination loop ended."""

    PAGE_LIMIT = "page_limit"
    END_OF_RESULTS = "end_of_results"
    TRANSIENT_FAILURE = "transient_failure"
    FATAL_FAILURE = "fatal_failure"


FAILURE_REASONS = frozenset({StopReason.TRANSIENT_FAILURE, StopReason.FATAL_FAILURE})


@dataclass
class ExtractionResult:
    """
    Listings gathered by one extraction, plus how the walk ended.

    Attributes:
        listings: Listings in page order
        page_title: Title of the last page visited
        pages_scraped: Number of pages whose listings were extracted
        stop_reason: Why pagination stopped
        stop_detail: Human-readable detail for the stop, if any
    """

    listings: List[ExtractedListing] = field(default_factory=list)
    page_title: str = ""
    pages_scraped: int = 0
    stop_reason: StopReason = StopReason.PAGE_LIMIT
    stop_detail: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        """True when a failure cut the walk short."""
        return self.stop_reason in FAILURE_REASONS
