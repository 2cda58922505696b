"""Base extractor class shared by all listing platforms."""

from abc import ABC, abstractmethod

from playwright.sync_api import Page

from tracker.config.models import ExtractionConfig, SourceConfig

from .models import ExtractionResult


class BaseExtractor(ABC):
    """Base class for listing extractors.

    An extractor drives an already-open browser page through a paginated
    source and returns everything it gathered. Opening and closing the
    browser is the caller's job (see ``browser_session``).

    Attributes:
        source_config: Where to start and which platform to expect
        extraction_config: Pagination limits, timeouts and settle policy
    """

    PLATFORM_NAME = ""

    def __init__(self, source_config: SourceConfig, extraction_config: ExtractionConfig) -> None:
        self.source_config = source_config
        self.extraction_config = extraction_config

    @abstractmethod
    def extract(self, page: Page) -> ExtractionResult:
        """Walk the source starting at ``source_config.search_url``.

        Args:
            page: Open Playwright page to drive

        Returns:
            ExtractionResult with listings in page order and the stop reason

        Raises:
            ExtractionError: When the first page cannot be loaded
        """
