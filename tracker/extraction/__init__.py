"""Listing extractors that walk paginated job-search pages in a headless browser.

Use the factory together with the browser session:
    from tracker.extraction import browser_session, get_extractor
    extractor = get_extractor(source_config, extraction_config)
    with browser_session(extraction_config) as page:
        result = extractor.extract(page)

Exception handling:
    from tracker.extraction import ExtractionError, ExtractionBlockedError
"""

from .base import BaseExtractor
from .browser import browser_session
from .exceptions import (
    ExtractionBlockedError,
    ExtractionConfigurationError,
    ExtractionError,
    ExtractionNavigationError,
)
from .factory import get_extractor
from .linkedin import LinkedInExtractor
from .models import ExtractionResult, StopReason

__all__ = [
    # Base, factory and session
    "BaseExtractor",
    "get_extractor",
    "browser_session",
    # Extractors
    "LinkedInExtractor",
    # Results
    "ExtractionResult",
    "StopReason",
    # Exceptions
    "ExtractionError",
    "ExtractionNavigationError",
    "ExtractionBlockedError",
    "ExtractionConfigurationError",
]
