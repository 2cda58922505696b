"""Custom exceptions for listing extractors."""

from typing import Optional


class ExtractionError(Exception):
    """Base exception for all extraction errors.

    Raised only when no usable data exists yet (the first page never loaded
    or the browser could not start). Problems after the first page are
    reported through ExtractionResult.stop_reason instead.
    """


class ExtractionNavigationError(ExtractionError):
    """The initial page load failed or timed out."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None) -> None:
        """Initialize navigation error with URL and optional HTTP status.

        Args:
            message: Human-readable error message
            url: URL that failed to load
            status_code: HTTP status of the main document, if one was received
        """
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractionBlockedError(ExtractionNavigationError):
    """The source refused the session (blocking status or sign-in wall)."""


class ExtractionConfigurationError(ExtractionError):
    """Invalid extractor configuration (e.g. unsupported platform)."""
