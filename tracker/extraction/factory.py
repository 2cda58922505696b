"""Factory function for instantiating listing extractors."""

import logging

from tracker.config.models import ExtractionConfig, Platform, SourceConfig

from .base import BaseExtractor
from .exceptions import ExtractionConfigurationError
from .linkedin import LinkedInExtractor

logger = logging.getLogger(__name__)

EXTRACTORS = {
    Platform.LINKEDIN.value: LinkedInExtractor,
}


def get_extractor(source_config: SourceConfig, extraction_config: ExtractionConfig) -> BaseExtractor:
    """Instantiate the extractor for the source's platform.

    Args:
        source_config: Source configuration (platform and search URL)
        extraction_config: Pagination, timeout and browser settings

    Returns:
        Extractor instance for the platform

    Raises:
        ExtractionConfigurationError: If the platform is not supported

    Example:
        >>> extractor = get_extractor(SourceConfig(), ExtractionConfig())
        >>> with browser_session(ExtractionConfig()) as page:
        ...     result = extractor.extract(page)
    """
    platform = str(getattr(source_config.platform, "value", source_config.platform)).lower()
    extractor_class = EXTRACTORS.get(platform)

    if extractor_class is None:
        supported = ", ".join(sorted(EXTRACTORS))
        raise ExtractionConfigurationError(
            f"Unknown platform: {source_config.platform}. Supported platforms: {supported}"
        )

    logger.debug(
        "Creating extractor instance",
        extra={"platform": platform, "extractor_class": extractor_class.__name__},
    )
    return extractor_class(source_config, extraction_config)
