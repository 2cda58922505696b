"""LinkedIn public job-search extractor."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from urllib.parse import urljoin

from playwright.sync_api import ElementHandle, Page, Response
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from tracker.config.models import ExtractionConfig, SourceConfig
from tracker.domain.models import ExtractedListing
from tracker.logging import get_logger
from tracker.logging.context import log_context

from .base import BaseExtractor
from .exceptions import ExtractionBlockedError, ExtractionNavigationError
from .models import ExtractionResult, StopReason

logger = get_logger(__name__, component="extraction")


class LinkedInExtractor(BaseExtractor):
    """Extractor for LinkedIn's guest job-search results.

    The guest search page renders a list of job cards and a "Next" button
    that swaps the list in place. Each card yields one ExtractedListing;
    sub-elements missing from a card fall back to the listing sentinels.

    Page flow:
        load search URL -> for each page: settle, wait for cards, read
        cards, click Next
    """

    PLATFORM_NAME = "LinkedIn"

    LISTING_SELECTOR = "ul.jobs-search__results-list li"
    TITLE_SELECTOR = ".base-search-card__title"
    ORGANIZATION_SELECTOR = ".base-search-card__subtitle a"
    LOCATION_SELECTOR = ".job-search-card__location"
    LINK_SELECTOR = ".base-card__full-link"
    NEXT_BUTTON_SELECTOR = 'button[aria-label="Next"]'

    BLOCKED_STATUSES = frozenset({999, 403, 429})
    AUTH_WALL_MARKERS = ("/authwall", "/checkpoint", "/uas/login", "/login")
    CHALLENGE_MARKERS = ("captcha", "security verification")
    TRACKED_RESOURCE_TYPES = frozenset({"document", "xhr", "fetch"})

    def __init__(self, source_config: SourceConfig, extraction_config: ExtractionConfig) -> None:
        super().__init__(source_config, extraction_config)
        self._last_status: Optional[int] = None

    def extract(self, page: Page) -> ExtractionResult:
        """Walk up to ``max_pages`` result pages.

        Failures after the first page loaded end the walk and keep what was
        gathered; the stop reason says whether retrying later is worthwhile.

        Raises:
            ExtractionNavigationError: If the search URL cannot be loaded
            ExtractionBlockedError: If LinkedIn refuses the session up front
        """
        self._last_status = None
        page.on("response", self._on_response)

        self._load(page)

        config = self.extraction_config
        result = ExtractionResult()
        previous_first_link: Optional[str] = None

        for page_number in range(1, config.max_pages + 1):
            with log_context(page=page_number):
                try:
                    if page_number > 1:
                        self._settle(page, previous_first_link)

                    result.page_title = page.title()

                    try:
                        page.wait_for_selector(
                            self.LISTING_SELECTOR, timeout=config.listing_timeout_ms
                        )
                    except PlaywrightTimeoutError:
                        result.stop_reason, result.stop_detail = self._classify_missing_listings(
                            page, page_number
                        )
                        break

                    page_listings = self._extract_page(page)

                    if not page_listings and page_number > 1:
                        result.stop_reason = StopReason.END_OF_RESULTS
                        result.stop_detail = f"No listings on page {page_number}"
                        break

                    result.listings.extend(page_listings)
                    result.pages_scraped += 1
                    previous_first_link = self._first_link(page)

                    logger.info(
                        f"Scraped {len(page_listings)} listings from page {page_number}",
                        extra={
                            "event": "extraction.page.scraped",
                            "count": len(page_listings),
                            "total": len(result.listings),
                        },
                    )

                    if page_number == config.max_pages:
                        result.stop_reason = StopReason.PAGE_LIMIT
                        break

                    next_button = page.query_selector(self.NEXT_BUTTON_SELECTOR)
                    if next_button is None:
                        result.stop_reason = StopReason.END_OF_RESULTS
                        result.stop_detail = f"No next-page control after page {page_number}"
                        break

                    next_button.click()

                except PlaywrightTimeoutError as e:
                    result.stop_reason = StopReason.TRANSIENT_FAILURE
                    result.stop_detail = f"Timed out on page {page_number}: {e}"
                    self._log_partial(result, e)
                    break
                except PlaywrightError as e:
                    result.stop_reason = StopReason.FATAL_FAILURE
                    result.stop_detail = f"Browser error on page {page_number}: {e}"
                    self._log_partial(result, e)
                    break

        logger.info(
            "Extraction finished",
            extra={
                "event": "extraction.completed",
                "pages_scraped": result.pages_scraped,
                "count": len(result.listings),
                "stop_reason": result.stop_reason.value,
                "stop_detail": result.stop_detail,
            },
        )
        return result

    def _on_response(self, response: Response) -> None:
        if response.request.resource_type in self.TRACKED_RESOURCE_TYPES:
            self._last_status = response.status

    def _load(self, page: Page) -> None:
        url = self.source_config.search_url

        logger.info(
            "Loading search page",
            extra={"event": "extraction.navigation.started", "url": url},
        )

        try:
            response = page.goto(
                url,
                wait_until="networkidle",
                timeout=self.extraction_config.navigation_timeout_ms,
            )
        except PlaywrightTimeoutError as e:
            logger.error(
                f"Timed out loading {url}",
                extra={"event": "extraction.navigation.failed", "error_type": "Timeout"},
            )
            raise ExtractionNavigationError(f"Timed out loading {url}: {e}", url=url) from e
        except PlaywrightError as e:
            logger.error(
                f"Failed to load {url}: {e}",
                extra={"event": "extraction.navigation.failed", "error_type": type(e).__name__},
            )
            raise ExtractionNavigationError(f"Failed to load {url}: {e}", url=url) from e

        status = response.status if response is not None else None
        if status is not None:
            self._last_status = status

        if status in self.BLOCKED_STATUSES or self._is_auth_wall(page.url):
            logger.error(
                "Search page blocked",
                extra={
                    "event": "extraction.navigation.blocked",
                    "status_code": status,
                    "final_url": page.url,
                },
            )
            raise ExtractionBlockedError(
                f"LinkedIn blocked the session (status {status}, url {page.url})",
                url=url,
                status_code=status,
            )

    def _settle(self, page: Page, previous_first_link: Optional[str]) -> bool:
        """Poll until the result list shows a different first card.

        Returns:
            True when a change was observed within the wait budget
        """
        waited_ms = 0
        for delay_ms in self.extraction_config.settle.delays():
            page.wait_for_timeout(delay_ms)
            waited_ms += delay_ms

            current = self._first_link(page)
            if current is not None and current != previous_first_link:
                logger.debug(
                    "Results settled",
                    extra={"event": "extraction.settle.completed", "waited_ms": waited_ms},
                )
                return True

        logger.warning(
            "Results did not change within the settle budget",
            extra={"event": "extraction.settle.timeout", "waited_ms": waited_ms},
        )
        return False

    def _first_link(self, page: Page) -> Optional[str]:
        element = page.query_selector(f"{self.LISTING_SELECTOR} {self.LINK_SELECTOR}")
        if element is None:
            return None
        return element.get_attribute("href")

    def _extract_page(self, page: Page) -> List[ExtractedListing]:
        cards = page.query_selector_all(self.LISTING_SELECTOR)
        cap = self.extraction_config.max_listings_per_page
        return [self._extract_listing(card, page.url) for card in cards[:cap]]

    def _extract_listing(self, card: ElementHandle, base_url: str) -> ExtractedListing:
        href = self._attribute(card, self.LINK_SELECTOR, "href")
        return ExtractedListing(
            title=self._text(card, self.TITLE_SELECTOR),
            organization=self._text(card, self.ORGANIZATION_SELECTOR),
            location=self._text(card, self.LOCATION_SELECTOR),
            source_url=urljoin(base_url, href) if href else None,
            source_platform=self.PLATFORM_NAME,
        )

    def _text(self, card: ElementHandle, selector: str) -> Optional[str]:
        element = card.query_selector(selector)
        if element is None:
            return None
        return element.inner_text()

    def _attribute(self, card: ElementHandle, selector: str, name: str) -> Optional[str]:
        element = card.query_selector(selector)
        if element is None:
            return None
        return element.get_attribute(name)

    def _classify_missing_listings(
        self, page: Page, page_number: int
    ) -> Tuple[StopReason, str]:
        """Decide why the listing selector never appeared."""
        current_url = page.url
        if self._is_auth_wall(current_url):
            reason = (StopReason.FATAL_FAILURE, f"Redirected to sign-in wall: {current_url}")
        elif self._has_challenge(page):
            reason = (StopReason.FATAL_FAILURE, "Challenge page detected")
        elif self._last_status is not None and (
            self._last_status == 429 or self._last_status >= 500
        ):
            reason = (
                StopReason.TRANSIENT_FAILURE,
                f"Last response status {self._last_status}",
            )
        else:
            reason = (StopReason.END_OF_RESULTS, f"No listings found on page {page_number}")

        logger.log(
            logging_level_for(reason[0]),
            f"Listing selector not found on page {page_number}",
            extra={
                "event": "extraction.listings.missing",
                "stop_reason": reason[0].value,
                "last_status": self._last_status,
            },
        )
        return reason

    def _has_challenge(self, page: Page) -> bool:
        try:
            content = page.content().lower()
        except PlaywrightError:
            return False
        return any(marker in content for marker in self.CHALLENGE_MARKERS)

    def _is_auth_wall(self, url: Optional[str]) -> bool:
        if not url:
            return False
        lowered = url.lower()
        return any(marker in lowered for marker in self.AUTH_WALL_MARKERS)

    def _log_partial(self, result: ExtractionResult, error: Exception) -> None:
        logger.warning(
            "Extraction stopped early; keeping listings gathered so far",
            extra={
                "event": "extraction.partial",
                "stop_reason": result.stop_reason.value,
                "count": len(result.listings),
                "error_type": type(error).__name__,
            },
        )


def logging_level_for(reason: StopReason) -> int:
    """Log level matching the severity of a stop reason."""
    if reason == StopReason.FATAL_FAILURE:
        return logging.ERROR
    if reason == StopReason.TRANSIENT_FAILURE:
        return logging.WARNING
    return logging.INFO
