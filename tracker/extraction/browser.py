"""Scoped headless-browser session."""

from contextlib import contextmanager
from typing import Iterator

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, sync_playwright

from tracker.config.models import ExtractionConfig
from tracker.logging import get_logger

from .exceptions import ExtractionError

logger = get_logger(__name__, component="browser")


@contextmanager
def browser_session(extraction_config: ExtractionConfig) -> Iterator[Page]:
    """Launch Chromium, yield a fresh page and close the browser on exit.

    The browser is closed on every exit path, including exceptions raised
    by the caller while the page is in use.

    Raises:
        ExtractionError: If the browser cannot be launched
    """
    with sync_playwright() as playwright:
        try:
            browser = playwright.chromium.launch(
                headless=extraction_config.headless,
                args=list(extraction_config.browser_args),
            )
        except PlaywrightError as e:
            logger.error(
                f"Failed to launch browser: {e}",
                extra={"event": "browser.launch.failed", "error_type": type(e).__name__},
            )
            raise ExtractionError(f"Failed to launch browser: {e}") from e

        logger.debug(
            "Browser launched",
            extra={"event": "browser.launched", "headless": extraction_config.headless},
        )

        try:
            context = browser.new_context(user_agent=extraction_config.user_agent)
            page = context.new_page()
            page.set_default_navigation_timeout(extraction_config.navigation_timeout_ms)
            yield page
        finally:
            try:
                browser.close()
                logger.debug("Browser closed", extra={"event": "browser.closed"})
            except PlaywrightError as e:
                logger.warning(
                    f"Error while closing browser: {e}",
                    extra={"event": "browser.close.failed", "error_type": type(e).__name__},
                )
