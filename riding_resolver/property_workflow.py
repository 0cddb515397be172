"""
Assessed property value lookup via browser automation.

The assessment site renders its result asynchronously, so instead of a
single wait the workflow polls a fixed number of times: first the labelled
value element, then any currency-shaped text on the page. Running out of
attempts is a not-found result, distinct from automation failures.
"""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from .browser import BrowserSession, bounded_wait
from .config import Settings
from .exceptions import AutomationError, PropertyValueNotFoundError
from .normalizer import normalize_address
from .patterns import PROPERTY_SITE_V1, PropertySitePatterns

logger = logging.getLogger(__name__)


async def extract_property_value(
    session: BrowserSession,
    address: str,
    settings: Settings | None = None,
    patterns: PropertySitePatterns = PROPERTY_SITE_V1,
) -> str:
    """Look up the total assessed value for an address.

    Returns:
        The value as displayed, e.g. ``"$1,234,000"``.

    Raises:
        AutomationError: browser, navigation or selector failure.
        PropertyValueNotFoundError: polling finished without a value.
    """
    settings = settings or session.settings
    query = normalize_address(address)
    logger.info("Property extraction started for %r (query %r)", address, query)

    async with session.page() as page:
        try:
            value = await _run_lookup(page, query, settings, patterns)
        except PlaywrightError as exc:
            logger.error("Property extraction failed for %r: %s", query, exc)
            raise AutomationError(
                f"Browser automation failed: {exc}", {"address": query}
            ) from exc

    if value is None:
        logger.warning(
            "No assessed value after %d attempts for %r", settings.poll_attempts, query
        )
        raise PropertyValueNotFoundError(
            "Property value not found",
            {"address": query, "attempts": settings.poll_attempts},
        )

    logger.info("Extracted assessed value %s for %r", value, query)
    return value


def find_assessed_value(text: str, patterns: PropertySitePatterns = PROPERTY_SITE_V1) -> str | None:
    """Return the first currency amount in the page text, if any."""
    match = patterns.currency.search(text)
    return match.group(0).replace(" ", "") if match else None


# ─── Steps ───────────────────────────────────────────────────────────


async def _run_lookup(
    page: Page, query: str, settings: Settings, patterns: PropertySitePatterns
) -> str | None:
    logger.info("Navigating to %s", patterns.url)
    await bounded_wait(
        "navigate",
        page.goto(patterns.url, timeout=settings.navigation_timeout_ms),
        tolerant=True,
    )

    agree = page.locator(patterns.disclaimer_selector).first
    if await bounded_wait(
        "disclaimer",
        agree.wait_for(state="visible", timeout=settings.disclaimer_timeout_ms),
        tolerant=True,
    ):
        logger.info("Dismissing disclaimer")
        await agree.click()

    search_input = page.locator(patterns.search_input_selector)
    await search_input.fill(query)

    await page.wait_for_timeout(settings.suggestion_settle_ms)
    suggestions = page.locator(patterns.suggestion_selector)
    if await suggestions.count() > 0:
        logger.info("Selecting first suggestion")
        await suggestions.first.click()
    else:
        logger.info("No suggestions; submitting with Enter")
        await search_input.press("Enter")

    return await _poll_for_value(page, settings, patterns)


async def _poll_for_value(
    page: Page, settings: Settings, patterns: PropertySitePatterns
) -> str | None:
    for attempt in range(1, settings.poll_attempts + 1):
        await page.wait_for_timeout(settings.poll_interval_ms)

        labelled = page.locator(patterns.value_selector)
        if await labelled.count() > 0:
            text = (await labelled.first.inner_text()).strip()
            if text:
                return text

        value = find_assessed_value(await page.inner_text("body"), patterns)
        if value:
            return value

        logger.debug("No value yet (attempt %d/%d)", attempt, settings.poll_attempts)

    return None
