"""
Electoral district lookup via browser automation.

Flow:
  Navigate → LocateInput → TypeQuery → AwaitSuggestions → SelectOrSubmit
           → AwaitResult → ExtractText → Done | Failed

Navigation and the result wait are soft: the page may still hold a usable
answer after a timeout, so extraction runs on whatever rendered. Only a
missing search box or unparseable text fails the lookup.
"""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from .browser import BrowserSession, bounded_wait
from .config import Settings
from .exceptions import AutomationError, RidingNotParseableError
from .normalizer import normalize_address
from .patterns import RIDING_SITE_V1, RidingSitePatterns

logger = logging.getLogger(__name__)


async def extract_riding(
    session: BrowserSession,
    address: str,
    settings: Settings | None = None,
    patterns: RidingSitePatterns = RIDING_SITE_V1,
) -> str:
    """Look up the electoral district for an address on the Elections BC site.

    Returns:
        The district as displayed, e.g. ``"Surrey-Fleetwood (SRF)"``.

    Raises:
        AutomationError: browser, navigation or selector failure.
        RidingNotParseableError: the page rendered but held no district name.
    """
    settings = settings or session.settings
    query = normalize_address(address)
    logger.info("Riding extraction started for %r (query %r)", address, query)

    async with session.page() as page:
        try:
            text = await _run_lookup(page, query, settings, patterns)
        except PlaywrightError as exc:
            logger.error("Riding extraction failed for %r: %s", query, exc)
            raise AutomationError(
                f"Browser automation failed: {exc}", {"address": query}
            ) from exc

    riding = parse_riding_text(text, patterns)
    if riding is None:
        logger.error("No district found in page text for %r", query)
        raise RidingNotParseableError(
            "Could not parse an electoral district from the lookup page",
            {"address": query, "patterns_version": patterns.version},
        )

    logger.info("Extracted riding %r for %r", riding, query)
    return riding


def parse_riding_text(text: str, patterns: RidingSitePatterns = RIDING_SITE_V1) -> str | None:
    """Pull the district name out of rendered page text.

    The primary pattern is anchored on the site's result sentence; the
    secondary accepts any ``"Name (ABC)"`` fragment.
    """
    match = patterns.primary.search(text)
    if match:
        return match.group("riding").strip()

    match = patterns.secondary.search(text)
    if match:
        logger.info("Primary riding pattern missed; matched secondary pattern")
        return match.group("riding").strip()

    return None


# ─── Steps ───────────────────────────────────────────────────────────


async def _run_lookup(
    page: Page, query: str, settings: Settings, patterns: RidingSitePatterns
) -> str:
    logger.info("Navigating to %s", patterns.url)
    await bounded_wait(
        "navigate",
        page.goto(patterns.url, timeout=settings.navigation_timeout_ms),
        tolerant=True,
    )

    search_input = await _locate_input(page, patterns)

    logger.info("Typing address")
    await search_input.click()
    await search_input.fill("")
    await search_input.press_sequentially(query, delay=settings.typing_delay_ms)

    await page.wait_for_timeout(settings.suggestion_settle_ms)
    suggestions = page.locator(patterns.suggestion_selector)
    if await suggestions.count() > 0:
        logger.info("Selecting first suggestion")
        await suggestions.first.click()
    else:
        logger.info("No suggestions; submitting with Enter")
        await search_input.press("Enter")

    logger.info("Waiting for result")
    await bounded_wait(
        "await result",
        page.wait_for_selector(
            f"text={patterns.result_marker}", timeout=settings.result_timeout_ms
        ),
        tolerant=True,
    )

    return await page.inner_text("body")


async def _locate_input(page: Page, patterns: RidingSitePatterns) -> Locator:
    """Return the first candidate selector that matches anything on the page."""
    for selector in patterns.input_selectors:
        locator = page.locator(selector)
        if await locator.count() > 0:
            logger.debug("Search input matched %s", selector)
            return locator.first

    raise AutomationError(
        "Could not find the address search input",
        {"selectors": list(patterns.input_selectors), "url": patterns.url},
    )
