"""
Long-lived Playwright browser shared by the automation workflows.

Starting Chromium costs seconds, so one browser and one browsing context are
kept for the life of the process. Each workflow call borrows a fresh page and
always gives it back. A crashed or closed browser is detected on the next
call and relaunched; concurrent callers wait on the same relaunch.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import Settings
from .exceptions import AutomationError

logger = logging.getLogger(__name__)


@dataclass
class SessionHandle:
    browser: Browser
    context: BrowserContext


class BrowserSession:
    """Owns the process-wide browser and hands out request-scoped pages.

    Usage:
        session = BrowserSession(Settings.from_env())
        async with session.page() as page:
            await page.goto("https://example.org")
        ...
        await session.close()  # process shutdown only
    """

    def __init__(
        self,
        settings: Settings | None = None,
        playwright_factory: Callable[[], Any] | None = None,
    ):
        self.settings = settings or Settings()
        self._playwright_factory = playwright_factory or async_playwright
        self._playwright: Any = None
        self._handle: SessionHandle | None = None
        self._relaunch_lock = asyncio.Lock()
        self.launch_count = 0

    @property
    def is_connected(self) -> bool:
        return self._handle is not None and self._handle.browser.is_connected()

    async def ensure_session(self) -> SessionHandle:
        """Return a connected browser and context, launching them if needed."""
        handle = self._handle
        if handle is not None and handle.browser.is_connected():
            return handle

        async with self._relaunch_lock:
            # Another request may have relaunched while we waited
            handle = self._handle
            if handle is not None and handle.browser.is_connected():
                return handle

            if handle is not None:
                logger.warning("Browser disconnected, relaunching")
                # The driver may have died with the browser
                await self._stop_driver()
            self._handle = None
            self._handle = await self._launch()
            return self._handle

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Yield one page from the shared context and close it on every exit path."""
        handle = await self.ensure_session()
        try:
            page = await handle.context.new_page()
        except PlaywrightError as exc:
            raise AutomationError(f"Could not open a browser page: {exc}") from exc

        try:
            yield page
        finally:
            try:
                await page.close()
            except PlaywrightError as exc:
                # Browser already gone; the page went with it
                logger.warning("Page close failed: %s", exc)

    async def close(self) -> None:
        """Stop the browser and the Playwright driver (process shutdown)."""
        handle, self._handle = self._handle, None
        if handle is not None:
            try:
                await handle.browser.close()
            except PlaywrightError as exc:
                logger.warning("Browser close failed: %s", exc)
        await self._stop_driver()

    # ─── Internal ────────────────────────────────────────────────────

    async def _stop_driver(self) -> None:
        """Stop the Playwright driver so the next launch starts a fresh one."""
        playwright, self._playwright = self._playwright, None
        if playwright is None:
            return
        try:
            await playwright.stop()
        except Exception as exc:
            logger.warning("Playwright driver stop failed: %s", exc)

    async def _launch(self) -> SessionHandle:
        s = self.settings
        try:
            if self._playwright is None:
                self._playwright = await self._playwright_factory().start()

            logger.info("Launching Chromium (headless=%s)", s.headless)
            browser = await self._playwright.chromium.launch(
                headless=s.headless,
                slow_mo=s.slow_mo_ms,
                args=["--start-maximized"],
            )
            context = await browser.new_context(
                viewport={"width": s.viewport_width, "height": s.viewport_height},
            )
            # Bounds clicks, fills and key presses that take no explicit timeout
            context.set_default_timeout(s.navigation_timeout_ms)
        except PlaywrightError as exc:
            logger.error("Browser launch failed: %s", exc)
            await self._stop_driver()
            raise AutomationError(
                f"Browser launch failed: {exc}", {"step": "launch"}
            ) from exc

        self.launch_count += 1
        return SessionHandle(browser=browser, context=context)


async def bounded_wait(step: str, awaitable: Awaitable[Any], *, tolerant: bool) -> bool:
    """Await a Playwright wait and classify its timeout.

    Args:
        step: Name used in logs and error details.
        awaitable: The wait itself (``page.goto``, ``wait_for_selector``, ...).
        tolerant: Soft wait when True: a timeout is logged and ``False`` is
            returned. Hard wait when False: a timeout raises AutomationError.

    Returns:
        True if the wait completed before its timeout.
    """
    try:
        await awaitable
    except PlaywrightTimeoutError as exc:
        if tolerant:
            logger.warning("%s timed out, continuing: %s", step, exc)
            return False
        raise AutomationError(f"{step} timed out", {"step": step}) from exc
    return True
