"""
In-process stand-ins for the Playwright objects the workflows touch.

Only the calls the workflows make are implemented. Every action is recorded
so tests can assert on what the automation did to the page.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class FakeLocator:
    def __init__(self, page: FakePage, selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> FakeLocator:
        return self

    async def count(self) -> int:
        return self.page.counts.get(self.selector, 0)

    async def click(self) -> None:
        self.page.actions.append(("click", self.selector))

    async def fill(self, text: str) -> None:
        self.page.actions.append(("fill", self.selector, text))

    async def press_sequentially(self, text: str, delay: float = 0) -> None:
        self.page.actions.append(("type", self.selector, text))

    async def press(self, key: str) -> None:
        self.page.actions.append(("press", self.selector, key))

    async def wait_for(self, state: str = "visible", timeout: float | None = None) -> None:
        if self.selector not in self.page.visible:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms waiting for {self.selector}")

    async def inner_text(self) -> str:
        return self.page.element_texts.get(self.selector, "")


class FakePage:
    """A page whose body text is either fixed or revealed read by read."""

    def __init__(
        self,
        body: str | list[str] = "",
        counts: dict[str, int] | None = None,
        visible: tuple[str, ...] = (),
        element_texts: dict[str, str] | None = None,
        goto_times_out: bool = False,
        result_times_out: bool = False,
        crash_on_goto: bool = False,
    ):
        self._bodies = list(body) if isinstance(body, list) else [body]
        self.counts = counts or {}
        self.visible = visible
        self.element_texts = element_texts or {}
        self.goto_times_out = goto_times_out
        self.result_times_out = result_times_out
        self.crash_on_goto = crash_on_goto
        self.actions: list[tuple] = []
        self.waits: list[float] = []
        self.body_reads = 0
        self.close_count = 0

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def goto(self, url: str, timeout: float | None = None) -> None:
        self.actions.append(("goto", url))
        if self.crash_on_goto:
            raise PlaywrightError("Target page, context or browser has been closed")
        if self.goto_times_out:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded navigating to {url}")

    async def wait_for_timeout(self, ms: float) -> None:
        self.waits.append(ms)

    async def wait_for_selector(self, selector: str, timeout: float | None = None) -> None:
        self.actions.append(("wait_for_selector", selector))
        if self.result_times_out:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms waiting for {selector}")

    async def inner_text(self, selector: str) -> str:
        index = min(self.body_reads, len(self._bodies) - 1)
        self.body_reads += 1
        return self._bodies[index]

    async def close(self) -> None:
        self.close_count += 1


class FakeContext:
    def __init__(self, browser: FakeBrowser):
        self.browser = browser
        self.pages: list[FakePage] = []
        self.default_timeout: float | None = None

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    async def new_page(self) -> FakePage:
        page = self.browser.playwright.page_factory()
        self.pages.append(page)
        return page


class FakeBrowser:
    def __init__(self, playwright: FakePlaywright):
        self.playwright = playwright
        self.connected = True
        self.contexts: list[FakeContext] = []

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **kwargs) -> FakeContext:
        context = FakeContext(self)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.connected = False


class _FakeChromium:
    def __init__(self, playwright: FakePlaywright):
        self.playwright = playwright

    async def launch(self, **kwargs) -> FakeBrowser:
        # Yield so concurrent callers can pile up behind the relaunch lock
        await asyncio.sleep(0)
        if self.playwright.fail_launches > 0:
            self.playwright.fail_launches -= 1
            raise PlaywrightError(self.playwright.launch_error)
        browser = FakeBrowser(self.playwright)
        self.playwright.browsers.append(browser)
        self.playwright.launch_kwargs.append(kwargs)
        return browser


class FakePlaywright:
    """Returned by ``FakePlaywrightManager.start()``; stands in for ``Playwright``."""

    def __init__(self, page_factory: Callable[[], FakePage] | None = None):
        self.page_factory = page_factory or FakePage
        self.chromium = _FakeChromium(self)
        self.browsers: list[FakeBrowser] = []
        self.launch_kwargs: list[dict] = []
        self.fail_launches = 0
        self.launch_error = "Executable doesn't exist"
        self.starts = 0
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True

    def factory(self) -> Callable[[], FakePlaywrightManager]:
        """Drop-in for ``async_playwright`` handed to BrowserSession."""
        return lambda: FakePlaywrightManager(self)


class FakePlaywrightManager:
    def __init__(self, playwright: FakePlaywright):
        self.playwright = playwright

    async def start(self) -> FakePlaywright:
        self.playwright.starts += 1
        self.playwright.stopped = False
        return self.playwright
