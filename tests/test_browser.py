"""
BrowserSession tests: lazy launch, relaunch after disconnect, page scoping.

Playwright is replaced with the fakes in ``fakes.py``; no browser starts.
"""

from __future__ import annotations

import asyncio

import pytest
from fakes import FakePlaywright, FakePlaywrightManager
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from riding_resolver.browser import BrowserSession, bounded_wait
from riding_resolver.config import Settings
from riding_resolver.exceptions import AutomationError


def _session(fake: FakePlaywright, **settings) -> BrowserSession:
    return BrowserSession(Settings(**settings), playwright_factory=fake.factory())


class TestEnsureSession:
    def test_launches_lazily(self):
        fake = FakePlaywright()
        session = _session(fake)
        assert fake.browsers == []
        assert session.is_connected is False

        asyncio.run(session.ensure_session())
        assert len(fake.browsers) == 1
        assert session.is_connected is True

    def test_reuses_connected_browser(self):
        fake = FakePlaywright()
        session = _session(fake)

        async def _run():
            first = await session.ensure_session()
            second = await session.ensure_session()
            return first, second

        first, second = asyncio.run(_run())
        assert first is second
        assert session.launch_count == 1

    def test_launch_options(self):
        fake = FakePlaywright()
        session = _session(fake, headless=True, slow_mo_ms=25, viewport_width=1024)
        handle = asyncio.run(session.ensure_session())

        kwargs = fake.launch_kwargs[0]
        assert kwargs["headless"] is True
        assert kwargs["slow_mo"] == 25
        assert "--start-maximized" in kwargs["args"]
        assert handle.context in handle.browser.contexts

    def test_relaunches_after_disconnect(self):
        fake = FakePlaywright()
        session = _session(fake)

        async def _run():
            first = await session.ensure_session()
            first.browser.connected = False  # simulated crash
            second = await session.ensure_session()
            return first, second

        first, second = asyncio.run(_run())
        assert second.browser is not first.browser
        assert second.context is not first.context
        assert session.launch_count == 2

    def test_concurrent_callers_share_one_relaunch(self):
        fake = FakePlaywright()
        session = _session(fake)

        async def _run():
            return await asyncio.gather(*(session.ensure_session() for _ in range(5)))

        handles = asyncio.run(_run())
        assert len(fake.browsers) == 1
        assert all(h is handles[0] for h in handles)

    def test_launch_failure_is_automation_error_and_not_cached(self):
        fake = FakePlaywright()
        fake.fail_launches = 1
        session = _session(fake)

        async def _run():
            with pytest.raises(AutomationError, match="launch failed"):
                await session.ensure_session()
            return await session.ensure_session()

        handle = asyncio.run(_run())
        assert handle.browser.is_connected()
        assert session.launch_count == 1

    def test_dead_driver_is_replaced_after_launch_failure(self):
        dead = FakePlaywright()
        dead.fail_launches = 100
        dead.launch_error = "Connection closed"
        healthy = FakePlaywright()
        drivers = iter([dead, healthy])
        session = BrowserSession(
            Settings(), playwright_factory=lambda: FakePlaywrightManager(next(drivers))
        )

        async def _run():
            with pytest.raises(AutomationError, match="Connection closed"):
                await session.ensure_session()
            return await session.ensure_session()

        handle = asyncio.run(_run())
        assert dead.stopped is True
        assert dead.browsers == []
        assert handle.browser in healthy.browsers
        assert healthy.starts == 1

    def test_driver_restarted_after_disconnect(self):
        fake = FakePlaywright()
        session = _session(fake)

        async def _run():
            first = await session.ensure_session()
            first.browser.connected = False
            await session.ensure_session()

        asyncio.run(_run())
        assert fake.starts == 2
        assert session.launch_count == 2

    def test_context_default_timeout_bounds_actions(self):
        fake = FakePlaywright()
        handle = asyncio.run(_session(fake, navigation_timeout_ms=4_000).ensure_session())
        assert handle.context.default_timeout == 4_000

    def test_close_stops_browser_and_driver(self):
        fake = FakePlaywright()
        session = _session(fake)

        async def _run():
            handle = await session.ensure_session()
            await session.close()
            return handle

        handle = asyncio.run(_run())
        assert handle.browser.is_connected() is False
        assert fake.stopped is True
        assert session.is_connected is False


class TestPageScope:
    def test_page_closed_after_success(self):
        fake = FakePlaywright()
        session = _session(fake)

        async def _run():
            async with session.page() as page:
                assert page.close_count == 0
            return page

        page = asyncio.run(_run())
        assert page.close_count == 1

    def test_page_closed_when_body_raises(self):
        fake = FakePlaywright()
        session = _session(fake)
        opened = []

        async def _run():
            async with session.page() as page:
                opened.append(page)
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            asyncio.run(_run())
        assert opened[0].close_count == 1

    def test_old_page_never_reused_after_relaunch(self):
        fake = FakePlaywright()
        session = _session(fake)

        async def _run():
            async with session.page() as first:
                pass
            fake.browsers[0].connected = False
            async with session.page() as second:
                pass
            return first, second

        first, second = asyncio.run(_run())
        assert first is not second
        assert first.close_count == 1
        assert second.close_count == 1
        assert second in fake.browsers[1].contexts[0].pages
        assert first not in fake.browsers[1].contexts[0].pages


class TestBoundedWait:
    @staticmethod
    async def _times_out():
        raise PlaywrightTimeoutError("Timeout 10ms exceeded")

    @staticmethod
    async def _completes():
        return None

    def test_tolerant_timeout_returns_false(self):
        assert asyncio.run(bounded_wait("result", self._times_out(), tolerant=True)) is False

    def test_strict_timeout_raises(self):
        with pytest.raises(AutomationError, match="result timed out"):
            asyncio.run(bounded_wait("result", self._times_out(), tolerant=False))

    def test_completed_wait_returns_true(self):
        assert asyncio.run(bounded_wait("result", self._completes(), tolerant=False)) is True
