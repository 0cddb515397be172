"""Pytest configuration: ensures the project root is importable."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent))


@pytest.fixture(autouse=True)
def _no_real_browser():
    """Fail loudly instead of launching Chromium; tests inject fake Playwright objects."""

    def _refuse():
        raise AssertionError("Tests must not launch a real browser")

    with patch("riding_resolver.browser.async_playwright", _refuse):
        yield
