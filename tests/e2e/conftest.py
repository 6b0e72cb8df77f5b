"""
E2E Test Configuration
======================

Live rendering fixtures. These launch a real headless Chromium and are
skipped unless RUN_BROWSER_TESTS=1 is set and the Playwright browsers are
installed (``playwright install chromium``).
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from page_renderer.core.rendering.browser import BrowserProcess, LaunchConfig
from page_renderer.core.rendering.renderer import Renderer


def pytest_collection_modifyitems(config, items):
    if os.environ.get("RUN_BROWSER_TESTS") == "1":
        return
    skip_browser = pytest.mark.skip(reason="set RUN_BROWSER_TESTS=1 to run live browser tests")
    for item in items:
        if "browser" in item.keywords:
            item.add_marker(skip_browser)


@pytest_asyncio.fixture
async def live_renderer() -> AsyncGenerator[Renderer, None]:
    """Renderer over a freshly launched Chromium."""
    browser = await BrowserProcess(LaunchConfig()).initialize()
    renderer = Renderer(browser)
    try:
        yield renderer
    finally:
        await renderer.close()
