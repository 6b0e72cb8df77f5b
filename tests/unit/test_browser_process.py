"""
Unit Tests for Browser Process
==============================

Launch configuration, lifecycle and engine error translation.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from page_renderer.core.rendering.browser import REQUIRED_ARGS, BrowserProcess, LaunchConfig
from page_renderer.core.rendering.errors import (
    CaptureFailed,
    EngineUnavailable,
    NavigationFailed,
)

from tests.utils.mocks import MockBrowser, make_browser_process


def _patched_playwright(browser=None, launch_error=None):
    """Patch async_playwright so launch returns the given browser."""
    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser, side_effect=launch_error)
    playwright.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)

    patcher = patch(
        "page_renderer.core.rendering.browser.async_playwright", return_value=starter
    )
    return patcher, playwright


class TestLaunchConfig:
    """Test launch argument augmentation."""

    def test_required_args_always_added(self):
        config = LaunchConfig(args=["--lang=en"])
        args = config.launch_args()

        assert args[0] == "--lang=en"
        for arg in REQUIRED_ARGS:
            assert arg in args

    def test_required_args_not_duplicated(self):
        config = LaunchConfig(args=["--no-sandbox"])
        assert config.launch_args().count("--no-sandbox") == 1

    def test_required_flags(self):
        assert set(REQUIRED_ARGS) == {
            "--no-sandbox",
            "--disable-dev-shm-usage",
            "--disk-cache-size=0",
            "--aggressive-cache-discard",
        }

    def test_caller_args_not_mutated(self):
        caller_args = ["--lang=en"]
        LaunchConfig(args=caller_args).launch_args()
        assert caller_args == ["--lang=en"]


class TestBrowserProcessLifecycle:
    """Test initialize and shutdown."""

    @pytest.mark.asyncio
    async def test_initialize_launches_with_augmented_args(self):
        browser = MockBrowser()
        patcher, playwright = _patched_playwright(browser)

        with patcher:
            process = BrowserProcess(LaunchConfig(args=["--lang=en"], headless=True))
            result = await process.initialize()

        assert result is process
        assert process.browser is browser
        assert process.is_connected()

        kwargs = playwright.chromium.launch.call_args.kwargs
        assert kwargs["headless"] is True
        assert kwargs["args"] == ["--lang=en", *REQUIRED_ARGS]
        assert "disconnected" in browser.handlers

    @pytest.mark.asyncio
    async def test_initialize_twice_raises(self):
        patcher, _ = _patched_playwright(MockBrowser())

        with patcher:
            process = BrowserProcess()
            await process.initialize()
            with pytest.raises(RuntimeError, match="already initialized"):
                await process.initialize()

    @pytest.mark.asyncio
    async def test_launch_failure_is_fatal(self):
        patcher, playwright = _patched_playwright(launch_error=Exception("chromium missing"))

        with patcher:
            process = BrowserProcess()
            with pytest.raises(EngineUnavailable, match="Browser launch failed"):
                await process.initialize()

        assert not process.is_connected()
        playwright.stop.assert_called_once()

    @pytest.mark.asyncio
    async def test_shutdown_closes_browser_and_playwright(self):
        browser = MockBrowser()
        patcher, playwright = _patched_playwright(browser)

        with patcher:
            process = BrowserProcess()
            await process.initialize()

        await process.shutdown()
        await process.shutdown()

        browser.close.assert_called_once()
        playwright.stop.assert_called_once()
        assert not process.is_connected()

    @pytest.mark.asyncio
    async def test_shutdown_tolerates_close_errors(self):
        browser = MockBrowser()
        browser.close.side_effect = PlaywrightError("Browser has been closed")
        process = make_browser_process(browser)

        await process.shutdown()

        assert process.browser is None


class TestBrowserContexts:
    """Test context creation and disconnection."""

    @pytest.mark.asyncio
    async def test_new_context_applies_https_setting(self):
        browser = MockBrowser()
        process = make_browser_process(browser, LaunchConfig(ignore_https_errors=True))

        context = await process.new_context(viewport={"width": 10, "height": 10})

        assert context is browser.context
        browser.new_context.assert_called_once_with(
            viewport={"width": 10, "height": 10}, ignore_https_errors=True
        )

    @pytest.mark.asyncio
    async def test_new_context_before_initialize(self):
        with pytest.raises(EngineUnavailable):
            await BrowserProcess().new_context()

    @pytest.mark.asyncio
    async def test_disconnect_marks_engine_unavailable(self):
        browser = MockBrowser()
        process = make_browser_process(browser)

        browser.crash()

        assert not process.is_connected()
        with pytest.raises(EngineUnavailable):
            await process.new_context()
        browser.new_context.assert_not_called()


class TestTranslateError:
    """Test mapping engine errors onto the taxonomy."""

    def test_connected_uses_fallback(self, browser_process):
        error = browser_process.translate_error(
            PlaywrightError("net::ERR_NAME_NOT_RESOLVED"), NavigationFailed, url="https://x.test"
        )
        assert isinstance(error, NavigationFailed)
        assert error.url == "https://x.test"
        assert "ERR_NAME_NOT_RESOLVED" in error.message

    def test_disconnected_is_engine_unavailable(self, browser_process, mock_browser):
        mock_browser.crash()
        error = browser_process.translate_error(PlaywrightError("Target closed"), CaptureFailed)
        assert isinstance(error, EngineUnavailable)

    def test_render_errors_pass_through(self, browser_process):
        original = CaptureFailed("bad clip")
        assert browser_process.translate_error(original, NavigationFailed) is original
