"""
Browser Process
===============

The single long-lived Chromium instance shared by every request.
Launched once by the application lifespan and injected into the renderer;
each request creates its own browsing context from it.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Type

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Playwright,
    async_playwright,
)

from page_renderer.config.logging import get_logger
from page_renderer.core.rendering.errors import EngineUnavailable, RenderError

logger = get_logger(__name__)

# Always added to the launch arguments: sandbox-less for containers and no
# on-disk cache state accumulating across short-lived contexts.
REQUIRED_ARGS: Sequence[str] = (
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disk-cache-size=0",
    "--aggressive-cache-discard",
)


@dataclass
class LaunchConfig:
    """Browser launch configuration."""

    args: List[str] = field(default_factory=list)
    ignore_https_errors: bool = False
    headless: bool = True

    def launch_args(self) -> List[str]:
        """Caller arguments augmented with the required flags."""
        args = list(self.args)
        for arg in REQUIRED_ARGS:
            if arg not in args:
                args.append(arg)
        return args


class BrowserProcess:
    """Owns the Playwright driver and the browser it launched."""

    def __init__(self, config: Optional[LaunchConfig] = None):
        self.config = config or LaunchConfig()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._initialized = False
        self._disconnected = False
        self.logger: Any = logger.bind(component="browser_process")

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser

    def is_connected(self) -> bool:
        """Whether the browser is up and still connected."""
        if self._browser is None or self._disconnected:
            return False
        return self._browser.is_connected()

    async def initialize(self) -> "BrowserProcess":
        """
        Start Playwright and launch the browser.

        Returns:
            This browser process, ready to create contexts

        Raises:
            EngineUnavailable: If the browser fails to launch
        """
        if self._initialized:
            raise RuntimeError("Browser process already initialized")
        self._initialized = True

        args = self.config.launch_args()
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=args,
                handle_sigint=False,
                handle_sigterm=False,
                handle_sighup=False,
            )
        except Exception as e:
            self.logger.error("Failed to launch browser", error=str(e))
            await self._stop_playwright()
            raise EngineUnavailable(f"Browser launch failed: {e}") from e

        self._browser.on("disconnected", self._on_disconnected)
        self.logger.info(
            "Initialized renderer browser",
            args=args,
            headless=self.config.headless,
            ignore_https_errors=self.config.ignore_https_errors,
        )
        return self

    def _on_disconnected(self, *_: Any) -> None:
        self._disconnected = True
        # No relaunch: in-flight and later requests fail with EngineUnavailable
        self.logger.error("Browser process disconnected")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create an isolated browsing context.

        Raises:
            EngineUnavailable: If the browser is not running
        """
        if not self.is_connected():
            raise EngineUnavailable("Browser is not available")

        options.setdefault("ignore_https_errors", self.config.ignore_https_errors)
        try:
            return await self._browser.new_context(**options)  # type: ignore[union-attr]
        except PlaywrightError as e:
            raise self.translate_error(e, EngineUnavailable) from e

    def translate_error(
        self, exc: BaseException, fallback: Type[RenderError], url: Optional[str] = None
    ) -> RenderError:
        """Map an engine error onto the render error taxonomy."""
        if isinstance(exc, RenderError):
            return exc
        if not self.is_connected():
            return EngineUnavailable(f"Browser disconnected: {exc}", url=url)
        return fallback(str(exc), url=url)

    async def shutdown(self) -> None:
        """Close the browser and stop Playwright. Safe to call repeatedly."""
        browser, self._browser = self._browser, None
        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as e:
                self.logger.warning("Error closing browser", error=str(e))
        await self._stop_playwright()
        self.logger.info("Browser process shut down")

    async def _stop_playwright(self) -> None:
        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                self.logger.warning("Error stopping Playwright", error=str(e))
