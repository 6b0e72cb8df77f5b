"""
Page Sessions
=============

One ephemeral browsing context per request.

``SessionBuilder`` gathers the request's viewport and page options and runs
an ordered configuration pipeline (extra headers, then media emulation, then
credentials) while opening the session. Navigation is a method of the opened
``PageSession`` only, so it cannot start before configuration is complete.
"""

from typing import Any, Dict, Optional, Sequence

from playwright.async_api import (
    BrowserContext,
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from page_renderer.config.logging import get_logger
from page_renderer.core.rendering.browser import BrowserProcess
from page_renderer.core.rendering.errors import CaptureFailed, NavigationFailed
from page_renderer.models.schemas import PageOptions, ViewportOptions

logger = get_logger(__name__)


class ConfigureStep:
    """A single configuration step applied while a session opens."""

    name = "step"

    def context_options(self, options: PageOptions) -> Dict[str, Any]:
        """Options that must be fixed when the browsing context is created."""
        return {}

    async def apply(self, page: Page, options: PageOptions) -> None:
        """Configure the freshly created page."""


class ExtraHeadersStep(ConfigureStep):
    name = "headers"

    async def apply(self, page: Page, options: PageOptions) -> None:
        if options.headers:
            await page.set_extra_http_headers(options.headers)


class MediaEmulationStep(ConfigureStep):
    name = "media"

    async def apply(self, page: Page, options: PageOptions) -> None:
        if options.emulate_media_type is not None:
            await page.emulate_media(media=options.emulate_media_type.value)


class CredentialsStep(ConfigureStep):
    name = "credentials"

    # Auth challenges are answered by the context, so credentials are
    # bound at context creation.
    def context_options(self, options: PageOptions) -> Dict[str, Any]:
        if options.credentials is None:
            return {}
        return {
            "http_credentials": {
                "username": options.credentials.username,
                "password": options.credentials.password,
            }
        }


CONFIGURE_PIPELINE: Sequence[ConfigureStep] = (
    ExtraHeadersStep(),
    MediaEmulationStep(),
    CredentialsStep(),
)


class PageSession:
    """A browsing context and its page, closed exactly once."""

    def __init__(self, context: BrowserContext, page: Page, browser: BrowserProcess):
        self.context = context
        self.page = page
        self._browser = browser
        self._closed = False
        self._crash: Optional[str] = None
        page.on("crash", self._on_crash)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def crashed(self) -> bool:
        return self._crash is not None

    def _on_crash(self, *_: Any) -> None:
        self._crash = "Page crashed"
        logger.error("Page crashed", url=getattr(self.page, "url", None))

    async def disable_cache(self) -> None:
        """Disable the HTTP cache so every render reflects a fresh fetch."""
        cdp = await self.context.new_cdp_session(self.page)
        try:
            await cdp.send("Network.enable")
            await cdp.send("Network.setCacheDisabled", {"cacheDisabled": True})
        finally:
            await cdp.detach()

    async def navigate(self, url: str, options: PageOptions) -> "PageSession":
        """
        Load the URL and wait for the configured milestone.

        On any failure the session is closed before the error propagates.

        Raises:
            NavigationFailed: On timeout, network failure or page crash
            EngineUnavailable: If the browser disconnected
        """
        try:
            await self.page.goto(url, timeout=options.timeout, wait_until=options.wait_until)
            if self._crash is not None:
                raise NavigationFailed(self._crash, url=url)
        except PlaywrightTimeoutError as e:
            await self.close()
            raise NavigationFailed(
                f"Navigation timed out after {options.timeout}ms: {e}",
                url=url,
                timed_out=True,
            ) from e
        except PlaywrightError as e:
            await self.close()
            raise self._browser.translate_error(e, NavigationFailed, url=url) from e
        except BaseException:
            await self.close()
            raise
        return self

    async def close(self) -> None:
        """Close the page and its context. Never raises; no-op when closed."""
        if self._closed:
            return
        self._closed = True
        try:
            if not self.page.is_closed():
                await self.page.close()
        except PlaywrightError as e:
            logger.debug("Ignoring error while closing page", error=str(e))
        except Exception as e:
            logger.warning("Unexpected error while closing page", error=str(e))
        finally:
            await self._close_context()

    async def _close_context(self) -> None:
        try:
            await self.context.close()
        except PlaywrightError as e:
            logger.debug("Ignoring error while closing context", error=str(e))
        except Exception as e:
            logger.warning("Unexpected error while closing context", error=str(e))


class SessionBuilder:
    """Collects per-request configuration and opens a PageSession."""

    def __init__(
        self,
        browser: BrowserProcess,
        pipeline: Sequence[ConfigureStep] = CONFIGURE_PIPELINE,
    ):
        self.browser = browser
        self.pipeline = tuple(pipeline)
        self._page_options = PageOptions()
        self._viewport: Optional[ViewportOptions] = None

    def with_page_options(self, options: PageOptions) -> "SessionBuilder":
        self._page_options = options
        return self

    def with_viewport(self, viewport: Optional[ViewportOptions]) -> "SessionBuilder":
        self._viewport = viewport
        return self

    def context_options(self) -> Dict[str, Any]:
        """Keyword arguments for the browsing context."""
        options: Dict[str, Any] = {}
        if self._viewport is not None:
            viewport = self._viewport
            width, height = viewport.width, viewport.height
            if viewport.is_landscape and height > width:
                width, height = height, width
            options.update(
                viewport={"width": width, "height": height},
                device_scale_factor=viewport.device_scale_factor,
                is_mobile=viewport.is_mobile,
                has_touch=viewport.has_touch,
            )
        for step in self.pipeline:
            options.update(step.context_options(self._page_options))
        return options

    async def open(self) -> PageSession:
        """
        Create the browsing context, run the configuration pipeline and
        disable the HTTP cache.

        Raises:
            EngineUnavailable: If the browser cannot create a context
        """
        context = await self.browser.new_context(**self.context_options())
        session: Optional[PageSession] = None
        try:
            page = await context.new_page()
            session = PageSession(context, page, self.browser)
            for step in self.pipeline:
                await step.apply(page, self._page_options)
            await session.disable_cache()
        except BaseException as e:
            if session is not None:
                await session.close()
            else:
                try:
                    await context.close()
                except PlaywrightError as close_error:
                    logger.debug("Ignoring error while closing context", error=str(close_error))
            if isinstance(e, PlaywrightError):
                raise self.browser.translate_error(e, CaptureFailed) from e
            raise
        return session
