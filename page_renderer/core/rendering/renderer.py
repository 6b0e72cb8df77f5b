"""
Renderer
========

Capture orchestration for the three render flows: HTML, PDF and screenshot.

Every flow follows the same skeleton: check the domain allow-list, open a
page session, navigate, capture, and close the session whatever happens.
No partial artifact is ever returned.
"""

import asyncio
from contextlib import asynccontextmanager, nullcontext
from dataclasses import dataclass
from typing import Any, AsyncContextManager, AsyncGenerator, Awaitable, Dict, Generic, Optional, TypeVar

from playwright.async_api import Error as PlaywrightError

from page_renderer.config.logging import get_logger
from page_renderer.core.rendering.browser import BrowserProcess
from page_renderer.core.rendering.domain_policy import DomainPolicy
from page_renderer.core.rendering.errors import CaptureFailed, ErrorKind, RenderError
from page_renderer.core.rendering.raster import RasterPostProcessor
from page_renderer.core.rendering.session import PageSession, SessionBuilder
from page_renderer.models.schemas import (
    ImageType,
    MediaType,
    PageOptions,
    PdfOptions,
    ScreenshotOptions,
    ViewportOptions,
)
from page_renderer.utils.urls import normalize_url

logger = get_logger(__name__)

T = TypeVar("T")

# Resolves once every running animation has finished or the timeout expires.
WAIT_FOR_ANIMATIONS_JS = """
async (timeout) => {
  const animations = document.getAnimations();
  if (animations.length === 0) {
    return 0;
  }
  const settled = Promise.allSettled(animations.map((a) => a.finished));
  const expired = new Promise((resolve) => setTimeout(resolve, timeout));
  await Promise.race([settled, expired]);
  return animations.length;
}
"""


@dataclass
class Screenshot:
    """Captured screenshot and its output type."""

    type: ImageType
    data: bytes

    @property
    def content_type(self) -> str:
        return f"image/{self.type.value}"


@dataclass
class RenderOutcome(Generic[T]):
    """Tagged result of a render: an artifact or a typed error."""

    artifact: Optional[T] = None
    error: Optional[RenderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None


async def run_capture(operation: Awaitable[T]) -> RenderOutcome[T]:
    """Await a render and fold any RenderError into a RenderOutcome."""
    try:
        return RenderOutcome(artifact=await operation)
    except RenderError as e:
        return RenderOutcome(error=e)


class Renderer:
    """Renders pages through a shared browser process."""

    def __init__(
        self,
        browser: BrowserProcess,
        domain_policy: Optional[DomainPolicy] = None,
        raster: Optional[RasterPostProcessor] = None,
        max_concurrent_sessions: int = 0,
    ):
        self.browser = browser
        self.domain_policy = domain_policy or DomainPolicy()
        self.raster = raster or RasterPostProcessor()
        self._slots: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(max_concurrent_sessions) if max_concurrent_sessions > 0 else None
        )
        self.logger: Any = logger.bind(component="renderer")

    def _admission(self) -> AsyncContextManager[Any]:
        return self._slots if self._slots is not None else nullcontext()

    @asynccontextmanager
    async def _session(
        self,
        url: str,
        page_options: PageOptions,
        viewport: Optional[ViewportOptions] = None,
    ) -> AsyncGenerator[PageSession, None]:
        """Domain check, open, navigate; the session is closed on exit."""
        # The allow-list and the browser must see the same URL
        url = normalize_url(url)
        self.domain_policy.assert_allowed(url)

        async with self._admission():
            session = await (
                SessionBuilder(self.browser)
                .with_viewport(viewport)
                .with_page_options(page_options)
                .open()
            )
            try:
                await session.navigate(url, page_options)
                yield session
            finally:
                await session.close()

    async def html(self, url: str, page_options: PageOptions) -> str:
        """Render the page and return its serialized DOM."""
        self.logger.info("Rendering HTML", url=url)
        async with self._session(url, page_options) as session:
            try:
                html = await session.page.content()
            except PlaywrightError as e:
                raise self.browser.translate_error(e, CaptureFailed, url=url) from e

        self.logger.info("HTML rendered", url=url, length=len(html))
        return html

    async def pdf(self, url: str, page_options: PageOptions, pdf_options: PdfOptions) -> bytes:
        """Render the page as a paginated PDF; print media unless overridden."""
        if page_options.emulate_media_type is None:
            page_options = page_options.model_copy(update={"emulate_media_type": MediaType.PRINT})

        self.logger.info("Rendering PDF", url=url)
        async with self._session(url, page_options) as session:
            try:
                data = await session.page.pdf(**pdf_options.to_engine_kwargs())
            except PlaywrightError as e:
                raise self.browser.translate_error(e, CaptureFailed, url=url) from e

        self.logger.info("PDF rendered", url=url, file_size=len(data))
        return data

    async def screenshot(
        self,
        url: str,
        page_options: PageOptions,
        viewport_options: ViewportOptions,
        screenshot_options: ScreenshotOptions,
    ) -> Screenshot:
        """Render the page as a raster image at logical pixel size."""
        self.logger.info(
            "Rendering screenshot",
            url=url,
            type=screenshot_options.type.value,
            width=viewport_options.width,
            height=viewport_options.height,
            device_scale_factor=viewport_options.device_scale_factor,
        )
        async with self._session(url, page_options, viewport_options) as session:
            try:
                if screenshot_options.animation_timeout > 0:
                    await self._wait_for_animations(session, screenshot_options.animation_timeout)
                data = await session.page.screenshot(**self.screenshot_kwargs(screenshot_options))
            except PlaywrightError as e:
                raise self.browser.translate_error(e, CaptureFailed, url=url) from e

        image_type = screenshot_options.type
        quality = screenshot_options.quality if image_type.lossy else None

        data = await asyncio.to_thread(
            self.raster.scale_for_device, data, viewport_options.device_scale_factor, quality
        )
        if image_type is ImageType.WEBP:
            try:
                data = await asyncio.to_thread(
                    self.raster.transcode, data, image_type.value, quality
                )
            except (OSError, ValueError) as e:
                raise CaptureFailed(f"Screenshot transcode failed: {e}", url=url) from e

        self.logger.info("Screenshot rendered", url=url, file_size=len(data))
        return Screenshot(type=image_type, data=data)

    @staticmethod
    def screenshot_kwargs(options: ScreenshotOptions) -> Dict[str, Any]:
        """
        Engine screenshot arguments. Quality is only passed for jpeg; webp
        is captured losslessly and transcoded afterwards.
        """
        capture_type = "jpeg" if options.type is ImageType.JPEG else "png"
        kwargs: Dict[str, Any] = {
            "type": capture_type,
            "full_page": options.full_page,
            "omit_background": options.omit_background,
        }
        if capture_type == "jpeg" and options.quality is not None:
            kwargs["quality"] = options.quality
        if options.clip is not None:
            kwargs["clip"] = options.clip.model_dump()
        return kwargs

    async def _wait_for_animations(self, session: PageSession, timeout: int) -> None:
        count = await session.page.evaluate(WAIT_FOR_ANIMATIONS_JS, timeout)
        self.logger.debug("Animations settled", animations=count, timeout=timeout)

    async def close(self) -> None:
        """Shut down the underlying browser process."""
        await self.browser.shutdown()
