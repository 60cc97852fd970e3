"""
PNG Generator
=============

Browser backend: load the card document into a Playwright page and capture
the card element. Pages are acquired fresh per render and always closed.
"""

from typing import Any, AsyncGenerator, Optional, Protocol
import asyncio
from contextlib import asynccontextmanager

from playwright.async_api import async_playwright, Browser, Page, Playwright

from hcrm.config.logging import get_logger
from hcrm.config.settings import get_settings
from hcrm.core.exceptions import CardRenderError
from hcrm.core.rendering.html_generator import CARD_SELECTOR, generate_card_html
from hcrm.core.rendering.imaging import finalize_png
from hcrm.models.schemas import CardAssets, RenderConfig, RenderData, RenderResult

logger = get_logger(__name__)

ELEMENT_NOT_FOUND_MESSAGE = "渲染错误：未找到卡片元素"
RENDER_FAILED_PREFIX = "生成失败："


class PNGGenerationError(CardRenderError):
    """Exception raised when PNG generation fails."""

    pass


class PageProvider(Protocol):
    """Supplies browser pages; the caller closes every page it receives."""

    async def page(self) -> Page: ...


class PlaywrightPageProvider:
    """Lazily started Chromium browser handing out one page per request."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(component="page_provider")  # structlog.BoundLoggerBase
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Start Playwright and launch the browser."""
        async with self._lock:
            if self._browser is not None:
                return
            try:
                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.settings.playwright_headless,
                    args=[
                        "--no-sandbox",
                        "--disable-setuid-sandbox",
                        "--disable-dev-shm-usage",
                    ],
                )
            except Exception as e:
                self.logger.error("Failed to launch browser", error=str(e))
                await self._stop_playwright()
                raise PNGGenerationError(f"Browser launch failed: {e}")

        self.logger.info("Browser launched", headless=self.settings.playwright_headless)

    async def page(self) -> Page:
        """Open a new page with the card viewport and device scale factor."""
        if self._browser is None:
            await self.initialize()
        if self._browser is None:
            raise PNGGenerationError("Browser not initialized")

        page = await self._browser.new_page(
            viewport={
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height,
            },
            device_scale_factor=self.settings.device_scale_factor,
        )
        page.set_default_timeout(self.settings.playwright_timeout)
        return page

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        await self._stop_playwright()
        self.logger.info("Browser closed")

    async def _stop_playwright(self) -> None:
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None


@asynccontextmanager
async def acquire_page(provider: PageProvider) -> AsyncGenerator[Page, None]:
    """Acquire a page and close it on every exit path."""
    page = await provider.page()
    try:
        yield page
    finally:
        try:
            await page.close()
        except Exception as e:
            logger.warning("Failed to close page", error=str(e))


class DomScreenshotRenderer:
    """Render the card by screenshotting its element in a browser page."""

    def __init__(self, page_provider: Optional[PageProvider] = None):
        self.settings = get_settings()
        self.logger: Any = logger.bind(generator="playwright")  # structlog.BoundLoggerBase
        self.page_provider = page_provider

    async def render(
        self, data: RenderData, assets: CardAssets, config: RenderConfig
    ) -> RenderResult:
        """
        Render the card to PNG.

        Args:
            data: Assembled template data
            assets: Resolved fonts and background
            config: User render options

        Returns:
            RenderResult with the element screenshot or a user facing error
        """
        provider = self.page_provider or get_page_provider()

        try:
            html_content = await generate_card_html(data, assets, config)

            async with acquire_page(provider) as page:
                await page.set_viewport_size(
                    {
                        "width": self.settings.viewport_width,
                        "height": self.settings.viewport_height,
                    }
                )
                await page.set_content(html_content, wait_until=self.settings.dom_wait_until)

                element = await page.query_selector(CARD_SELECTOR)
                if element is None:
                    self.logger.warning("Card element not found", selector=CARD_SELECTOR)
                    return RenderResult.failed(ELEMENT_NOT_FOUND_MESSAGE)

                screenshot_bytes = await element.screenshot(type="png")

            result = finalize_png(
                screenshot_bytes,
                generator="playwright_element",
                optimize=self.settings.optimize_png,
                metadata={
                    "element_selector": CARD_SELECTOR,
                    "device_scale_factor": self.settings.device_scale_factor,
                },
            )
        except Exception as e:
            self.logger.error("Card screenshot failed", error=str(e), exc_info=True)
            return RenderResult.failed(f"{RENDER_FAILED_PREFIX}{e}")

        self.logger.info("Card screenshot completed", file_size=result.file_size)
        return RenderResult.ok(result)


# Global page provider instance
_global_page_provider: Optional[PlaywrightPageProvider] = None


def get_page_provider() -> PlaywrightPageProvider:
    """Get the process-wide Playwright page provider."""
    global _global_page_provider
    if _global_page_provider is None:
        _global_page_provider = PlaywrightPageProvider()
    return _global_page_provider


async def close_page_provider() -> None:
    """Close the process-wide page provider."""
    global _global_page_provider
    if _global_page_provider is not None:
        await _global_page_provider.close()
        _global_page_provider = None


async def render_dom(
    data: RenderData,
    assets: CardAssets,
    config: RenderConfig,
    page_provider: Optional[PageProvider] = None,
) -> RenderResult:
    """Render the card with the browser backend."""
    return await DomScreenshotRenderer(page_provider).render(data, assets, config)
