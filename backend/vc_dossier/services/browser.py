"""
Browser Scraper Module

Renders firm web pages in a headless Chromium instance so that
JavaScript-built team and portfolio pages are captured.

Key Features:
- Single lazily launched browser reused across pages
- Network-idle navigation with a DOM-content fallback
- Expands "Read more" / "Know more" dialogs before capturing HTML
"""

from typing import Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
)

from ..schemas import ScrapeResult
from ..utils.config import settings
from ..utils.logger import browser_logger as logger

DIALOG_SELECTORS = [
    'button:has-text("Know More")',
    'button:has-text("Read More")',
    'a:has-text("Know More")',
    'a:has-text("Read More")',
    '[data-toggle="modal"]',
    ".modal-trigger",
]


class BrowserScraper:
    """
    Headless page renderer.
    Pages are visited one at a time, each in its own browser context.
    """

    def __init__(self, headless: Optional[bool] = None):
        self.headless = settings.BROWSER_HEADLESS if headless is None else headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> "BrowserScraper":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _get_browser(self) -> Browser:
        """Get or create the Chromium instance (lazy initialization)"""
        if self._browser is None:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
            logger.info(f"Chromium launched (headless={self.headless})")
        return self._browser

    async def scrape(self, url: str) -> ScrapeResult:
        """
        Render a page and return its final HTML.

        Navigation failures are reported in the result rather than raised.
        """
        logger.info(f"Scraping: {url}")
        context = None
        try:
            browser = await self._get_browser()
            context = await browser.new_context(user_agent=settings.USER_AGENT)
            page = await context.new_page()
            try:
                status_code = await self._navigate(page, url)
            except Exception as e:
                logger.warning(f"Navigation failed for {url}: {str(e)}")
                return ScrapeResult(url=url, html=None, status_code=0, error=str(e))

            await page.wait_for_timeout(settings.RENDER_WAIT_MS)
            await self._click_dialog_buttons(page)
            html = await page.content()
            return ScrapeResult(url=url, html=html, status_code=status_code)
        except Exception as e:
            logger.error(f"Error scraping {url}: {str(e)}")
            return ScrapeResult(url=url, html=None, status_code=0, error=str(e))
        finally:
            if context is not None:
                await context.close()

    async def _navigate(self, page: Page, url: str) -> int:
        try:
            response = await page.goto(
                url, wait_until="networkidle", timeout=settings.NAVIGATION_TIMEOUT_MS
            )
        except PlaywrightTimeout:
            logger.warning(f"Network idle timeout for {url}, falling back to domcontentloaded")
            response = await page.goto(
                url, wait_until="domcontentloaded", timeout=settings.FALLBACK_TIMEOUT_MS
            )
        return response.status if response else 0

    async def _click_dialog_buttons(self, page: Page) -> None:
        """Open bio modals and collapsed sections so their text is in the DOM"""
        for selector in DIALOG_SELECTORS:
            buttons = await page.locator(selector).all()
            if not buttons:
                continue
            logger.debug(f"Clicking {len(buttons)} '{selector}' elements")
            for button in buttons:
                try:
                    await button.click(timeout=1000)
                except Exception:
                    continue
                await page.wait_for_timeout(500)

    async def close(self) -> None:
        """Release the browser and the Playwright driver"""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
