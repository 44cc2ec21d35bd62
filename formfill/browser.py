"""
Browser window hosting the CEAC form
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping, Optional, Set

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from .config import FillConfig
from .errors import TargetWindowNotOpen
from .filling import PageDocument, PageFiller

logger = logging.getLogger(__name__)


class WindowHost(ABC):
    """The automated page context as seen by the coordinator"""

    def __init__(self):
        self._close_handler: Optional[Callable[[], None]] = None

    def set_close_handler(self, handler: Optional[Callable[[], None]]) -> None:
        """Register a callback run when the window is closed by the user"""
        self._close_handler = handler

    def _notify_closed(self) -> None:
        if self._close_handler:
            self._close_handler()

    @property
    @abstractmethod
    def is_open(self) -> bool:
        pass

    @abstractmethod
    async def open(self, url: str) -> None:
        """Open the window and navigate to url"""
        pass

    @abstractmethod
    async def focus(self) -> None:
        pass

    @abstractmethod
    def send_fill(self, fields: Mapping[str, Any]) -> None:
        """Push field values to the page; returns without waiting for the fill"""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class BrowserWindow(WindowHost):
    """Playwright Chromium window running the page filler"""

    def __init__(self, fill_config: FillConfig, page_filler: Optional[PageFiller] = None):
        super().__init__()
        self.fill_config = fill_config
        self.page_filler = page_filler or PageFiller(fill_config)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.fill_tasks: Set[asyncio.Task] = set()
        self.context_close_tasks: Set[asyncio.Task] = set()

    @property
    def is_open(self) -> bool:
        return self.page is not None and not self.page.is_closed()

    async def _ensure_browser(self) -> Browser:
        if self._browser is None or not self._browser.is_connected():
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            logger.info(f"Launching Chromium (headless={self.fill_config.headless})")
            self._browser = await self._playwright.chromium.launch(headless=self.fill_config.headless)
        return self._browser

    async def open(self, url: str) -> None:
        browser = await self._ensure_browser()
        context = await browser.new_context(viewport={"width": 1200, "height": 800})
        page = await context.new_page()

        try:
            await page.goto(url)
        except PlaywrightError:
            await context.close()
            raise

        page.on("close", self._handle_page_closed)
        self._context = context
        self.page = page
        logger.info(f"Opened {url}")

    def _handle_page_closed(self, _page: Page) -> None:
        logger.info("CEAC page closed")
        self.page = None

        # One context per opened page; it goes away with the page
        context, self._context = self._context, None
        if context is not None:
            task = asyncio.create_task(self._close_context(context))
            self.context_close_tasks.add(task)
            task.add_done_callback(self.context_close_tasks.discard)

        self._notify_closed()

    async def _close_context(self, context: BrowserContext) -> None:
        try:
            await context.close()
        except PlaywrightError as e:
            logger.error(f"Error closing browser context: {e}")

    async def focus(self) -> None:
        if not self.is_open:
            raise TargetWindowNotOpen()
        await self.page.bring_to_front()

    def send_fill(self, fields: Mapping[str, Any]) -> None:
        if not self.is_open:
            raise TargetWindowNotOpen()

        task = asyncio.create_task(self._run_fill(self.page, dict(fields)))
        self.fill_tasks.add(task)
        task.add_done_callback(self.fill_tasks.discard)

    async def _run_fill(self, page: Page, fields: Mapping[str, Any]) -> None:
        # Nobody awaits this task, so every failure is logged here
        try:
            await self.page_filler.handle_fill_form(PageDocument(page), fields)
        except PlaywrightError as e:
            logger.error(f"Form fill failed: {e}")
        except Exception as e:
            logger.error(f"Unexpected error during form fill: {e}", exc_info=True)

    async def close(self) -> None:
        """Close the page and its context and shut the browser down"""
        for task in list(self.fill_tasks):
            task.cancel()

        # Shutdown is not a user close; do not report it
        self.set_close_handler(None)

        if self.page and not self.page.is_closed():
            try:
                await self.page.close()
            except PlaywrightError as e:
                logger.error(f"Error closing page: {e}")
        self.page = None

        context, self._context = self._context, None
        if context is not None:
            await self._close_context(context)
        if self.context_close_tasks:
            await asyncio.gather(*self.context_close_tasks)

        if self._browser:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.error(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
