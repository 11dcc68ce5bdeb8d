import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, TypeVar

from playwright.async_api import Browser, Page, async_playwright

from embedflow.configs import settings
from embedflow.const import BROWSER_LAUNCH_ARGS, DEFAULT_VIEWPORT, PAGE_INIT_SCRIPT
from embedflow.extractors.base import BrowserLaunchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BrowserSessionManager:
    """
    Owns the single headless Chromium shared by all extractions.

    The browser is started on the first ``acquire()`` and kept alive until
    ``release()`` (or ``release_if_idle()``). Each extraction gets its own
    browser context and page through ``open_page()``, so cookies, DOM and
    network state never leak between concurrent requests.
    """

    def __init__(
        self,
        headless: Optional[bool] = None,
        user_agent: Optional[str] = None,
        executable_path: Optional[str] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        self.headless = settings.browser_headless if headless is None else headless
        self.user_agent = user_agent or settings.user_agent
        self.executable_path = executable_path or settings.browser_executable_path
        self._playwright_factory = playwright_factory
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()
        self._open_pages = 0
        self._last_used = time.monotonic()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    @property
    def open_pages(self) -> int:
        return self._open_pages

    async def acquire(self) -> Browser:
        async with self._lock:
            if self.is_running:
                return self._browser
            if self._browser is not None:
                logger.warning("Browser disconnected, relaunching")
                await self._shutdown()
            await self._launch()
            return self._browser

    async def release(self):
        async with self._lock:
            await self._shutdown()

    async def release_if_idle(self, idle_seconds: float) -> bool:
        async with self._lock:
            if self._browser is None or self._open_pages:
                return False
            if time.monotonic() - self._last_used < idle_seconds:
                return False
            logger.info(f"Browser idle for more than {idle_seconds:.0f}s, closing it")
            await self._shutdown()
            return True

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        browser = await self.acquire()
        self._open_pages += 1
        try:
            context = await browser.new_context(
                user_agent=self.user_agent,
                viewport=DEFAULT_VIEWPORT,
                ignore_https_errors=True,
            )
            try:
                page = await context.new_page()
                try:
                    await page.add_init_script(PAGE_INIT_SCRIPT)
                    yield page
                finally:
                    await page.close()
            finally:
                await context.close()
        finally:
            self._open_pages -= 1
            self._last_used = time.monotonic()

    async def with_page(self, fn: Callable[[Page], Awaitable[T]]) -> T:
        async with self.open_page() as page:
            return await fn(page)

    async def _launch(self):
        logger.info(f"Launching headless browser (headless={self.headless})")
        launch_options = {"headless": self.headless, "args": BROWSER_LAUNCH_ARGS}
        if self.executable_path:
            launch_options["executable_path"] = self.executable_path

        playwright = None
        try:
            playwright = await self._playwright_factory().start()
            self._browser = await playwright.chromium.launch(**launch_options)
            self._playwright = playwright
        except Exception as e:
            self._browser = None
            if playwright is not None:
                try:
                    await playwright.stop()
                except Exception as stop_error:
                    logger.debug(f"Error stopping playwright after failed launch: {stop_error}")
            raise BrowserLaunchError(f"Failed to launch browser: {e}") from e

    async def _shutdown(self):
        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
        if browser is not None:
            logger.info("Browser closed")
