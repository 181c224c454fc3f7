"""
Browser Session Manager

Owns one headless Chrome process for the lifetime of a scraping pass.
Selenium is blocking, so every WebDriver call runs on a dedicated
single-thread executor: calls against the shared driver are serialized
and the event loop stays free.
"""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, List, Optional

from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.common.exceptions import TimeoutException, WebDriverException

from jobhub.core.exceptions import BrowserInitError, NavigationError, SelectorTimeoutError
from jobhub.scrapers.base import ScrapingConfig
from jobhub.utils.logger import get_logger

logger = get_logger(__name__)

DriverFactory = Callable[[ScrapingConfig], Any]


def create_chrome_driver(config: ScrapingConfig) -> webdriver.Chrome:
    """Launch a headless Chrome WebDriver."""
    options = Options()

    if config.headless:
        options.add_argument("--headless=new")

    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--disable-gpu")
    options.add_argument("--no-first-run")
    options.add_argument("--window-size=1920,1080")

    if config.user_agent:
        options.add_argument(f"--user-agent={config.user_agent}")

    driver = webdriver.Chrome(options=options)
    driver.set_page_load_timeout(config.timeout_seconds)
    return driver


class BrowserPage:
    """A single tab of an open browser session."""

    def __init__(self, session: "BrowserSession", handle: str) -> None:
        self._session = session
        self.handle = handle

    def _activate(self) -> Any:
        driver = self._session.driver
        if driver.current_window_handle != self.handle:
            driver.switch_to.window(self.handle)
        return driver

    async def set_user_agent(self, user_agent: str) -> None:
        """Override the request identity string for subsequent navigation."""
        def _set() -> None:
            driver = self._activate()
            try:
                driver.execute_cdp_cmd("Network.setUserAgentOverride", {"userAgent": user_agent})
            except (AttributeError, WebDriverException) as e:
                # Non-Chromium drivers keep the launch-time user agent
                logger.debug("User agent override unavailable", error=str(e))

        await self._session.run(_set)

    async def goto(self, url: str, timeout: float) -> None:
        """
        Navigate and wait until the document has finished loading.

        Raises:
            NavigationError: On timeout or any WebDriver failure
        """
        def _goto() -> None:
            driver = self._activate()
            driver.set_page_load_timeout(timeout)
            driver.get(url)
            WebDriverWait(driver, timeout).until(
                lambda d: d.execute_script("return document.readyState") == "complete"
            )

        try:
            await self._session.run(_goto)
        except TimeoutException as e:
            raise NavigationError(url, f"timed out after {timeout:g}s") from e
        except WebDriverException as e:
            raise NavigationError(url, e.msg or type(e).__name__) from e

    async def wait_for_selector(self, selector: str, timeout: float) -> None:
        """
        Wait for at least one element matching a CSS selector.

        Raises:
            SelectorTimeoutError: If nothing matches within the timeout
        """
        def _wait() -> None:
            driver = self._activate()
            WebDriverWait(driver, timeout).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, selector))
            )

        try:
            await self._session.run(_wait)
        except TimeoutException as e:
            raise SelectorTimeoutError(selector, timeout) from e

    async def outer_html_all(self, selector: str) -> List[str]:
        """Snapshot the outer HTML of every element matching a CSS selector."""
        def _collect() -> List[str]:
            driver = self._activate()
            elements = driver.find_elements(By.CSS_SELECTOR, selector)
            return [element.get_attribute("outerHTML") or "" for element in elements]

        return await self._session.run(_collect)


class BrowserSession:
    """
    One headless browser process with scoped per-source tabs.

    Usage::

        async with BrowserSession(config) as session:
            async with session.page() as page:
                await page.goto(url, timeout=30)
    """

    def __init__(self, config: Optional[ScrapingConfig] = None, driver_factory: Optional[DriverFactory] = None) -> None:
        self.config = config or ScrapingConfig()
        self._driver_factory = driver_factory or create_chrome_driver
        self.driver: Optional[Any] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._home_handle: Optional[str] = None
        self._poisoned = False
        self.pages_opened = 0

    @property
    def is_open(self) -> bool:
        return self.driver is not None

    @property
    def is_poisoned(self) -> bool:
        """True once a page scope was cancelled or the driver failed; the session must be recycled."""
        return self._poisoned

    async def is_responsive(self) -> bool:
        """Check that the browser process still answers WebDriver calls."""
        if self.driver is None or self._poisoned:
            return False
        try:
            await asyncio.wait_for(
                self.run(lambda: self.driver.window_handles),
                timeout=self.config.timeout_seconds,
            )
        except (WebDriverException, asyncio.TimeoutError) as e:
            logger.warning("Headless browser is not responding", error=str(e))
            self._poisoned = True
            return False
        return True

    async def __aenter__(self) -> "BrowserSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def run(self, func: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking WebDriver call on the session's browser thread."""
        if self._executor is None:
            raise RuntimeError("Browser session is not open")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(func, *args))

    async def open(self) -> None:
        """
        Launch the browser process.

        Raises:
            BrowserInitError: If the browser cannot be started
        """
        if self.driver is not None:
            return

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="browser")
        try:
            self.driver = await self.run(self._driver_factory, self.config)
            self._home_handle = await self.run(lambda: self.driver.current_window_handle)
        except (WebDriverException, OSError, RuntimeError) as e:
            await self._shutdown()
            raise BrowserInitError(f"Could not launch headless browser: {e}") from e

        self._poisoned = False
        logger.info("Headless browser started", headless=self.config.headless)

    async def close(self) -> None:
        """Terminate the browser process and release all tabs. Never raises."""
        if self.driver is None and self._executor is None:
            return
        await self._shutdown()
        logger.info("Headless browser closed", pages_opened=self.pages_opened)

    async def _shutdown(self) -> None:
        driver, executor = self.driver, self._executor
        self.driver = None
        self._executor = None
        self._home_handle = None

        if driver is not None:
            try:
                # The browser thread may be stuck on a hung call, so quit from another thread
                await asyncio.get_running_loop().run_in_executor(None, driver.quit)
            except Exception as e:
                logger.warning("Error while quitting browser", error=str(e))

        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    @asynccontextmanager
    async def page(self) -> AsyncIterator[BrowserPage]:
        """Open a fresh tab for the duration of the block and close it on every exit path."""
        if self.driver is None:
            raise RuntimeError("Browser session is not open")
        if self._poisoned:
            raise RuntimeError("Browser session must be recycled before reuse")

        try:
            handle = await self.run(self._open_tab)
        except (WebDriverException, asyncio.CancelledError):
            self._poisoned = True
            raise
        self.pages_opened += 1
        try:
            yield BrowserPage(self, handle)
        except asyncio.CancelledError:
            # The browser thread may still be busy; quitting the driver releases the tab
            self._poisoned = True
            raise
        finally:
            if not self._poisoned and self.driver is not None:
                try:
                    await self.run(self._close_tab, handle)
                except WebDriverException as e:
                    # The driver is likely gone
                    logger.warning("Failed to close browser tab", error=str(e))
                    self._poisoned = True

    def _open_tab(self) -> str:
        self.driver.switch_to.new_window("tab")
        return self.driver.current_window_handle

    def _close_tab(self, handle: str) -> None:
        if self.driver.current_window_handle != handle:
            self.driver.switch_to.window(handle)
        self.driver.close()
        # Closing the last window would end the WebDriver session
        self.driver.switch_to.window(self._home_handle)
