"""
Tests for the browser session manager, driven by a fake WebDriver.
"""

import pytest
from selenium.common.exceptions import TimeoutException, WebDriverException

from jobhub.core.exceptions import BrowserInitError, NavigationError, SelectorTimeoutError

from tests.factories import FakeBrowserFactory, listing_html

CAREERS = "https://example.com/careers"


@pytest.mark.scraper
@pytest.mark.unit
class TestBrowserSession:
    """Test session lifecycle and tab scoping."""

    async def test_open_and_close(self, scraping_config):
        factory = FakeBrowserFactory({})
        session = factory(scraping_config)

        await session.open()
        assert session.is_open

        await session.close()
        assert not session.is_open
        assert factory.drivers[0].quit_called

    async def test_close_is_idempotent(self, scraping_config):
        session = FakeBrowserFactory({})(scraping_config)

        await session.open()
        await session.close()
        await session.close()

    async def test_launch_failure(self, scraping_config):
        factory = FakeBrowserFactory({}, fail_launch=WebDriverException("chrome not found"))
        session = factory(scraping_config)

        with pytest.raises(BrowserInitError):
            await session.open()

        assert not session.is_open

    async def test_page_requires_open_session(self, scraping_config):
        session = FakeBrowserFactory({})(scraping_config)

        with pytest.raises(RuntimeError):
            async with session.page():
                pass

    async def test_tab_is_closed_after_use(self, scraping_config):
        factory = FakeBrowserFactory({CAREERS: [listing_html(0), listing_html(1)]})

        async with factory(scraping_config) as session:
            async with session.page() as page:
                await page.set_user_agent("JobHubTest/1.0")
                await page.goto(CAREERS, timeout=5)
                fragments = await page.outer_html_all(".job-listing")

            driver = factory.drivers[0]
            assert driver.window_handles == ["home"]
            assert driver.current_window_handle == "home"

        assert len(fragments) == 2
        assert driver.visits == [CAREERS]
        assert driver.user_agents == ["JobHubTest/1.0"]
        assert driver.closed_tabs == ["tab-1"]
        assert session.pages_opened == 1

    async def test_tab_is_closed_on_error(self, scraping_config):
        factory = FakeBrowserFactory({})

        async with factory(scraping_config) as session:
            with pytest.raises(ValueError):
                async with session.page():
                    raise ValueError("boom")

            assert factory.drivers[0].closed_tabs == ["tab-1"]
            assert not session.is_poisoned


@pytest.mark.scraper
@pytest.mark.unit
class TestBrowserPage:
    """Test page operations and their error mapping."""

    async def test_navigation_timeout(self, scraping_config):
        factory = FakeBrowserFactory({CAREERS: TimeoutException("page load")})

        async with factory(scraping_config) as session:
            async with session.page() as page:
                with pytest.raises(NavigationError) as exc_info:
                    await page.goto(CAREERS, timeout=5)

        assert exc_info.value.url == CAREERS
        assert "timed out" in exc_info.value.message

    async def test_navigation_driver_error(self, scraping_config):
        factory = FakeBrowserFactory({CAREERS: WebDriverException("net::ERR_NAME_NOT_RESOLVED")})

        async with factory(scraping_config) as session:
            async with session.page() as page:
                with pytest.raises(NavigationError, match="ERR_NAME_NOT_RESOLVED"):
                    await page.goto(CAREERS, timeout=5)

    async def test_wait_for_selector_timeout(self, scraping_config):
        factory = FakeBrowserFactory({CAREERS: []})

        async with factory(scraping_config) as session:
            async with session.page() as page:
                await page.goto(CAREERS, timeout=5)
                with pytest.raises(SelectorTimeoutError):
                    await page.wait_for_selector(".job-listing", timeout=0.1)

    async def test_wait_for_selector_found(self, scraping_config):
        factory = FakeBrowserFactory({CAREERS: [listing_html(0)]})

        async with factory(scraping_config) as session:
            async with session.page() as page:
                await page.goto(CAREERS, timeout=5)
                await page.wait_for_selector(".job-listing", timeout=1)


@pytest.mark.scraper
@pytest.mark.unit
class TestBrowserHealth:
    """Test detection of a browser that died mid-pass."""

    async def test_responsive(self, scraping_config):
        async with FakeBrowserFactory({})(scraping_config) as session:
            assert await session.is_responsive()
            assert not session.is_poisoned

    async def test_dead_driver_poisons_session(self, scraping_config):
        factory = FakeBrowserFactory({})

        async with factory(scraping_config) as session:
            factory.drivers[0].dead = True

            assert not await session.is_responsive()
            assert session.is_poisoned
            with pytest.raises(RuntimeError):
                async with session.page():
                    pass

    async def test_tab_open_failure_poisons_session(self, scraping_config):
        factory = FakeBrowserFactory({})

        async with factory(scraping_config) as session:
            factory.drivers[0].dead = True

            with pytest.raises(WebDriverException):
                async with session.page():
                    pass

            assert session.is_poisoned

    async def test_crash_during_navigation_poisons_session(self, scraping_config):
        factory = FakeBrowserFactory({}, crash_on=CAREERS)

        async with factory(scraping_config) as session:
            with pytest.raises(NavigationError, match="invalid session id"):
                async with session.page() as page:
                    await page.goto(CAREERS, timeout=5)

            assert session.is_poisoned
