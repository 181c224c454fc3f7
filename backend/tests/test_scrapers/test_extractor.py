"""
Tests for the page extractor.

Covers URL canonicalization, per-listing HTML mapping, isolation of
broken listings, stale selectors and navigation retries.
"""

import pytest

from jobhub.core.exceptions import ListingExtractionError, NavigationError, SelectorTimeoutError
from jobhub.scrapers.extractor import (
    PageExtractor,
    canonicalize_apply_url,
    parse_listing,
    parse_listings,
)

from tests.factories import listing_html, make_source


class FakePage:
    """Scripted browser tab."""

    def __init__(self, fragments=None, goto_failures=0, selector_missing=False):
        self.fragments = fragments or []
        self.goto_failures = goto_failures
        self.selector_missing = selector_missing
        self.user_agent = None
        self.goto_calls = []

    async def set_user_agent(self, user_agent):
        self.user_agent = user_agent

    async def goto(self, url, timeout):
        self.goto_calls.append((url, timeout))
        if self.goto_failures:
            self.goto_failures -= 1
            raise NavigationError(url, "timed out")

    async def wait_for_selector(self, selector, timeout):
        if self.selector_missing:
            raise SelectorTimeoutError(selector, timeout)

    async def outer_html_all(self, selector):
        return list(self.fragments)


@pytest.mark.unit
class TestCanonicalizeApplyUrl:
    """Test apply URL canonicalization."""

    def test_relative_path(self):
        assert canonicalize_apply_url("/jobs/123", "https://example.com") == "https://example.com/jobs/123"

    def test_absolute_passes_through(self):
        url = "https://boards.example.org/apply?id=9"
        assert canonicalize_apply_url(url, "https://example.com") == url

    def test_relative_without_slash(self):
        assert canonicalize_apply_url("jobs/7", "https://example.com") == "https://example.com/jobs/7"

    def test_whitespace_is_stripped(self):
        assert canonicalize_apply_url("  /jobs/1 \n", "https://example.com") == "https://example.com/jobs/1"


@pytest.mark.scraper
@pytest.mark.unit
class TestParseListing:
    """Test mapping one listing container to a RawListing."""

    def test_required_and_optional_fields(self):
        source = make_source()
        html = listing_html(
            4,
            title="  Data   Engineer ",
            salary="100000 - 130000",
            posted="2024-03-01",
            company="Acme",
        )

        listing = parse_listing(html, source, 4)

        assert listing.index == 4
        assert listing.title == "Data Engineer"
        assert listing.location == "Austin, TX"
        assert listing.description == "Build Python services on AWS."
        assert listing.apply_url_raw == "/jobs/4"
        assert listing.apply_url == "https://example.com/jobs/4"
        assert listing.salary_text == "100000 - 130000"
        assert listing.posted_date_text == "2024-03-01"
        assert listing.company == "Acme"

    def test_optional_fields_degrade_to_none(self):
        listing = parse_listing(listing_html(0), make_source(), 0)

        assert listing.salary_text is None
        assert listing.posted_date_text is None
        assert listing.company is None

    def test_missing_required_field(self):
        with pytest.raises(ListingExtractionError) as exc_info:
            parse_listing(listing_html(2, location=None), make_source(), 2)

        assert exc_info.value.field == "location"
        assert exc_info.value.listing_index == 2

    def test_empty_link_href(self):
        with pytest.raises(ListingExtractionError):
            parse_listing(listing_html(0, href=""), make_source(), 0)

    def test_link_selector_on_wrapper(self):
        source = make_source(selectors={
            "jobList": ".card",
            "jobTitle": "h2",
            "jobLink": ".apply",
            "location": ".loc",
            "description": ".desc",
        })
        html = (
            '<li class="card"><h2>QA Lead</h2><div class="apply"><a href="https://ats.example.net/42">Go</a></div>'
            '<span class="loc">Remote</span><div class="desc">Own test strategy</div></li>'
        )

        listing = parse_listing(html, source, 0)

        assert listing.apply_url == "https://ats.example.net/42"
        assert listing.salary_text is None

    def test_one_broken_listing_is_isolated(self):
        source = make_source()
        fragments = [listing_html(i) for i in range(10)]
        fragments[6] = listing_html(6, title=None)

        extraction = parse_listings(fragments, source)

        assert len(extraction.listings) == 9
        assert [e.listing_index for e in extraction.errors] == [6]
        assert extraction.matched == 10


@pytest.mark.scraper
@pytest.mark.unit
class TestPageExtractor:
    """Test the navigate, wait and extract protocol."""

    async def test_extract(self, scraping_config, sample_source):
        page = FakePage(fragments=[listing_html(0), listing_html(1)])
        extractor = PageExtractor(scraping_config)

        extraction = await extractor.extract(page, sample_source)

        assert page.user_agent == "JobHubTest/1.0"
        assert page.goto_calls == [(sample_source.career_page, scraping_config.timeout_seconds)]
        assert [listing.apply_url for listing in extraction.listings] == [
            "https://example.com/jobs/0",
            "https://example.com/jobs/1",
        ]
        assert extraction.errors == []

    async def test_stale_selectors_give_empty_result(self, scraping_config, sample_source):
        page = FakePage(selector_missing=True)

        extraction = await PageExtractor(scraping_config).extract(page, sample_source)

        assert extraction.listings == []
        assert extraction.errors == []

    async def test_navigation_is_retried(self, scraping_config, sample_source):
        scraping_config.max_retries = 3
        scraping_config.delay_between_sources = 1.5
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        page = FakePage(fragments=[listing_html(0)], goto_failures=2)
        extraction = await PageExtractor(scraping_config, sleep=fake_sleep).extract(page, sample_source)

        assert len(page.goto_calls) == 3
        assert sleeps == [1.5, 3.0]
        assert len(extraction.listings) == 1

    async def test_navigation_failure_raises_after_retries(self, scraping_config, sample_source):
        scraping_config.max_retries = 2

        async def fake_sleep(seconds):
            pass

        page = FakePage(goto_failures=5)
        with pytest.raises(NavigationError):
            await PageExtractor(scraping_config, sleep=fake_sleep).extract(page, sample_source)

        assert len(page.goto_calls) == 2
