"""
Page Extractor

Navigates to a source's career page, snapshots every listing container,
and maps each snapshot to a RawListing on its own so that one broken
listing never costs the rest of the page.
"""

import asyncio
import re
from typing import List, Optional, Protocol
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from jobhub.core.exceptions import ListingExtractionError, NavigationError, SelectorTimeoutError
from jobhub.schemas.source import Source
from jobhub.scrapers.base import ListingError, PageExtraction, RawListing, ScrapingConfig
from jobhub.utils.logger import get_logger, log_scraping_activity

logger = get_logger(__name__)

_WHITESPACE = re.compile(r'\s+')


class Page(Protocol):
    """Browser tab operations the extractor needs."""

    async def set_user_agent(self, user_agent: str) -> None: ...

    async def goto(self, url: str, timeout: float) -> None: ...

    async def wait_for_selector(self, selector: str, timeout: float) -> None: ...

    async def outer_html_all(self, selector: str) -> List[str]: ...


def canonicalize_apply_url(raw_url: str, website: str) -> str:
    """
    Resolve an apply link to an absolute URL.

    Links that already carry a scheme pass through unchanged; anything
    else is resolved against the source website.
    """
    raw_url = (raw_url or "").strip()
    if urlparse(raw_url).scheme:
        return raw_url
    return urljoin(website, raw_url)


def _clean_text(element: Optional[Tag]) -> Optional[str]:
    if element is None:
        return None
    text = _WHITESPACE.sub(" ", element.get_text(" ", strip=True)).strip()
    return text or None


def _required_text(root: Tag, selector: str, field: str, index: int) -> str:
    text = _clean_text(root.select_one(selector))
    if text is None:
        raise ListingExtractionError(
            f"required field '{field}' not found with selector '{selector}'",
            listing_index=index,
            field=field,
        )
    return text


def _optional_text(root: Tag, selector: Optional[str]) -> Optional[str]:
    if not selector:
        return None
    return _clean_text(root.select_one(selector))


def _link_href(root: Tag, selector: str, index: int) -> str:
    element = root.select_one(selector)
    if element is None:
        raise ListingExtractionError(
            f"required field 'link' not found with selector '{selector}'",
            listing_index=index,
            field="link",
        )

    href = element.get("href")
    if not href:
        # Selector may point at a wrapper around the anchor
        anchor = element.select_one("a[href]")
        href = anchor.get("href") if anchor is not None else None

    if not href or not href.strip():
        raise ListingExtractionError("apply link has no href", listing_index=index, field="link")
    return href.strip()


def parse_listing(fragment: str, source: Source, index: int) -> RawListing:
    """
    Map one listing container's HTML to a RawListing.

    Required sub-fields are title, location, description and the apply
    link; company, salary and posted date degrade to None.

    Raises:
        ListingExtractionError: If a required sub-field is missing or empty
    """
    soup = BeautifulSoup(fragment or "", "html.parser")
    selectors = source.selectors

    title = _required_text(soup, selectors.title, "title", index)
    location = _required_text(soup, selectors.location, "location", index)
    description = _required_text(soup, selectors.description, "description", index)
    apply_url_raw = _link_href(soup, selectors.link, index)

    return RawListing(
        index=index,
        title=title,
        location=location,
        description=description,
        apply_url_raw=apply_url_raw,
        apply_url=canonicalize_apply_url(apply_url_raw, source.website),
        company=_optional_text(soup, selectors.company),
        salary_text=_optional_text(soup, selectors.salary),
        posted_date_text=_optional_text(soup, selectors.posted_date),
    )


def parse_listings(fragments: List[str], source: Source) -> PageExtraction:
    """Map every container snapshot independently, capturing per-listing failures."""
    extraction = PageExtraction()

    for index, fragment in enumerate(fragments):
        try:
            extraction.listings.append(parse_listing(fragment, source, index))
        except ListingExtractionError as e:
            logger.warning(
                "Skipping listing",
                source=source.name,
                listing_index=index,
                error=e.message,
            )
            extraction.errors.append(ListingError(index, e.message))

    return extraction


class PageExtractor:
    """Produces raw listings for one source from an open browser tab."""

    def __init__(self, config: Optional[ScrapingConfig] = None, sleep=asyncio.sleep) -> None:
        self.config = config or ScrapingConfig()
        self._sleep = sleep

    async def extract(self, page: Page, source: Source) -> PageExtraction:
        """
        Extract all listings from the source's career page.

        Raises:
            NavigationError: If the career page cannot be loaded after retries
        """
        await page.set_user_agent(self.config.user_agent)
        await self._navigate(page, source)

        selector = source.selectors.list_container
        try:
            await page.wait_for_selector(selector, self.config.selector_timeout_seconds)
        except SelectorTimeoutError:
            logger.warning(
                "No listings found; selectors may be stale",
                source=source.name,
                selector=selector,
                url=source.career_page,
            )
            return PageExtraction()

        fragments = await page.outer_html_all(selector)
        if not fragments:
            logger.warning(
                "Listing container vanished after wait; selectors may be stale",
                source=source.name,
                selector=selector,
            )
            return PageExtraction()

        extraction = parse_listings(fragments, source)
        log_scraping_activity(
            source.name,
            "extracted",
            url=source.career_page,
            matched=extraction.matched,
            extracted=len(extraction.listings),
            failed=len(extraction.errors),
        )
        return extraction

    async def _navigate(self, page: Page, source: Source) -> None:
        """Navigate with retry and exponential backoff."""
        attempts = max(1, self.config.max_retries)

        for attempt in range(attempts):
            try:
                log_scraping_activity(source.name, "navigate", url=source.career_page, attempt=attempt + 1)
                await page.goto(source.career_page, self.config.timeout_seconds)
                return
            except NavigationError as e:
                if attempt == attempts - 1:
                    raise

                wait_time = (2 ** attempt) * self.config.delay_between_sources
                logger.warning(
                    "Navigation failed, retrying",
                    source=source.name,
                    attempt=attempt + 1,
                    retry_in=wait_time,
                    error=e.message,
                )
                await self._sleep(wait_time)
