"""
Base Scraper Types

Configuration and transient record types shared by the browser,
extractor and persistence stages of a scraping pass.
"""

from typing import List, Optional
from dataclasses import dataclass, field

from jobhub.core.config import Settings, DEFAULT_USER_AGENT


@dataclass
class ScrapingConfig:
    """Configuration for scraping operations."""

    delay_between_sources: float = 2.0
    timeout_seconds: float = 30.0
    selector_timeout_seconds: float = 10.0
    source_budget_seconds: float = 120.0
    max_retries: int = 3

    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScrapingConfig":
        """Build scraper configuration from application settings."""
        return cls(
            delay_between_sources=settings.SCRAPER_DELAY,
            timeout_seconds=settings.SCRAPER_TIMEOUT,
            selector_timeout_seconds=settings.SCRAPER_SELECTOR_TIMEOUT,
            source_budget_seconds=settings.SCRAPER_SOURCE_BUDGET,
            max_retries=settings.SCRAPER_MAX_RETRIES,
            headless=settings.SCRAPER_HEADLESS,
            user_agent=settings.SCRAPER_USER_AGENT,
        )


@dataclass
class RawListing:
    """One listing as rendered on a career page, before normalization."""

    index: int
    title: str
    location: str
    description: str
    apply_url_raw: str
    apply_url: str
    company: Optional[str] = None
    salary_text: Optional[str] = None
    posted_date_text: Optional[str] = None


@dataclass
class ListingError:
    """An error attributed to one listing, or to the whole source when listing_index is None."""

    listing_index: Optional[int]
    message: str

    def __str__(self) -> str:
        where = "source" if self.listing_index is None else f"listing #{self.listing_index}"
        return f"{where}: {self.message}"


@dataclass
class PageExtraction:
    """Listings extracted from one career page, plus the ones that failed."""

    listings: List[RawListing] = field(default_factory=list)
    errors: List[ListingError] = field(default_factory=list)

    @property
    def matched(self) -> int:
        """Number of listing containers found on the page."""
        return len(self.listings) + len(self.errors)


@dataclass
class ExtractionResult:
    """Per-source outcome of a scraping pass."""

    source_name: str
    raw_count: int = 0
    saved_count: int = 0
    duplicate_count: int = 0
    errors: List[ListingError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @classmethod
    def failed(cls, source_name: str, message: str) -> "ExtractionResult":
        """Result for a source that produced no listings because of a source-level error."""
        return cls(source_name=source_name, errors=[ListingError(None, message)])

    def merge_extraction_errors(self, errors: List[ListingError]) -> None:
        """Fold listing extraction failures into this result, keeping errors in listing order."""
        if not errors:
            return
        self.raw_count += len(errors)
        self.errors = sorted(
            self.errors + list(errors),
            key=lambda e: -1 if e.listing_index is None else e.listing_index,
        )

    def summary(self) -> str:
        """One-line operator summary."""
        return (
            f"{self.source_name}: scraped {self.raw_count}, "
            f"saved {self.saved_count}, errors {self.error_count}"
        )
