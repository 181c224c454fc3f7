"""
Source Registry

The set of career sites a scraping pass visits. Sources come from the
caller (for example an admin-managed store), a JSON file, or the
built-in defaults; the pipeline only sees the registry.
"""

from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime

from pydantic import ValidationError

from jobhub.core.config import load_sources_config
from jobhub.core.exceptions import SourceConfigError
from jobhub.schemas.source import Source
from jobhub.utils.logger import get_logger

logger = get_logger(__name__)


_DEFAULT_SELECTORS = {
    "jobTitle": ".job-title",
    "jobLink": ".job-link",
    "companyName": ".company-name",
    "location": ".location",
    "description": ".description",
    "salary": ".salary",
    "postedDate": ".posted-date",
}

DEFAULT_SOURCES: List[Dict[str, Any]] = [
    {
        "name": "Google",
        "website": "https://careers.google.com",
        "careerPage": "https://careers.google.com/jobs/results/",
        "selectors": {"jobList": ".job-listing", **_DEFAULT_SELECTORS},
    },
    {
        "name": "Microsoft",
        "website": "https://careers.microsoft.com",
        "careerPage": "https://careers.microsoft.com/us/en/search-results",
        "selectors": {"jobList": ".job-card", **_DEFAULT_SELECTORS},
    },
    {
        "name": "Apple",
        "website": "https://jobs.apple.com",
        "careerPage": "https://jobs.apple.com/en-us/search",
        "selectors": {"jobList": ".job-item", **_DEFAULT_SELECTORS},
    },
]


def parse_sources(raw_sources: Iterable[Dict[str, Any]]) -> List[Source]:
    """
    Validate raw source definitions.

    Raises:
        SourceConfigError: On an invalid definition or a duplicate name
    """
    sources: List[Source] = []
    seen = set()

    for position, raw in enumerate(raw_sources):
        try:
            source = Source.model_validate(raw)
        except ValidationError as e:
            name = raw.get("name") if isinstance(raw, dict) else None
            raise SourceConfigError(
                f"Invalid scraping source #{position} ({name or 'unnamed'}): {e}",
                details={"position": position, "name": name},
            ) from e

        if source.name in seen:
            raise SourceConfigError(
                f"Duplicate scraping source name: {source.name}",
                details={"name": source.name},
            )
        seen.add(source.name)
        sources.append(source)

    return sources


class SourceRegistry:
    """Immutable-per-pass list of scraping sources, looked up by name."""

    def __init__(self, sources: Iterable[Source]) -> None:
        self._sources: Dict[str, Source] = {}
        for source in sources:
            if source.name in self._sources:
                raise SourceConfigError(f"Duplicate scraping source name: {source.name}")
            self._sources[source.name] = source
        self._last_scraped: Dict[str, datetime] = {}

    @classmethod
    def from_dicts(cls, raw_sources: Iterable[Dict[str, Any]]) -> "SourceRegistry":
        return cls(parse_sources(raw_sources))

    @classmethod
    def from_config(cls, path: Optional[str] = None) -> "SourceRegistry":
        """Load sources from the configured JSON file, falling back to the defaults."""
        try:
            raw_sources = load_sources_config(path)
        except ValueError as e:
            raise SourceConfigError(str(e)) from e

        if raw_sources is None:
            logger.info("No scraping sources file configured, using defaults")
            raw_sources = DEFAULT_SOURCES

        registry = cls.from_dicts(raw_sources)
        logger.info("Loaded scraping sources", count=len(registry), active=len(registry.active_sources()))
        return registry

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self):
        return iter(self._sources.values())

    def get(self, name: str) -> Optional[Source]:
        return self._sources.get(name)

    def active_sources(self) -> List[Source]:
        """Sources to visit in a pass, in registration order."""
        return [source for source in self._sources.values() if source.is_active]

    def mark_scraped(self, name: str, when: Optional[datetime] = None) -> None:
        self._last_scraped[name] = when or datetime.utcnow()

    def last_scraped(self, name: str) -> Optional[datetime]:
        return self._last_scraped.get(name)
