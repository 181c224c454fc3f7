"""
Scraping Pipeline

Runs one pass over every active source: open a browser, extract each
source in turn under a wall-clock budget, persist the new jobs and
close the browser no matter what happened.
"""

import asyncio
import time
from typing import Callable, List, Optional

from jobhub.core.config import Settings, get_settings
from jobhub.core.exceptions import NavigationError
from jobhub.schemas.source import Source
from jobhub.scrapers.base import ExtractionResult, PageExtraction, ScrapingConfig
from jobhub.scrapers.browser import BrowserSession
from jobhub.scrapers.extractor import PageExtractor
from jobhub.scrapers.registry import SourceRegistry
from jobhub.services.job_gateway import JobGateway
from jobhub.utils.logger import get_logger, log_error

logger = get_logger(__name__)

SessionFactory = Callable[[ScrapingConfig], BrowserSession]


class ScrapingPipeline:
    """One full scraping pass over the source registry."""

    def __init__(
        self,
        registry: SourceRegistry,
        gateway: JobGateway,
        config: Optional[ScrapingConfig] = None,
        session_factory: Optional[SessionFactory] = None,
        extractor: Optional[PageExtractor] = None,
        sleep=asyncio.sleep,
    ) -> None:
        self.registry = registry
        self.gateway = gateway
        self.config = config or ScrapingConfig()
        self._session_factory = session_factory or BrowserSession
        self.extractor = extractor or PageExtractor(self.config, sleep=sleep)
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        registry: SourceRegistry,
        gateway: JobGateway,
        settings: Optional[Settings] = None,
    ) -> "ScrapingPipeline":
        settings = settings or get_settings()
        return cls(registry, gateway, config=ScrapingConfig.from_settings(settings))

    async def run_one_pass(self) -> List[ExtractionResult]:
        """
        Scrape every active source once.

        Raises:
            BrowserInitError: If the browser cannot be launched (or relaunched)
        """
        sources = self.registry.active_sources()
        started = time.monotonic()
        logger.info("Starting scraping pass", sources=len(sources))

        results: List[ExtractionResult] = []
        session = self._session_factory(self.config)
        await session.open()

        try:
            for position, source in enumerate(sources):
                if position and self.config.delay_between_sources > 0:
                    await self._sleep(self.config.delay_between_sources)

                result, session = await self._run_source(session, source)
                results.append(result)
                self._log_result(result)
        finally:
            await session.close()

        logger.info(
            "Scraping pass completed",
            sources=len(results),
            scraped=sum(r.raw_count for r in results),
            saved=sum(r.saved_count for r in results),
            errors=sum(r.error_count for r in results),
            duration_seconds=round(time.monotonic() - started, 2),
        )
        return results

    async def _run_source(self, session: BrowserSession, source: Source):
        """Run one source; returns the result and the session to continue with."""
        if not await session.is_responsive():
            session = await self._recycle(session)

        try:
            result = await self.scrape_source(session, source)
        except Exception as e:
            log_error(e, context={"source": source.name})
            result = ExtractionResult.failed(source.name, f"{type(e).__name__}: {e}")
        return result, session

    async def scrape_source(self, session: BrowserSession, source: Source) -> ExtractionResult:
        """
        Extract one source in its own tab, then persist its listings.

        The time budget covers the browser work only; listings that were
        extracted are always saved and counted.
        """
        budget = self.config.source_budget_seconds
        try:
            extraction = await asyncio.wait_for(self._extract(session, source), timeout=budget)
        except asyncio.TimeoutError:
            logger.error("Source exceeded its time budget", source=source.name, budget_seconds=budget)
            return ExtractionResult.failed(source.name, f"exceeded {budget:g}s budget")
        except NavigationError as e:
            logger.error("Navigation failed", source=source.name, error=e.message)
            return ExtractionResult.failed(source.name, e.message)

        result = await self.gateway.save_all(extraction.listings, source.name)
        result.merge_extraction_errors(extraction.errors)
        self.registry.mark_scraped(source.name)
        return result

    async def _extract(self, session: BrowserSession, source: Source) -> PageExtraction:
        async with session.page() as page:
            return await self.extractor.extract(page, source)

    async def _recycle(self, session: BrowserSession) -> BrowserSession:
        """Replace a session that is dead or may still be busy with a hung call."""
        logger.warning("Recycling browser session")
        await session.close()
        fresh = self._session_factory(self.config)
        await fresh.open()
        return fresh

    @staticmethod
    def _log_result(result: ExtractionResult) -> None:
        # Individual errors were logged where they were caught
        log = logger.warning if result.errors else logger.info
        log(result.summary(), source=result.source_name, duplicates=result.duplicate_count)
