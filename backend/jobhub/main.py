"""
JobHub Scraper Entry Point

Hosts the scraping scheduler: wires configuration, storage, the source
registry and the pipeline, then runs until SIGINT/SIGTERM.

    python -m jobhub.main            # run on the configured interval
    python -m jobhub.main --once     # run a single pass and exit
"""

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

from jobhub.core.config import get_settings
from jobhub.core.database import DatabaseManager, init_db
from jobhub.core.exceptions import BrowserInitError, SourceConfigError
from jobhub.repositories.job_repository import JobRepository
from jobhub.scrapers.registry import SourceRegistry
from jobhub.services.job_gateway import JobGateway
from jobhub.services.pipeline import ScrapingPipeline
from jobhub.services.scheduler import ScrapingScheduler
from jobhub.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="JobHub career-page scraper")
    parser.add_argument("--once", action="store_true", help="Run a single scraping pass and exit")
    parser.add_argument("--sources", help="JSON file with scraping sources (overrides SCRAPING_SOURCES_FILE)")
    parser.add_argument("--interval-hours", type=float, help="Override SCRAPE_INTERVAL_HOURS")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    logger.info(f"Starting {settings.APP_NAME}", version=settings.VERSION, environment=settings.ENVIRONMENT)

    try:
        registry = SourceRegistry.from_config(args.sources or settings.SCRAPING_SOURCES_FILE)
    except SourceConfigError as e:
        logger.error("Invalid scraping sources configuration", error=e.message)
        return 2

    db_manager = DatabaseManager(settings=settings)
    await init_db(db_manager)

    try:
        repository = JobRepository(db_manager)
        gateway = JobGateway(repository)
        pipeline = ScrapingPipeline.from_settings(registry, gateway, settings)

        if args.once:
            try:
                results = await pipeline.run_one_pass()
            except BrowserInitError as e:
                logger.error("Scraping pass aborted: browser unavailable", error=e.message)
                return 1
            logger.info("Scraping pass finished", stored_jobs=await repository.count_jobs())
            return 0 if all(not r.errors for r in results) else 1

        interval = args.interval_hours * 3600 if args.interval_hours else settings.scrape_interval_seconds
        scheduler = ScrapingScheduler(pipeline, interval_seconds=interval, run_on_start=settings.SCRAPE_ON_START)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, lambda: asyncio.create_task(scheduler.stop()))
            except NotImplementedError:
                # add_signal_handler is unavailable on Windows event loops
                pass

        await scheduler.start()
        await scheduler.wait_stopped()
        return 0
    finally:
        await db_manager.close_connections()


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
