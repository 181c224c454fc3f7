"""
Scheduler Service for JobHub Scraper

Runs a scraping pass on a fixed interval inside the host's event loop.
The next wait starts only after the previous pass has finished, so two
passes never share the browser. Stopping lets a running pass finish.
"""

import asyncio
from datetime import datetime
from enum import Enum
from typing import List, Optional

from jobhub.core.exceptions import BrowserInitError
from jobhub.scrapers.base import ExtractionResult
from jobhub.services.pipeline import ScrapingPipeline
from jobhub.utils.logger import get_logger, log_error

logger = get_logger(__name__)


class SchedulerState(Enum):
    """Scheduler lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"


class ScrapingScheduler:
    """Cancellable periodic driver for ScrapingPipeline."""

    def __init__(
        self,
        pipeline: ScrapingPipeline,
        interval_seconds: float = 6 * 3600,
        run_on_start: bool = False,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.pipeline = pipeline
        self.interval_seconds = interval_seconds
        self.run_on_start = run_on_start

        self.state = SchedulerState.IDLE
        self.last_results: Optional[List[ExtractionResult]] = None
        self.last_run_at: Optional[datetime] = None
        self.passes_completed = 0
        self.ticks_skipped = 0

        self._pass_lock = asyncio.Lock()
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        """True while the scheduling loop is active."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the scheduling loop in the background."""
        if self.is_running:
            logger.warning("Scheduler already started")
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop(), name="scraping-scheduler")
        logger.info(
            "Scraping scheduler started",
            interval_hours=round(self.interval_seconds / 3600, 3),
            run_on_start=self.run_on_start,
        )

    async def stop(self) -> None:
        """Stop scheduling further ticks, letting an in-flight pass complete."""
        if self._task is None:
            return

        self._stop_event.set()
        if self.state is SchedulerState.RUNNING:
            logger.info("Stop requested; waiting for the running pass to finish")

        await self._task
        self._task = None
        logger.info("Scraping scheduler stopped", passes_completed=self.passes_completed)

    async def wait_stopped(self) -> None:
        """Block until the loop exits."""
        if self._task is not None:
            await self._task

    async def _run_loop(self) -> None:
        if self.run_on_start:
            await self.tick()

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                await self.tick()

    async def tick(self) -> Optional[List[ExtractionResult]]:
        """
        Run one pass unless one is already running.

        Never raises: pass-level failures are logged and the scheduler
        returns to IDLE.

        Returns:
            Optional[List[ExtractionResult]]: Results, or None when skipped or failed
        """
        if self._pass_lock.locked():
            self.ticks_skipped += 1
            logger.warning("Previous scraping pass still running; skipping tick")
            return None

        async with self._pass_lock:
            self.state = SchedulerState.RUNNING
            self.last_run_at = datetime.utcnow()
            try:
                results = await self.pipeline.run_one_pass()
            except BrowserInitError as e:
                logger.error("Scraping pass aborted: browser unavailable", **e.to_dict())
                return None
            except Exception as e:
                log_error(e, context={"stage": "scraping_pass"})
                return None
            finally:
                self.state = SchedulerState.IDLE

            self.last_results = results
            self.passes_completed += 1
            return results
