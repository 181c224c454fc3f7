"""
Services Layer

Persistence gateway, pass runner and scheduler of the scraping pipeline.
"""

from .job_gateway import JobGateway, JobStore
from .pipeline import ScrapingPipeline
from .scheduler import ScrapingScheduler, SchedulerState

__all__ = [
    "JobGateway",
    "JobStore",
    "ScrapingPipeline",
    "ScrapingScheduler",
    "SchedulerState",
]
