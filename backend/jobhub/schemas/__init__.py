"""
Pydantic Schemas

Validated data shapes for scraping sources and normalized jobs.
"""

from .job import JobType, NormalizedJob, SalaryRange
from .source import SelectorMap, Source

__all__ = [
    "JobType",
    "NormalizedJob",
    "SalaryRange",
    "SelectorMap",
    "Source",
]
