"""
Database Models Package

Contains SQLAlchemy ORM models for the JobHub scraper.
"""

from jobhub.core.database import Base
from jobhub.models.job import Job

__all__ = [
    "Base",
    "Job",
]
