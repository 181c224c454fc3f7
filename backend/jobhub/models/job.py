"""
Job Database Model

SQLAlchemy 2.0 model for scraped job postings.
"""

from typing import Optional, List
from datetime import datetime

from sqlalchemy import (
    Integer, String, Text, DateTime, Boolean, JSON,
    CheckConstraint, Index, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from jobhub.core.database import Base
from jobhub.schemas.job import NormalizedJob


class Job(Base):
    """
    Persisted job posting.

    The apply URL is the sole dedup key; the unique constraint rejects
    duplicates even when two scraping passes overlap.
    """

    __tablename__ = "jobs"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Basic job information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(100), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    job_type: Mapped[str] = mapped_column(String(20), nullable=False, default="full-time")
    is_remote: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Salary information
    salary_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    salary_max: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    salary_currency: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)

    # Job details
    description: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    # Source information
    apply_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    source_name: Mapped[str] = mapped_column(String(100), nullable=False)
    posted_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Table constraints
    __table_args__ = (
        UniqueConstraint('apply_url', name='uq_jobs_apply_url'),

        CheckConstraint(
            "job_type IN ('full-time', 'part-time', 'contract', 'internship', 'freelance')",
            name='ck_jobs_job_type_valid'
        ),
        CheckConstraint(
            "salary_min IS NULL OR salary_max IS NOT NULL",
            name='ck_jobs_salary_two_sided'
        ),

        Index('idx_jobs_company', 'company'),
        Index('idx_jobs_location', 'location'),
        Index('idx_jobs_job_type', 'job_type'),
        Index('idx_jobs_is_remote', 'is_remote'),
        Index('idx_jobs_posted_date', 'posted_date'),
        Index('idx_jobs_source_name', 'source_name'),
        Index('idx_jobs_active_posted', 'is_active', 'posted_date'),
    )

    def __repr__(self) -> str:
        """String representation of Job."""
        return f"<Job(id={self.id}, title='{self.title}', company='{self.company}')>"

    @classmethod
    def from_normalized(cls, job: NormalizedJob) -> "Job":
        """Build a row from a validated job."""
        salary = job.salary_range
        return cls(
            title=job.title,
            company=job.company,
            location=job.location,
            job_type=job.job_type.value,
            is_remote=job.is_remote,
            salary_min=salary.min if salary else None,
            salary_max=salary.max if salary else None,
            salary_currency=salary.currency if salary else None,
            description=job.description,
            tags=list(job.tags),
            apply_url=job.apply_url,
            source_name=job.source_name,
            posted_date=job.posted_date,
            is_active=job.is_active,
        )

    def to_normalized(self) -> NormalizedJob:
        """Convert the row back to the validated schema."""
        return NormalizedJob.model_validate(self)
