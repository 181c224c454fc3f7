"""
Job Pydantic Schemas

Validated representation of a normalized job posting, the unit the
pipeline hands to storage.
"""

from typing import Optional, List
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


class JobType(str, Enum):
    """Employment type of a posting."""
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    FREELANCE = "freelance"


class SalaryRange(BaseModel):
    """Two-sided salary range."""

    min: int = Field(..., ge=0, description="Minimum salary")
    max: int = Field(..., ge=0, description="Maximum salary")
    currency: str = Field("USD", min_length=3, max_length=3, description="Salary currency")


class NormalizedJob(BaseModel):
    """A classified, cleaned job posting keyed by its canonical apply URL."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=False)

    title: str = Field(..., min_length=1, max_length=255, description="Job title")
    company: str = Field(..., min_length=1, max_length=100, description="Company name")
    location: str = Field(..., min_length=1, max_length=255, description="Job location")
    job_type: JobType = Field(JobType.FULL_TIME, description="Employment type")
    is_remote: bool = Field(False, description="Whether job is remote")
    salary_range: Optional[SalaryRange] = Field(None, description="Parsed salary range")
    description: str = Field(..., min_length=1, description="Job description")
    tags: List[str] = Field(default_factory=list, description="Technology and role keywords")
    apply_url: str = Field(..., max_length=1000, description="Canonical absolute apply URL")
    source_name: str = Field(..., min_length=1, max_length=100, description="Scraping source")
    posted_date: datetime = Field(..., description="Job posting date")
    is_active: bool = Field(True, description="Whether job is active")

    @field_validator("title", "company", "location", "description", "source_name", mode="before")
    @classmethod
    def _strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("apply_url")
    @classmethod
    def _require_absolute_url(cls, value: str) -> str:
        value = value.strip()
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"apply_url must be an absolute http(s) URL, got {value!r}")
        return value

    @model_validator(mode="before")
    @classmethod
    def _flatten_salary(cls, data):
        # Rows from the jobs table carry salary as three columns
        if not isinstance(data, dict) and hasattr(data, "salary_min"):
            salary = None
            if data.salary_min is not None and data.salary_max is not None:
                salary = {
                    "min": data.salary_min,
                    "max": data.salary_max,
                    "currency": data.salary_currency or "USD",
                }
            return {
                "title": data.title,
                "company": data.company,
                "location": data.location,
                "job_type": data.job_type,
                "is_remote": data.is_remote,
                "salary_range": salary,
                "description": data.description,
                "tags": list(data.tags or []),
                "apply_url": data.apply_url,
                "source_name": data.source_name,
                "posted_date": data.posted_date,
                "is_active": data.is_active,
            }
        return data
