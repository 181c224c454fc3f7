"""
Field Normalizer

Pure functions that turn raw listing text into typed job fields:
job type, remote flag, salary range, posting date and tags.
No I/O happens here.
"""

import re
from typing import List, Optional
from datetime import datetime, timedelta, timezone

from dateutil import parser as date_parser

from jobhub.schemas.job import JobType, NormalizedJob, SalaryRange
from jobhub.scrapers.base import RawListing


# Checked in order, first match wins
JOB_TYPE_KEYWORDS = [
    (JobType.INTERNSHIP, ("intern", "internship")),
    (JobType.PART_TIME, ("part-time", "part time")),
    (JobType.CONTRACT, ("contract",)),
    (JobType.FREELANCE, ("freelance",)),
]

REMOTE_KEYWORDS = ("remote", "work from home", "wfh")

TAG_VOCABULARY = [
    'javascript', 'typescript', 'react', 'vue', 'angular', 'node.js', 'python', 'java', 'c#', 'php',
    'aws', 'azure', 'gcp', 'docker', 'kubernetes', 'sql', 'mongodb', 'redis', 'git', 'agile',
    'scrum', 'devops', 'frontend', 'backend', 'fullstack', 'mobile', 'ios', 'android', 'flutter',
    'react native', 'machine learning', 'ai', 'data science', 'blockchain', 'cybersecurity',
    'remote', 'hybrid', 'onsite', 'senior', 'junior', 'lead', 'manager', 'architect',
]

# A tag must not be glued to other letters or digits ("ai" is not in "maintain")
_TAG_PATTERNS = [
    (tag, re.compile(r'(?<![a-z0-9])' + re.escape(tag) + r'(?![a-z0-9])'))
    for tag in TAG_VOCABULARY
]

_RELATIVE_DATE = re.compile(r'(\d+)\s*(hour|day|week|month)s?\s*ago')

# A month name or a numeric date such as 2024-01-15 or 01/15/2024
_DATE_TOKEN = re.compile(
    r'\b(jan(uary)?|feb(ruary)?|mar(ch)?|apr(il)?|may|june?|july?|aug(ust)?'
    r'|sep(t(ember)?)?|oct(ober)?|nov(ember)?|dec(ember)?)\b'
    r'|\b\d{1,4}[-/.]\d{1,2}[-/.]\d{1,4}(?!\d)'
)

DEFAULT_CURRENCY = "USD"


def _utcnow() -> datetime:
    return datetime.utcnow()


def classify_job_type(title: str, description: str) -> JobType:
    """
    Classify the employment type from title and description.

    Args:
        title: Job title
        description: Job description

    Returns:
        JobType: First matching type in priority order, full-time otherwise
    """
    text = f"{title or ''} {description or ''}".lower()

    for job_type, keywords in JOB_TYPE_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return job_type

    return JobType.FULL_TIME


def infer_remote(title: str, description: str, location: str) -> bool:
    """True when title, description or location mention remote work."""
    text = f"{title or ''} {description or ''} {location or ''}".lower()
    return any(keyword in text for keyword in REMOTE_KEYWORDS)


def parse_salary(salary_text: Optional[str]) -> Optional[SalaryRange]:
    """
    Parse a salary range from text.

    The first two digit runs become min and max. With fewer than two
    numbers no range is returned; a single-sided range is never guessed.

    Args:
        salary_text: Raw salary text

    Returns:
        Optional[SalaryRange]: Parsed range or None
    """
    if not salary_text:
        return None

    numbers = re.findall(r'\d+', salary_text)
    if len(numbers) < 2:
        return None

    return SalaryRange(min=int(numbers[0]), max=int(numbers[1]), currency=DEFAULT_CURRENCY)


def parse_posted_date(date_text: Optional[str], now: Optional[datetime] = None) -> datetime:
    """
    Parse a posting date from text.

    Unparsable or missing dates fall back to the ingestion time, so a
    posting is never rejected because of its date.

    Args:
        date_text: Raw date text
        now: Ingestion timestamp (naive UTC), defaults to the current time

    Returns:
        datetime: Parsed date as naive UTC, or ``now``
    """
    now = now or _utcnow()

    if not date_text or not date_text.strip():
        return now

    text = date_text.strip().lower()

    if text in ("today", "just posted", "just now", "new"):
        return now
    if text == "yesterday":
        return now - timedelta(days=1)

    # Handle relative dates
    if 'ago' in text:
        match = _RELATIVE_DATE.search(text)
        if match:
            number, unit = match.groups()
            number = int(number)

            if unit == 'hour':
                return now - timedelta(hours=number)
            elif unit == 'day':
                return now - timedelta(days=number)
            elif unit == 'week':
                return now - timedelta(weeks=number)
            elif unit == 'month':
                return now - timedelta(days=number * 30)
        return now

    # Fuzzy parsing reads any stray number as a year or day
    if not _DATE_TOKEN.search(text):
        return now

    try:
        parsed = date_parser.parse(
            date_text,
            fuzzy=True,
            default=now.replace(hour=0, minute=0, second=0, microsecond=0),
        )
    except (ValueError, OverflowError):
        return now

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    if parsed > now:
        return now
    return parsed


def extract_tags(title: str, description: str) -> List[str]:
    """
    Extract vocabulary keywords present in title and description.

    Returns:
        List[str]: Matched tags in vocabulary order
    """
    text = f"{title or ''} {description or ''}".lower()
    return [tag for tag, pattern in _TAG_PATTERNS if pattern.search(text)]


def normalize_listing(
    listing: RawListing,
    source_name: str,
    now: Optional[datetime] = None
) -> NormalizedJob:
    """
    Build a validated job from a raw listing.

    Raises:
        pydantic.ValidationError: If a required field is blank or the apply URL is not absolute
    """
    return NormalizedJob(
        title=listing.title,
        company=listing.company or source_name,
        location=listing.location,
        job_type=classify_job_type(listing.title, listing.description),
        is_remote=infer_remote(listing.title, listing.description, listing.location),
        salary_range=parse_salary(listing.salary_text),
        description=listing.description,
        tags=extract_tags(listing.title, listing.description),
        apply_url=listing.apply_url,
        source_name=source_name,
        posted_date=parse_posted_date(listing.posted_date_text, now=now),
        is_active=True,
    )
