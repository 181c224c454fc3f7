"""
Job Scrapers Package

Browser-driven extraction of job listings from career pages configured
in the source registry, plus the field normalizer.
"""

from .base import ExtractionResult, ListingError, PageExtraction, RawListing, ScrapingConfig
from .browser import BrowserPage, BrowserSession
from .extractor import PageExtractor, canonicalize_apply_url, parse_listing
from .registry import DEFAULT_SOURCES, SourceRegistry
from .normalizer import (
    classify_job_type,
    infer_remote,
    parse_salary,
    parse_posted_date,
    extract_tags,
    normalize_listing,
)

__all__ = [
    # Records
    'ExtractionResult',
    'ListingError',
    'PageExtraction',
    'RawListing',
    'ScrapingConfig',

    # Browser and extraction
    'BrowserPage',
    'BrowserSession',
    'PageExtractor',
    'canonicalize_apply_url',
    'parse_listing',

    # Sources
    'DEFAULT_SOURCES',
    'SourceRegistry',

    # Normalizer
    'classify_job_type',
    'infer_remote',
    'parse_salary',
    'parse_posted_date',
    'extract_tags',
    'normalize_listing',
]
