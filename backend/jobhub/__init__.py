"""
JobHub Scraper

Scheduled ingestion of job postings from external career pages.
"""

__version__ = "1.0.0"
