"""
Test Configuration for JobHub Scraper

Shared fixtures: fast scraping configuration, a sample source and an
in-memory job store.
"""

import pytest

from jobhub.core.config import Settings
from jobhub.core.database import DatabaseManager
from jobhub.repositories.job_repository import JobRepository
from jobhub.schemas.source import Source
from jobhub.scrapers.base import ScrapingConfig

from tests.factories import make_source


@pytest.fixture
def scraping_config() -> ScrapingConfig:
    """Fast configuration for tests."""
    return ScrapingConfig(
        delay_between_sources=0,
        timeout_seconds=5,
        selector_timeout_seconds=0.1,
        source_budget_seconds=5,
        max_retries=1,
        user_agent="JobHubTest/1.0",
    )


@pytest.fixture
def sample_source() -> Source:
    return make_source()


@pytest.fixture
async def db_manager():
    """In-memory SQLite database with the jobs table created."""
    manager = DatabaseManager(
        database_url="sqlite+aiosqlite:///:memory:",
        settings=Settings(DEBUG=False, LOG_FILE=None),
    )
    await manager.init_database()
    await manager.create_tables()
    yield manager
    await manager.close_connections()


@pytest.fixture
def job_repository(db_manager) -> JobRepository:
    return JobRepository(db_manager)
