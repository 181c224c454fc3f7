"""
Application Configuration

Centralized configuration management using Pydantic settings.
Handles environment variables and scraping pipeline settings.
"""

from typing import List, Optional, Any, Dict
from functools import lru_cache
import json
from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic import Field


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "JobHub Scraper"
    VERSION: str = "1.0.0"
    DEBUG: bool = Field(False)
    ENVIRONMENT: str = Field("development")
    LOG_LEVEL: str = Field("INFO")
    LOG_FILE: Optional[str] = Field("logs/scraper.log")

    # Database
    DATABASE_URL: str = Field("sqlite+aiosqlite:///./jobhub.db")
    DATABASE_POOL_SIZE: int = Field(5)
    DATABASE_MAX_OVERFLOW: int = Field(10)

    # Scraping Configuration
    SCRAPER_DELAY: float = Field(2.0, ge=0, description="Courtesy delay between sources, seconds")
    SCRAPER_TIMEOUT: float = Field(30.0, gt=0, description="Navigation timeout, seconds")
    SCRAPER_SELECTOR_TIMEOUT: float = Field(10.0, gt=0)
    SCRAPER_SOURCE_BUDGET: float = Field(120.0, gt=0, description="Wall-clock budget per source, seconds")
    SCRAPER_MAX_RETRIES: int = Field(3, ge=1)
    SCRAPER_USER_AGENT: str = Field(DEFAULT_USER_AGENT)
    SCRAPER_HEADLESS: bool = Field(True)

    # Scheduling
    SCRAPE_INTERVAL_HOURS: float = Field(6.0, gt=0)
    SCRAPE_ON_START: bool = Field(False)
    SCRAPING_SOURCES_FILE: Optional[str] = Field(None)

    @property
    def scrape_interval_seconds(self) -> float:
        """Tick interval in seconds."""
        return self.SCRAPE_INTERVAL_HOURS * 3600

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def load_sources_config(path: Optional[str] = None) -> Optional[List[Dict[str, Any]]]:
    """
    Load the raw scraping sources list from a JSON file.

    Returns None when no file is configured, so callers can fall back to
    the built-in sources. A configured file that is missing is an error.
    """
    if path is None:
        path = get_settings().SCRAPING_SOURCES_FILE
    if not path:
        return None

    config_path = Path(path)
    if not config_path.is_file():
        raise ValueError(f"Scraping sources file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Error loading scraping sources configuration: {e}")

    # Accept either a bare list or {"sources": [...]}
    if isinstance(data, dict):
        data = data.get("sources", [])
    if not isinstance(data, list):
        raise ValueError("Scraping sources configuration must be a list")
    return data
