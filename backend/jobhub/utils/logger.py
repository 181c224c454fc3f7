"""
Logging Configuration

Structured logging setup using structlog for consistent, JSON-formatted logs
throughout the JobHub scraping pipeline.
"""

import logging
import sys
from typing import Any, Dict, Optional
from pathlib import Path

import structlog
from structlog.stdlib import LoggerFactory
from pythonjsonlogger import jsonlogger

from jobhub.core.config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structured logging for the application."""
    settings = settings or get_settings()

    # Configure structlog
    structlog.configure(
        processors=[
            # Add log level and timestamp
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),

            # Add context
            structlog.contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,

            # JSON formatting for production, pretty for development
            structlog.dev.ConsoleRenderer() if settings.DEBUG
            else structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )

    # File handler for persistent logging
    if settings.LOG_FILE and not settings.DEBUG:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(
            jsonlogger.JsonFormatter(
                "%(asctime)s %(name)s %(levelname)s %(message)s"
            )
        )

        root_logger = logging.getLogger()
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        structlog.stdlib.BoundLogger: Configured logger instance
    """
    return structlog.get_logger(name)


def log_scraping_activity(
    source_name: str,
    action: str,
    url: Optional[str] = None,
    **kwargs
) -> None:
    """
    Log scraping activity.

    Args:
        source_name: Name of the scraping source
        action: Action being performed
        url: URL being scraped
        **kwargs: Additional scraping data
    """
    logger = get_logger("scraping")
    logger.info(
        "Scraping activity",
        source=source_name,
        action=action,
        url=url,
        **kwargs
    )


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    **kwargs
) -> None:
    """
    Log error with context.

    Args:
        error: Exception that occurred
        context: Additional context about the error
        **kwargs: Additional error data
    """
    logger = get_logger("errors")
    logger.error(
        "Error occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        context=context or {},
        **kwargs,
        exc_info=True
    )
