"""
Custom Exceptions for JobHub Scraper

Pipeline exceptions with error codes, categories and severities.
Each exception documents the narrowest scope it is contained at:
listing, source, pass (tick) or storage operation.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    VALIDATION = "validation"
    EXTERNAL_SERVICE = "external_service"
    DATABASE = "database"
    NETWORK = "network"
    SYSTEM = "system"
    CONFIGURATION = "configuration"


class BaseApplicationException(Exception):
    """
    Base exception for all application-specific errors.

    Provides structured error information for consistent logging.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }


# Scraping Exceptions
class ScrapingError(BaseApplicationException):
    """Base exception for scraping errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.EXTERNAL_SERVICE)
        super().__init__(message, **kwargs)


class BrowserInitError(ScrapingError):
    """The headless browser could not be launched. Fatal to one tick."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            error_code="BROWSER_INIT_FAILED",
            category=ErrorCategory.SYSTEM,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )


class NavigationError(ScrapingError):
    """A career page could not be loaded. Fatal to one source."""

    def __init__(self, url: str, reason: str, **kwargs):
        super().__init__(
            f"Navigation to {url} failed: {reason}",
            error_code="NAVIGATION_FAILED",
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.HIGH,
            details={"url": url, "reason": reason},
            **kwargs
        )
        self.url = url


class SelectorTimeoutError(ScrapingError):
    """No element matched a selector in time. Treated as an empty page."""

    def __init__(self, selector: str, timeout: float, **kwargs):
        super().__init__(
            f"No element matched '{selector}' within {timeout:g}s",
            error_code="SELECTOR_TIMEOUT",
            severity=ErrorSeverity.LOW,
            details={"selector": selector, "timeout": timeout},
            **kwargs
        )
        self.selector = selector


class ListingExtractionError(ScrapingError):
    """One listing could not be extracted. Fatal to that listing only."""

    def __init__(self, message: str, listing_index: Optional[int] = None, field: Optional[str] = None, **kwargs):
        super().__init__(
            message,
            error_code="LISTING_EXTRACTION_FAILED",
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            details={"listing_index": listing_index, "field": field},
            **kwargs
        )
        self.listing_index = listing_index
        self.field = field


class SourceConfigError(BaseApplicationException):
    """A scraping source definition is invalid."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            error_code="INVALID_SOURCE_CONFIG",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            **kwargs
        )


# Storage Exceptions
class StorageError(BaseApplicationException):
    """A storage operation failed. Fatal to one listing's save."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "STORAGE_ERROR")
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, category=ErrorCategory.DATABASE, **kwargs)


class DuplicateJobError(StorageError):
    """A job with the same apply URL already exists. Expected on re-scrapes."""

    def __init__(self, apply_url: str, **kwargs):
        super().__init__(
            f"Job already exists for apply URL {apply_url}",
            error_code="DUPLICATE_JOB",
            severity=ErrorSeverity.LOW,
            details={"apply_url": apply_url},
            **kwargs
        )
        self.apply_url = apply_url
