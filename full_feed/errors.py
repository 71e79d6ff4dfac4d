"""Error definitions for the full feed proxy."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Categories of errors that can occur in the system."""

    VALIDATION_ERROR = "validation_error"
    NETWORK_ERROR = "network_error"
    PROCESSING_ERROR = "processing_error"
    STORAGE_ERROR = "storage_error"
    FEED_ERROR = "feed_error"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FullFeedError(Exception):
    """Base error class for all full feed errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        severity: ErrorSeverity,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize base error.

        Args:
            message: Error message
            category: Error category
            severity: Error severity
            details: Optional error details
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()


class ArticleError(FullFeedError):
    """Failure while acquiring a single article.

    Contained by the feed processor: the entry is left untouched.
    """


class InvalidURLError(ArticleError):
    """Raised when an article URL is not a well-formed absolute URL."""

    def __init__(self, url: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize invalid URL error."""
        super().__init__(
            f"Invalid URL {url}",
            ErrorCategory.VALIDATION_ERROR,
            ErrorSeverity.LOW,
            details,
        )
        self.url = url


class FetchError(ArticleError):
    """Raised when article content cannot be retrieved or converted."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        cause: Optional[BaseException] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize fetch error.

        Args:
            message: Error message
            url: Article URL being fetched
            cause: Underlying exception, if any
            severity: Error severity
            details: Optional error details
        """
        super().__init__(message, ErrorCategory.NETWORK_ERROR, severity, details)
        self.url = url
        self.cause = cause


class CorruptDataError(ArticleError):
    """Raised when stored bytes cannot be decompressed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize corrupt data error."""
        super().__init__(
            message,
            ErrorCategory.STORAGE_ERROR,
            ErrorSeverity.HIGH,
            details,
        )


class CacheStoreError(FullFeedError):
    """Raised when the cache backend fails to read or write."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize cache store error."""
        super().__init__(
            message,
            ErrorCategory.STORAGE_ERROR,
            ErrorSeverity.HIGH,
            details,
        )


class FeedError(FullFeedError):
    """Fatal failure of the outer feed; fails the whole request."""


class FeedFetchError(FeedError):
    """Raised when the outer feed cannot be retrieved."""

    def __init__(
        self, message: str, url: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Initialize feed fetch error."""
        super().__init__(
            message,
            ErrorCategory.NETWORK_ERROR,
            ErrorSeverity.HIGH,
            details,
        )
        self.url = url


class FeedParseError(FeedError):
    """Raised when the outer feed document cannot be parsed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize feed parse error."""
        super().__init__(
            message,
            ErrorCategory.FEED_ERROR,
            ErrorSeverity.HIGH,
            details,
        )
