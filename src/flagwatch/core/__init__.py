"""flagwatch core -- domain-agnostic primitives.

Architecture::

    errors.py       Structured error hierarchy (FlagwatchError, SourceError)
    logging.py      structlog configuration + get_logger
    settings.py     pydantic-settings configuration (FLAGWATCH_*)
    timestamps.py   UTC / monotonic clock helpers
    cache.py        TTL + LRU document cache with request coalescing
"""

from flagwatch.core.cache import CacheEntry, CacheStore
from flagwatch.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    FlagwatchError,
    InvalidConfigError,
    InvalidPlatformError,
    ParseError,
    SourceError,
    SourceNotFoundError,
    SourceUnavailableError,
    ValidationError,
    categorize_error,
    is_retryable,
)
from flagwatch.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    "CacheEntry",
    "CacheStore",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "FlagwatchError",
    "InvalidConfigError",
    "InvalidPlatformError",
    "LogContext",
    "ParseError",
    "SourceError",
    "SourceNotFoundError",
    "SourceUnavailableError",
    "ValidationError",
    "categorize_error",
    "configure_logging",
    "get_logger",
    "is_retryable",
]
