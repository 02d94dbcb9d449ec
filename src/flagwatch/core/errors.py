"""
Structured error types for flagwatch.

Every failure that crosses a component boundary is a ``FlagwatchError``
subclass carrying a category, a retry hint and structured context (platform,
URL, HTTP status). Resolution code inspects these types to decide whether a
missing flag means "the flag does not exist" or "a source could not be read".

Manifesto:
    - **Typed hierarchy:** fetch failures, bad input and bad config are
      different types, not different strings
    - **Explicit retry semantics:** each error knows if retrying can help
    - **Rich context:** errors carry the URL and platform that failed
    - **Error chaining:** the underlying httpx/json exception is kept as cause

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                      FlagwatchError                          │
        │  (category, retryable, retry_after, context, cause)          │
        ├──────────────────────────────────────────────────────────────┤
        │                                                              │
        │  SourceError             ValidationError      ConfigError    │
        │  (SOURCE)                (VALIDATION)         (CONFIG)       │
        │       │                        │                   │         │
        │  SourceNotFoundError     InvalidPlatformError InvalidConfig  │
        │  SourceUnavailableError                                      │
        │  ParseError (PARSE)                                          │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = SourceUnavailableError("HTTP 503")
    >>> error.retryable
    True
    >>> error.with_context(platform="AndroidApp", http_status=503).context.platform
    'AndroidApp'

Tags:
    error-handling, exception-hierarchy, retry-logic, error-context

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and logging.

    Attributes:
        NETWORK: Connection, timeout, DNS errors
        SOURCE: Upstream document missing or unavailable
        PARSE: Document is not valid JSON or has the wrong shape
        VALIDATION: Caller passed invalid input
        CONFIG: Missing or invalid settings
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    NETWORK = "NETWORK"
    SOURCE = "SOURCE"
    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields are serialized by ``to_dict()``; anything that does
    not have a typed field goes into ``metadata``.

    Attributes:
        flag: Flag name being resolved
        platform: Platform identifier of the source document
        source_name: Logical source name (platform id or ``metadata``)
        url: URL that was being fetched
        http_status: HTTP status code if applicable
        metadata: Additional key-value pairs
    """

    flag: str | None = None
    platform: str | None = None
    source_name: str | None = None
    url: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["flag", "platform", "source_name", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class FlagwatchError(Exception):
    """
    Base exception for all flagwatch errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    raising sites only pass what differs from the defaults.

    Examples:
        >>> error = FlagwatchError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

        Chaining the original exception:

        >>> try:
        ...     raise ConnectionError("DNS lookup failed")
        ... except ConnectionError as e:
        ...     error = FlagwatchError("Network error", cause=e)
        >>> error.cause
        ConnectionError('DNS lookup failed')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        retry_after: int | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.retry_after = retry_after
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> FlagwatchError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SourceUnavailableError("HTTP 502").with_context(
                platform="XboxClient",
                url="https://example.invalid/XboxClient.json",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.retry_after is not None:
            result["retry_after"] = self.retry_after
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SOURCE ERRORS
# =============================================================================


class SourceError(FlagwatchError):
    """
    Error reading a remote document.

    Default not retryable. Catch this type to treat any fetch failure as
    "source did not answer".
    """

    default_category = ErrorCategory.SOURCE
    default_retryable = False


class SourceNotFoundError(SourceError):
    """The document does not exist (HTTP 404)."""

    pass


class SourceUnavailableError(SourceError):
    """Network failure, timeout or non-success status; may succeed later."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class ParseError(SourceError):
    """Document body is not a JSON object."""

    default_category = ErrorCategory.PARSE
    default_retryable = False


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(FlagwatchError):
    """
    Invalid caller input.

    Never retryable - the input must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class InvalidPlatformError(ValidationError):
    """Platform identifier is not one of the catalog's platforms."""

    def __init__(self, platform: str, known: list[str] | tuple[str, ...] = ()):
        self.platform = platform
        self.known = list(known)
        message = f"Unknown platform: {platform!r}"
        if self.known:
            message += f" (expected one of: {', '.join(self.known)})"
        super().__init__(message, field="platform", value=platform)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(FlagwatchError):
    """Configuration error. Never retryable."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, FlagwatchError):
        return error.retryable
    return isinstance(error, (ConnectionError, OSError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, FlagwatchError):
        return error.category
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.NETWORK
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "FlagwatchError",
    "SourceError",
    "SourceNotFoundError",
    "SourceUnavailableError",
    "ParseError",
    "ValidationError",
    "InvalidPlatformError",
    "ConfigError",
    "InvalidConfigError",
    "is_retryable",
    "categorize_error",
]
