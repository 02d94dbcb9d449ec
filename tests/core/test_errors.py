"""
Tests for flagwatch.core.errors module.

Covers the error hierarchy, default categories and retry semantics,
context chaining and serialization.
"""

import pytest

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


class TestErrorHierarchy:
    """Inheritance and class defaults."""

    @pytest.mark.parametrize(
        "error_cls",
        [SourceNotFoundError, SourceUnavailableError, ParseError],
    )
    def test_source_errors_share_base(self, error_cls):
        assert issubclass(error_cls, SourceError)
        assert issubclass(error_cls, FlagwatchError)

    def test_invalid_platform_is_validation_error(self):
        assert issubclass(InvalidPlatformError, ValidationError)

    def test_invalid_config_is_config_error(self):
        assert issubclass(InvalidConfigError, ConfigError)

    def test_only_unavailable_is_retryable(self):
        assert SourceUnavailableError("x").retryable is True
        assert SourceNotFoundError("x").retryable is False
        assert ParseError("x").retryable is False
        assert ValidationError("x").retryable is False

    def test_default_categories(self):
        assert FlagwatchError("x").category == ErrorCategory.INTERNAL
        assert SourceNotFoundError("x").category == ErrorCategory.SOURCE
        assert SourceUnavailableError("x").category == ErrorCategory.NETWORK
        assert ParseError("x").category == ErrorCategory.PARSE
        assert InvalidConfigError("k", 1).category == ErrorCategory.CONFIG

    def test_explicit_overrides_win(self):
        error = SourceUnavailableError("x", retryable=False, category=ErrorCategory.UNKNOWN)
        assert error.retryable is False
        assert error.category == ErrorCategory.UNKNOWN


class TestErrorContext:
    """Fluent context and serialization."""

    def test_with_context_sets_typed_fields_and_metadata(self):
        error = SourceUnavailableError("HTTP 502").with_context(
            platform="XboxClient", http_status=502, attempt=2
        )
        assert error.context.platform == "XboxClient"
        assert error.context.http_status == 502
        assert error.context.metadata == {"attempt": 2}

    def test_with_context_returns_same_instance(self):
        error = ParseError("bad")
        assert error.with_context(url="https://x") is error

    def test_context_to_dict_skips_none(self):
        ctx = ErrorContext(flag="FFlagX", url="https://x", metadata={"k": "v"})
        assert ctx.to_dict() == {"flag": "FFlagX", "url": "https://x", "k": "v"}

    def test_to_dict(self):
        cause = TimeoutError("read timed out")
        error = SourceUnavailableError("Timed out", retry_after=30, cause=cause).with_context(
            url="https://x"
        )
        data = error.to_dict()
        assert data["error_type"] == "SourceUnavailableError"
        assert data["category"] == "NETWORK"
        assert data["retryable"] is True
        assert data["retry_after"] == 30
        assert data["context"] == {"url": "https://x"}
        assert data["cause"] == "read timed out"
        assert error.__cause__ is cause

    def test_repr(self):
        assert repr(ParseError("bad json")) == "ParseError('bad json', category=PARSE)"


class TestValidationErrors:
    def test_invalid_platform_message_lists_known(self):
        error = InvalidPlatformError("Wii", ("PCDesktopClient", "AndroidApp"))
        assert error.platform == "Wii"
        assert "PCDesktopClient, AndroidApp" in error.message
        assert error.to_dict()["field"] == "platform"
        assert error.to_dict()["value"] == "'Wii'"

    def test_invalid_config_default_message(self):
        error = InvalidConfigError("cache_ttl_seconds", -1)
        assert error.key == "cache_ttl_seconds"
        assert "cache_ttl_seconds" in error.message


class TestHelpers:
    def test_is_retryable(self):
        assert is_retryable(SourceUnavailableError("x"))
        assert not is_retryable(SourceNotFoundError("x"))
        assert is_retryable(ConnectionError())
        assert not is_retryable(KeyError("x"))

    def test_categorize_error(self):
        assert categorize_error(ParseError("x")) == ErrorCategory.PARSE
        assert categorize_error(ConnectionError()) == ErrorCategory.NETWORK
        assert categorize_error(ValueError()) == ErrorCategory.VALIDATION
        assert categorize_error(KeyError()) == ErrorCategory.UNKNOWN
