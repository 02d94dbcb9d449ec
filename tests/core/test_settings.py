"""Tests for flagwatch.core.settings — env loading, validation and caching."""

import pytest
from pydantic import ValidationError

from flagwatch.core.errors import InvalidConfigError
from flagwatch.core.settings import (
    DEFAULT_BASE_URL,
    FlagwatchSettings,
    clear_settings_cache,
    get_settings,
)


class TestDefaults:
    def test_defaults(self):
        settings = FlagwatchSettings(_env_file=None)
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.cache_ttl_seconds == 300.0
        assert settings.cache_max_size == 256
        assert settings.fetch_timeout_seconds == 10.0
        assert settings.parallel_scan is False

    def test_json_logs_auto_is_none(self):
        assert FlagwatchSettings(_env_file=None).json_logs is None
        assert FlagwatchSettings(_env_file=None, log_format="json").json_logs is True
        assert FlagwatchSettings(_env_file=None, log_format="CONSOLE").json_logs is False


class TestEnvironment:
    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("FLAGWATCH_CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("FLAGWATCH_PARALLEL_SCAN", "true")
        monkeypatch.setenv("FLAGWATCH_BASE_URL", "https://mirror.test/flags/")
        settings = FlagwatchSettings(_env_file=None)
        assert settings.cache_ttl_seconds == 60.0
        assert settings.parallel_scan is True
        assert settings.base_url == "https://mirror.test/flags"


class TestValidation:
    @pytest.mark.parametrize(
        "field,value",
        [
            ("cache_ttl_seconds", 0),
            ("fetch_timeout_seconds", -1),
            ("cache_max_size", 0),
            ("base_url", "ftp://tracker"),
            ("log_level", "LOUD"),
            ("log_format", "xml"),
        ],
    )
    def test_rejects_bad_values(self, field, value):
        with pytest.raises(ValidationError):
            FlagwatchSettings(_env_file=None, **{field: value})

    def test_log_level_uppercased(self):
        assert FlagwatchSettings(_env_file=None, log_level="debug").log_level == "DEBUG"


class TestGetSettings:
    def test_cached(self):
        clear_settings_cache()
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        clear_settings_cache()
        first = get_settings()
        monkeypatch.setenv("FLAGWATCH_CACHE_MAX_SIZE", "12")
        reloaded = get_settings(_force_reload=True)
        assert reloaded is not first
        assert reloaded.cache_max_size == 12

    def test_invalid_env_becomes_config_error(self, monkeypatch):
        clear_settings_cache()
        monkeypatch.setenv("FLAGWATCH_CACHE_TTL_SECONDS", "-5")
        with pytest.raises(InvalidConfigError) as exc_info:
            get_settings()
        assert exc_info.value.key == "cache_ttl_seconds"
