"""Settings for flagwatch.

``FlagwatchSettings`` holds everything that varies between deployments:
where the flag documents live, how long fetched documents stay fresh and
how the remote fetcher behaves. Values come from ``FLAGWATCH_*`` environment
variables or a ``.env`` file.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** bad TTLs and timeouts fail at startup
    - **Environment-driven:** ``FLAGWATCH_BASE_URL``, ``FLAGWATCH_CACHE_TTL_SECONDS``...
    - **Sensible defaults:** works against the public tracker out of the box

Examples:
    >>> from flagwatch.core.settings import FlagwatchSettings
    >>> settings = FlagwatchSettings(cache_ttl_seconds=60)
    >>> settings.cache_ttl_seconds
    60.0

Tags:
    settings, configuration, pydantic, environment
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flagwatch.core.errors import InvalidConfigError

DEFAULT_BASE_URL = "https://raw.githubusercontent.com/MaximumADHD/Roblox-FFlag-Tracker/main"


class FlagwatchSettings(BaseSettings):
    """Runtime configuration.

    Fields
    ──────
    base_url              : Root URL holding ``{platform}.json`` and ``FVariables/``
    cache_ttl_seconds     : Freshness window for every cached document
    cache_max_size        : Maximum cached documents before LRU eviction
    fetch_timeout_seconds : Per-request timeout for the remote fetcher
    parallel_scan         : Fetch all catalog sources concurrently during scans
    user_agent            : User-Agent header sent with every request
    log_level             : structlog level
    log_format            : ``json`` | ``console`` | ``auto``
    """

    model_config = SettingsConfigDict(
        env_prefix="FLAGWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Sources ──────────────────────────────────────────────────
    base_url: str = Field(default=DEFAULT_BASE_URL)

    # ── Cache ────────────────────────────────────────────────────
    cache_ttl_seconds: float = Field(default=300.0, description="Document freshness window")
    cache_max_size: int = Field(default=256)

    # ── Fetcher ──────────────────────────────────────────────────
    fetch_timeout_seconds: float = Field(default=10.0)
    parallel_scan: bool = Field(default=False)
    user_agent: str = Field(default="flagwatch/0.1")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="auto")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {value!r}")
        return value.rstrip("/")

    @field_validator("cache_ttl_seconds", "fetch_timeout_seconds")
    @classmethod
    def _positive_float(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("cache_max_size")
    @classmethod
    def _positive_int(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return value

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in {"json", "console", "auto"}:
            raise ValueError(f"unknown log format {value!r}")
        return value

    @property
    def json_logs(self) -> bool | None:
        """``configure_logging`` json flag; ``None`` means detect from the tty."""
        if self.log_format == "auto":
            return None
        return self.log_format == "json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, FlagwatchSettings] = {}


def get_settings(*, _force_reload: bool = False) -> FlagwatchSettings:
    """Load, validate, and cache a :class:`FlagwatchSettings` instance.

    Raises:
        InvalidConfigError: A ``FLAGWATCH_*`` value failed validation.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    try:
        settings = FlagwatchSettings()
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first["loc"]) or "settings"
        raise InvalidConfigError(key, first.get("input"), f"Invalid {key}: {first['msg']}") from e
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
