"""
UTC timestamp utilities (stdlib-only).

``utc_now()`` stamps every FlagRecord; ``monotonic()`` drives cache
freshness so that wall-clock jumps cannot make an entry fresh again.
"""

import time
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def monotonic() -> float:
    """Seconds from a clock that never goes backwards."""
    return time.monotonic()


def to_iso8601(dt: datetime | None) -> str | None:
    """Convert datetime to ISO 8601 string."""
    if dt is None:
        return None
    return dt.isoformat()
