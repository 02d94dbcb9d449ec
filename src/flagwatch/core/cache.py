"""
Time-bounded document cache shared by every flag lookup.

``CacheStore`` maps a source key (the document URL) to the last payload
fetched for it and the moment it was fetched. A payload is served from
memory while it is fresh; after that the next access re-fetches it.

Manifesto:
    Every resolve, search and listing call reads the same handful of
    platform documents. Without a shared cache each call would re-download
    megabytes of JSON.

    - **TTL freshness:** entries are fresh while ``now - fetched_at < ttl``
    - **Lazy replacement:** stale entries stay until the next access
    - **No negative caching:** a failed fetch writes nothing
    - **Coalesced misses:** concurrent misses on one key share one fetch
    - **Bounded:** LRU eviction past ``max_size``

Architecture:
    ::

        get_or_fetch(key, fetch)
            │
            ├── fresh entry? ──────────────► payload (no I/O)
            │
            ├── fetch in flight for key? ──► await the same task
            │
            └── start task:
                    payload = await fetch()
                    store(key, payload, fetched_at=clock())
                    (exception → propagate, store untouched)
                    finally: clear in-flight slot

Examples:
    >>> cache = CacheStore(ttl_seconds=300, max_size=64)
    >>> payload = await cache.get_or_fetch(url, lambda: fetcher.fetch_json(url))
    >>> cache.stats()["fetches"]
    1

Performance:
    - Fresh hit: O(1), no suspension
    - Miss: one remote fetch per key no matter how many concurrent callers

Guardrails:
    ❌ DON'T: Share one CacheStore across event loops
    ✅ DO: Build one per FlagService and pass it to every component

Tags:
    cache, ttl, lru, asyncio, request-coalescing

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from flagwatch.core.logging import get_logger
from flagwatch.core.timestamps import monotonic

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_MAX_SIZE = 256

FetchFn = Callable[[], Awaitable[Any]]


@dataclass
class CacheEntry:
    """One cached document."""

    key: str
    payload: Any
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at


class CacheStore:
    """TTL cache with LRU bound and per-key request coalescing.

    Not thread-safe: all access must happen on a single asyncio event loop.

    Attributes:
        hits: Calls answered from a fresh entry.
        misses: Calls that found no fresh entry (including coalesced waiters).
        fetches: Underlying fetches actually started.
        evictions: Entries dropped by the LRU bound.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._inflight: dict[str, asyncio.Task] = {}
        self.hits = 0
        self.misses = 0
        self.fetches = 0
        self.evictions = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def max_size(self) -> int:
        return self._max_size

    def is_fresh(self, entry: CacheEntry) -> bool:
        """True while the entry is younger than the TTL."""
        return entry.age(self._clock()) < self._ttl

    def entry(self, key: str) -> CacheEntry | None:
        """Return the stored entry for ``key``, fresh or stale."""
        return self._entries.get(key)

    def peek(self, key: str) -> Any | None:
        """Return the payload if a fresh entry exists, without fetching."""
        entry = self._entries.get(key)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry.payload

    async def get_or_fetch(self, key: str, fetch: FetchFn) -> Any:
        """Return the cached payload for ``key``, fetching it when stale or absent.

        Args:
            key: Cache key, normally the document URL.
            fetch: Zero-argument coroutine function performing the remote read.

        Raises:
            Whatever ``fetch`` raises. Nothing is stored in that case and an
            existing stale entry is left as it was.
        """
        entry = self._entries.get(key)
        if entry is not None and self.is_fresh(entry):
            self._entries.move_to_end(key)
            self.hits += 1
            logger.debug("cache_hit", key=key, age=round(entry.age(self._clock()), 3))
            return entry.payload

        self.misses += 1
        task = self._inflight.get(key)
        if task is None:
            logger.debug("cache_miss", key=key, stale=entry is not None)
            task = asyncio.create_task(self._fetch_and_store(key, fetch))
            task.add_done_callback(_retrieve_exception)
            self._inflight[key] = task
        else:
            logger.debug("cache_fetch_coalesced", key=key)

        # a cancelled waiter must not cancel the fetch other waiters share
        return await asyncio.shield(task)

    async def _fetch_and_store(self, key: str, fetch: FetchFn) -> Any:
        self.fetches += 1
        try:
            payload = await fetch()
            self._store(key, payload)
            return payload
        finally:
            self._inflight.pop(key, None)

    def _store(self, key: str, payload: Any) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = CacheEntry(key=key, payload=payload, fetched_at=self._clock())
        while len(self._entries) > self._max_size:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug("cache_evicted", key=evicted)

    def invalidate(self, key: str) -> None:
        """Drop the entry for ``key``. No-op if absent."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry and reset counters."""
        self._entries.clear()
        self.hits = self.misses = self.fetches = self.evictions = 0

    def size(self) -> int:
        """Return current number of cached entries (fresh or stale)."""
        return len(self._entries)

    def pending(self) -> int:
        """Number of fetches currently in flight."""
        return len(self._inflight)

    def stats(self) -> dict[str, Any]:
        return {
            "size": len(self._entries),
            "max_size": self._max_size,
            "ttl_seconds": self._ttl,
            "hits": self.hits,
            "misses": self.misses,
            "fetches": self.fetches,
            "evictions": self.evictions,
            "in_flight": len(self._inflight),
        }


def _retrieve_exception(task: asyncio.Task) -> None:
    # marks the exception as observed when every waiter was cancelled
    if not task.cancelled():
        task.exception()


__all__ = [
    "CacheEntry",
    "CacheStore",
    "DEFAULT_TTL_SECONDS",
    "DEFAULT_MAX_SIZE",
]
