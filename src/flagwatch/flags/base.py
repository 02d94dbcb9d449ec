"""
Shared document access for the resolver, search engine and aggregator.

``DocumentReader`` owns nothing: it is handed the process-wide
``CacheStore``, the ``RemoteFetcher`` and the ``SourceCatalog`` and gives
subclasses two primitives:

- ``document(descriptor)``: one platform document through the cache
- ``scan(descriptors)``: documents in catalog order, failures reported
  per source instead of raised

Scan modes:
    sequential (default)  one fetch at a time, consumer may stop early
    parallel              all fetches started together, results still
                          yielded in catalog order
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

from flagwatch.core.cache import CacheStore
from flagwatch.core.errors import SourceError, categorize_error, is_retryable
from flagwatch.core.logging import get_logger
from flagwatch.sources.catalog import SourceCatalog, SourceDescriptor
from flagwatch.sources.fetcher import RemoteFetcher

logger = get_logger(__name__)


@dataclass
class ScanItem:
    """One visited source: its document, or the error that replaced it."""

    descriptor: SourceDescriptor
    document: dict[str, Any] | None = None
    error: SourceError | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


class DocumentReader:
    """Base class for components that read catalog documents."""

    def __init__(
        self,
        cache: CacheStore,
        fetcher: RemoteFetcher,
        catalog: SourceCatalog,
        *,
        parallel: bool = False,
    ):
        self._cache = cache
        self._fetcher = fetcher
        self._catalog = catalog
        self._parallel = parallel

    @property
    def catalog(self) -> SourceCatalog:
        return self._catalog

    @property
    def cache(self) -> CacheStore:
        return self._cache

    async def fetch_url(self, url: str) -> dict[str, Any]:
        """Read any document URL through the cache."""
        return await self._cache.get_or_fetch(url, partial(self._fetcher.fetch_json, url))

    async def document(self, descriptor: SourceDescriptor) -> dict[str, Any]:
        return await self.fetch_url(descriptor.document_url)

    async def _read(self, descriptor: SourceDescriptor) -> ScanItem:
        try:
            document = await self.document(descriptor)
        except SourceError as e:
            logger.warning(
                "source_fetch_failed",
                platform=descriptor.platform_id,
                url=descriptor.document_url,
                error_type=type(e).__name__,
                error=e.message,
                category=categorize_error(e).value,
                retryable=is_retryable(e),
                retry_after=e.retry_after,
            )
            return ScanItem(descriptor, error=e.with_context(platform=descriptor.platform_id))
        return ScanItem(descriptor, document=document)

    async def scan(self, descriptors: Sequence[SourceDescriptor]) -> AsyncIterator[ScanItem]:
        """Yield one ScanItem per descriptor, in the given order."""
        if self._parallel:
            items = await asyncio.gather(*(self._read(d) for d in descriptors))
            for item in items:
                yield item
            return
        for descriptor in descriptors:
            yield await self._read(descriptor)
