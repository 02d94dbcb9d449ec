"""
Composition root.

``FlagService`` builds exactly one ``CacheStore`` and one ``RemoteFetcher``
and hands them to the resolver, search engine and aggregator, so that a
document fetched by a search is a cache hit for the next resolve.

Usage:
    async with FlagService.from_settings() as service:
        record = await service.resolve("FFlagDebugMode")
        matches = await service.search("graphics", include_studio=False)

Tests build an isolated service around a mock transport:

    fetcher = RemoteFetcher(client=httpx.AsyncClient(transport=transport))
    service = FlagService(FlagwatchSettings(), fetcher=fetcher)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from flagwatch.core.cache import CacheStore
from flagwatch.core.logging import get_logger
from flagwatch.core.settings import FlagwatchSettings, get_settings
from flagwatch.core.timestamps import monotonic
from flagwatch.flags.aggregator import Aggregator
from flagwatch.flags.checklist import FlagCheck, check_flags
from flagwatch.flags.models import FlagComparison, FlagRecord, Resolution
from flagwatch.flags.optimize import Recommendation, recommend
from flagwatch.flags.resolver import PlatformResolver
from flagwatch.flags.search import SearchEngine
from flagwatch.sources.catalog import SourceCatalog
from flagwatch.sources.fetcher import RemoteFetcher

logger = get_logger(__name__)


class FlagService:
    """One cache, one fetcher, one catalog; every lookup goes through them."""

    def __init__(
        self,
        settings: FlagwatchSettings | None = None,
        *,
        fetcher: RemoteFetcher | None = None,
        cache: CacheStore | None = None,
        clock: Callable[[], float] = monotonic,
    ):
        self.settings = settings or get_settings()
        self.catalog = SourceCatalog(self.settings.base_url)
        self.cache = cache or CacheStore(
            ttl_seconds=self.settings.cache_ttl_seconds,
            max_size=self.settings.cache_max_size,
            clock=clock,
        )
        self.fetcher = fetcher or RemoteFetcher(
            timeout=self.settings.fetch_timeout_seconds,
            user_agent=self.settings.user_agent,
        )

        parts = (self.cache, self.fetcher, self.catalog)
        parallel = self.settings.parallel_scan
        self.resolver = PlatformResolver(*parts, parallel=parallel)
        self.search_engine = SearchEngine(*parts, parallel=parallel)
        self.aggregator = Aggregator(*parts, parallel=parallel)

        logger.debug(
            "service_initialized",
            base_url=self.catalog.base_url,
            ttl=self.cache.ttl_seconds,
            parallel_scan=parallel,
        )

    @classmethod
    def from_settings(cls, settings: FlagwatchSettings | None = None) -> FlagService:
        return cls(settings)

    async def resolve(self, flag_name: str) -> FlagRecord | None:
        return await self.resolver.resolve(flag_name)

    async def resolve_for_platform(self, flag_name: str, platform_id: str) -> FlagRecord | None:
        return await self.resolver.resolve_for_platform(flag_name, platform_id)

    async def lookup(self, flag_name: str) -> Resolution:
        return await self.resolver.lookup(flag_name)

    async def compare(self, flag_name: str, platforms: Iterable[str] | None = None) -> FlagComparison:
        return await self.resolver.compare(flag_name, platforms)

    async def search(
        self,
        keyword: str,
        include_studio: bool = True,
        *,
        platforms: Iterable[str] | None = None,
    ) -> list[FlagRecord]:
        return await self.search_engine.search(keyword, include_studio, platforms=platforms)

    async def all_entries(
        self, platforms: Iterable[str] | None = None, include_studio: bool = True
    ) -> list[FlagRecord]:
        return await self.aggregator.all_entries(platforms, include_studio)

    async def check(self, names: Iterable[str]) -> list[FlagCheck]:
        return await check_flags(self.resolver, names)

    async def recommend(self, category: str) -> list[Recommendation]:
        return await recommend(self.resolver, category)

    async def aclose(self) -> None:
        await self.fetcher.aclose()

    async def __aenter__(self) -> FlagService:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


__all__ = ["FlagService"]
