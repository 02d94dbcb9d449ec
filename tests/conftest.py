"""
Shared pytest fixtures for flagwatch tests.

This module provides:
- ``FakeTracker``: an in-memory flag tracker served through httpx.MockTransport
- ``FakeClock``: a manually advanced monotonic clock for TTL tests
- ``make_service``: FlagService factory wired to the fake tracker

Usage:
    @pytest.mark.asyncio
    async def test_something(make_service, tracker):
        service = make_service()
        record = await service.resolve("FFlagShared")
        assert tracker.count("PCDesktopClient.json") == 1
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

import httpx
import pytest
import structlog

from flagwatch.core.settings import FlagwatchSettings, clear_settings_cache
from flagwatch.service import FlagService
from flagwatch.sources.fetcher import RemoteFetcher

BASE_URL = "https://tracker.test"


# =============================================================================
# Fake remote tracker
# =============================================================================


class FakeTracker:
    """Serves platform and metadata documents keyed by URL path.

    Attributes:
        documents: platform id -> document body
        metadata: flag name -> metadata document body
        statuses: path -> HTTP status to return instead of the document
        headers: path -> response headers sent with that status
        raw: path -> raw response bytes (for malformed bodies)
        errors: path -> httpx exception class raised for that path
        requests: every path requested, in order
    """

    def __init__(self, documents: dict[str, Any], metadata: dict[str, Any] | None = None):
        self.documents = documents
        self.metadata = metadata or {}
        self.statuses: dict[str, int] = {}
        self.headers: dict[str, dict[str, str]] = {}
        self.raw: dict[str, bytes] = {}
        self.errors: dict[str, type[httpx.HTTPError]] = {}
        self.requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.lstrip("/")
        self.requests.append(path)

        if path in self.errors:
            raise self.errors[path]("simulated failure", request=request)
        if path in self.statuses:
            return httpx.Response(self.statuses[path], headers=self.headers.get(path))
        if path in self.raw:
            return httpx.Response(200, content=self.raw[path])

        if path.startswith("FVariables/FFlag/"):
            name = path.rsplit("/", 1)[-1].removesuffix(".json")
            if name in self.metadata:
                return httpx.Response(200, json=self.metadata[name])
            return httpx.Response(404)

        platform = path.removesuffix(".json")
        if platform in self.documents:
            return httpx.Response(200, json=self.documents[platform])
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, path: str) -> int:
        return self.requests.count(path)

    def fail(self, platform_id: str, status: int = 503, retry_after: int | None = None) -> None:
        path = f"{platform_id}.json"
        self.statuses[path] = status
        if retry_after is not None:
            self.headers[path] = {"Retry-After": str(retry_after)}


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_global_state() -> Generator[None, None, None]:
    """Each test starts with default logging config and no cached settings."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    structlog.contextvars.clear_contextvars()
    clear_settings_cache()


@pytest.fixture
def documents() -> dict[str, Any]:
    """Six platform documents with overlapping and platform-unique flags."""
    return {
        "PCDesktopClient": {
            "FFlagShared": True,
            "DFIntFrameRateCap": 60,
            "FFlagGraphicsQuality": False,
            "FFlagNestedConfig": {"enabled": True},
        },
        "MacDesktopClient": {
            "FFlagShared": False,
            "FStringRegion": "us-east",
        },
        "AndroidApp": {
            "FFlagShared": True,
            "FFlagMobileOnly": True,
            "DFIntFrameRateCap": 30,
        },
        "iOSApp": {
            "FFlagGraphicsMobile": True,
            "FFlagNullValue": None,
        },
        "XboxClient": {
            "DFIntFrameRateCap": 30,
        },
        "PCStudioApp": {
            "FFlagStudioOnly": "enabled",
            "FFlagGraphicsStudio": True,
        },
    }


@pytest.fixture
def tracker(documents) -> FakeTracker:
    return FakeTracker(documents)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_service(tracker, clock):
    """Factory for services sharing the fake tracker; kwargs override settings."""

    def factory(**overrides: Any) -> FlagService:
        settings = FlagwatchSettings(base_url=BASE_URL, _env_file=None, **overrides)
        client = httpx.AsyncClient(transport=tracker.transport())
        return FlagService(settings, fetcher=RemoteFetcher(client=client), clock=clock)

    return factory


@pytest.fixture
def service(make_service) -> FlagService:
    return make_service()
