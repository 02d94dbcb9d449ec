"""
Remote JSON document fetcher.

``RemoteFetcher`` performs one unauthenticated GET and returns the parsed
JSON object. It has no retry policy and no cache of its own; callers go
through :class:`~flagwatch.core.cache.CacheStore`.

Failure mapping:

    ================================  ===========================
    condition                         raised
    ================================  ===========================
    HTTP 404                          SourceNotFoundError
    URL rejected by httpx             SourceNotFoundError
    timeout / connect / other non-2xx SourceUnavailableError
    body is not JSON / not an object  ParseError
    ================================  ===========================

Usage:
    async with RemoteFetcher(timeout=10.0) as fetcher:
        document = await fetcher.fetch_json("https://.../PCDesktopClient.json")

    # tests inject a client backed by httpx.MockTransport
    fetcher = RemoteFetcher(client=httpx.AsyncClient(transport=transport))
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from flagwatch.core.errors import ParseError, SourceNotFoundError, SourceUnavailableError
from flagwatch.core.logging import get_logger

logger = get_logger(__name__)


class RemoteFetcher:
    """GET a URL and return its JSON object body."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        user_agent: str = "flagwatch/0.1",
        client: httpx.AsyncClient | None = None,
    ):
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            follow_redirects=True,
        )
        self.requests = 0

    async def fetch_json(self, url: str) -> dict[str, Any]:
        """Fetch ``url`` and return the decoded JSON object."""
        self.requests += 1
        logger.debug("fetch_started", url=url)
        try:
            response = await self._client.get(url)
        except httpx.InvalidURL as e:
            raise SourceNotFoundError(f"Cannot request {url[:200]!r}: {e}", cause=e).with_context(
                url=url[:2048]
            )
        except httpx.TimeoutException as e:
            raise SourceUnavailableError(f"Timed out fetching {url}", cause=e).with_context(url=url)
        except httpx.HTTPError as e:
            raise SourceUnavailableError(f"Request failed for {url}: {e}", cause=e).with_context(url=url)

        status = response.status_code
        if status == 404:
            raise SourceNotFoundError(f"Document not found: {url}").with_context(
                url=url, http_status=status
            )
        if not response.is_success:
            retry_after = _retry_after(response)
            raise SourceUnavailableError(
                f"HTTP {status} fetching {url}", retry_after=retry_after
            ).with_context(url=url, http_status=status)

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Malformed JSON at {url}", cause=e).with_context(
                url=url, http_status=status
            )
        if not isinstance(payload, dict):
            raise ParseError(
                f"Expected a JSON object at {url}, got {type(payload).__name__}"
            ).with_context(url=url, http_status=status)

        logger.debug("fetch_completed", url=url, keys=len(payload))
        return payload

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> RemoteFetcher:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("Retry-After")
    if value and value.isdigit():
        return int(value)
    return None


__all__ = ["RemoteFetcher"]
