"""
Single-flag resolution.

Strategy for ``resolve(name)``:

    1. platform scan   visit catalog documents in order; the first one whose
                       top-level key ``name`` holds a scalar wins. Later
                       documents are not consulted (sequential mode).
    2. metadata path   ``FVariables/FFlag/{N}/{name}.json``; a parsable
                       document becomes the record.
    3. not found       ``None``.

A platform document that cannot be fetched is skipped and the scan goes on.
Any failure at the metadata step reads as "absent". ``resolve`` therefore
cannot tell a missing flag from an unreachable tracker; ``lookup`` runs the
same algorithm and reports the difference.

Ties between platforms are broken by catalog order only; values are never
merged across documents.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from contextlib import aclosing
from typing import Any

from flagwatch.core.errors import (
    ParseError,
    SourceError,
    SourceNotFoundError,
    categorize_error,
    is_retryable,
)
from flagwatch.core.logging import LogContext, get_logger
from flagwatch.flags.base import DocumentReader
from flagwatch.flags.models import (
    FlagComparison,
    FlagRecord,
    MetadataDocument,
    PlatformValue,
    Resolution,
    ResolutionStatus,
)

logger = get_logger(__name__)


def record_from_document(
    document: dict[str, Any], flag_name: str, platform_id: str
) -> FlagRecord | None:
    """Record for ``flag_name`` in one platform document, if scalar-valued."""
    if flag_name not in document:
        return None
    return FlagRecord.from_value(flag_name, document[flag_name], platform=platform_id)


class PlatformResolver(DocumentReader):
    """Resolve flags by exact name."""

    async def resolve(self, flag_name: str) -> FlagRecord | None:
        """Locate ``flag_name``: platform scan, then metadata fallback.

        Returns:
            The first matching record in catalog order, the metadata-derived
            record, or ``None``.
        """
        resolution = await self.lookup(flag_name)
        return resolution.record

    async def lookup(self, flag_name: str) -> Resolution:
        """Same algorithm as :meth:`resolve`, reporting why nothing was found."""
        if not flag_name:
            return Resolution(flag_name, ResolutionStatus.NOT_FOUND)

        failed: list[str] = []
        async with LogContext(flag=flag_name):
            async with aclosing(self.scan(self._catalog.select())) as items:
                async for item in items:
                    if not item.ok:
                        failed.append(item.descriptor.platform_id)
                        continue
                    record = record_from_document(
                        item.document, flag_name, item.descriptor.platform_id
                    )
                    if record is not None:
                        logger.debug("flag_resolved", platform=record.platform, strategy="platform")
                        return Resolution(flag_name, ResolutionStatus.FOUND, record, failed)

            record, metadata_failed = await self._from_metadata(flag_name)

        if record is not None:
            return Resolution(flag_name, ResolutionStatus.FOUND, record, failed)
        if metadata_failed:
            failed.append(self._catalog.metadata_url(flag_name))
        if failed:
            return Resolution(flag_name, ResolutionStatus.SOURCE_UNAVAILABLE, None, failed)
        return Resolution(flag_name, ResolutionStatus.NOT_FOUND)

    async def _from_metadata(self, flag_name: str) -> tuple[FlagRecord | None, bool]:
        """Metadata fallback. Returns (record, fetch_failed)."""
        url = self._catalog.metadata_url(flag_name)
        try:
            payload = await self.fetch_url(url)
            record = MetadataDocument.from_json(payload).to_record(flag_name)
        except (SourceNotFoundError, ParseError):
            logger.debug("metadata_absent", url=url)
            return None, False
        except SourceError as e:
            logger.warning(
                "metadata_fetch_failed",
                url=url,
                error=e.message,
                category=categorize_error(e).value,
                retryable=is_retryable(e),
                retry_after=e.retry_after,
            )
            return None, True

        if record is not None:
            logger.debug("flag_resolved", platform=record.platform, strategy="metadata")
        return record, False

    async def resolve_for_platform(self, flag_name: str, platform_id: str) -> FlagRecord | None:
        """Look in exactly one platform document; no metadata fallback.

        Raises:
            InvalidPlatformError: ``platform_id`` is not in the catalog.
        """
        descriptor = self._catalog.descriptor(platform_id)
        if not flag_name:
            return None
        item = await self._read(descriptor)
        if not item.ok:
            return None
        return record_from_document(item.document, flag_name, platform_id)

    async def compare(
        self, flag_name: str, platforms: Iterable[str] | None = None
    ) -> FlagComparison:
        """Resolve ``flag_name`` on several platforms concurrently.

        Every platform id is validated before any fetch starts.
        """
        platform_ids = list(platforms) if platforms is not None else list(self._catalog.platform_ids)
        for platform_id in platform_ids:
            self._catalog.descriptor(platform_id)

        records = await asyncio.gather(
            *(self.resolve_for_platform(flag_name, p) for p in platform_ids)
        )
        return FlagComparison(
            flag_name=flag_name,
            entries=[PlatformValue(p, r) for p, r in zip(platform_ids, records)],
        )


__all__ = ["PlatformResolver", "record_from_document"]
