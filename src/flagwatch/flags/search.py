"""
Keyword search across platform documents.

Unlike ``resolve``, search never stops at the first match: a flag defined
on three platforms yields three records. Results are grouped by catalog
order, then by the insertion order of each document.
"""

from __future__ import annotations

from collections.abc import Iterable

from flagwatch.core.logging import get_logger
from flagwatch.flags.base import DocumentReader
from flagwatch.flags.models import FlagRecord

logger = get_logger(__name__)


class SearchEngine(DocumentReader):
    """Case-insensitive substring search over flag names."""

    async def search(
        self,
        keyword: str,
        include_studio: bool = True,
        *,
        platforms: Iterable[str] | None = None,
    ) -> list[FlagRecord]:
        """Every scalar flag whose name contains ``keyword``.

        Args:
            keyword: Substring to match, case-insensitively. An empty keyword
                matches every flag.
            include_studio: Scan studio-only documents too.
            platforms: Restrict the scan to these platform ids.

        A source that cannot be fetched is skipped; the scan continues.
        """
        needle = keyword.lower()
        descriptors = self._catalog.select(include_studio=include_studio, platforms=platforms)

        results: list[FlagRecord] = []
        skipped: list[str] = []
        async for item in self.scan(descriptors):
            if not item.ok:
                skipped.append(item.descriptor.platform_id)
                continue
            for name, value in item.document.items():
                if needle not in name.lower():
                    continue
                record = FlagRecord.from_value(name, value, platform=item.descriptor.platform_id)
                if record is not None:
                    results.append(record)

        logger.debug(
            "search_completed",
            keyword=keyword,
            sources=len(descriptors),
            skipped=skipped,
            matches=len(results),
        )
        return results
