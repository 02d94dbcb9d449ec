"""
Full listing of every flag in the selected documents.

There is no notion of "new" here: nothing remembers what a document looked
like before, so an entry added a minute ago is indistinguishable from one
present for months. ``all_entries`` returns what the live documents hold.
"""

from __future__ import annotations

from collections.abc import Iterable

from flagwatch.core.logging import get_logger
from flagwatch.flags.base import DocumentReader
from flagwatch.flags.models import FlagRecord

logger = get_logger(__name__)


class Aggregator(DocumentReader):
    """Flatten catalog documents into FlagRecords."""

    async def all_entries(
        self,
        platforms: Iterable[str] | None = None,
        include_studio: bool = True,
    ) -> list[FlagRecord]:
        """One record per scalar key/value of every selected source.

        Sources that cannot be fetched are skipped.
        """
        descriptors = self._catalog.select(include_studio=include_studio, platforms=platforms)
        records: list[FlagRecord] = []
        async for item in self.scan(descriptors):
            if not item.ok:
                continue
            platform_id = item.descriptor.platform_id
            for name, value in item.document.items():
                record = FlagRecord.from_value(name, value, platform=platform_id)
                if record is not None:
                    records.append(record)

        logger.debug("listing_completed", sources=len(descriptors), records=len(records))
        return records
