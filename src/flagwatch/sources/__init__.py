"""
Remote flag documents: where they live and how they are read.
"""

from flagwatch.sources.catalog import (
    METADATA_SOURCE,
    PLATFORMS,
    SourceCatalog,
    SourceDescriptor,
    is_studio,
)
from flagwatch.sources.fetcher import RemoteFetcher

__all__ = [
    "PLATFORMS",
    "METADATA_SOURCE",
    "SourceCatalog",
    "SourceDescriptor",
    "is_studio",
    "RemoteFetcher",
]
