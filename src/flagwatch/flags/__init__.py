"""
Flag resolution, search and listing over the platform documents.
"""

from flagwatch.flags.aggregator import Aggregator
from flagwatch.flags.models import (
    FlagComparison,
    FlagRecord,
    MetadataDocument,
    PlatformValue,
    Resolution,
    ResolutionStatus,
    ValueType,
)
from flagwatch.flags.resolver import PlatformResolver
from flagwatch.flags.search import SearchEngine

__all__ = [
    "Aggregator",
    "FlagComparison",
    "FlagRecord",
    "MetadataDocument",
    "PlatformResolver",
    "PlatformValue",
    "Resolution",
    "ResolutionStatus",
    "SearchEngine",
    "ValueType",
]
