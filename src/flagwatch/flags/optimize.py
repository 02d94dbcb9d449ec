"""
Curated performance recommendations.

Each category maps flag names to a recommended value. ``recommend`` looks
up every recommended flag concurrently so the caller can show what the
tracker currently publishes next to the suggestion.

Categories:
    fps       frame rate and rendering
    latency   network ticks and packet limits
    memory    memory and cache sizing
    all       every table above, merged in that order
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from flagwatch.core.errors import ValidationError
from flagwatch.core.logging import get_logger
from flagwatch.flags.models import FlagRecord
from flagwatch.flags.resolver import PlatformResolver

logger = get_logger(__name__)

RECOMMENDATIONS: dict[str, dict[str, bool | int]] = {
    "fps": {
        "FFlagGlobalWindRendering": False,
        "FFlagRenderCheckThreading": True,
        "DFIntTaskSchedulerTargetFps": 9999,
        "FFlagGraphicsGLEnableSuperHQShadersExclusion": False,
        "FFlagGraphicsGLEnableHQShadersExclusion": False,
        "FFlagGameBasicSettingsFramerateCap": True,
    },
    "latency": {
        "DFIntConnectionExtraTicksBehind": 0,
        "DFIntConnectionTicksBehind": 0,
        "DFIntMaxNetworkPackets": 999,
        "DFIntNetworkMessageRateLimit": 0,
        "FFlagNetworkOptimization": True,
    },
    "memory": {
        "FFlagMemoryPrioritization": True,
        "DFIntMemoryOptimization": 1,
        "FFlagGarbageCollectionEnabled": True,
        "DFIntCacheSize": 256,
    },
}

ALL_CATEGORIES = "all"
OPTIMIZE_CATEGORIES = (*RECOMMENDATIONS, ALL_CATEGORIES)

# Checked in order; first match wins.
_EXPLANATIONS = (
    ("FPS", "Controls frame rate limiting and synchronization"),
    ("Graphics", "Affects visual quality and rendering performance"),
    ("Network", "Impacts network communication and latency"),
    ("Memory", "Controls memory usage and optimization"),
)


@dataclass(frozen=True)
class Recommendation:
    """A suggested value next to what the tracker publishes today."""

    name: str
    recommended: bool | int
    current: FlagRecord | None = None

    @property
    def known(self) -> bool:
        return self.current is not None

    @property
    def explanation(self) -> str | None:
        return explain(self.name)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "recommended": self.recommended,
            "current": self.current.value if self.current else None,
            "platform": self.current.platform if self.current else None,
        }
        if self.explanation:
            result["explanation"] = self.explanation
        return result


def explain(flag_name: str) -> str | None:
    for marker, text in _EXPLANATIONS:
        if marker in flag_name:
            return text
    return None


def recommendations_for(category: str) -> dict[str, bool | int]:
    """Recommended values for ``category``; ``all`` merges every table.

    Raises:
        ValidationError: unknown category.
    """
    category = category.lower()
    if category == ALL_CATEGORIES:
        merged: dict[str, bool | int] = {}
        for table in RECOMMENDATIONS.values():
            merged.update(table)
        return merged
    try:
        return dict(RECOMMENDATIONS[category])
    except KeyError:
        raise ValidationError(
            f"Unknown optimization category {category!r} "
            f"(expected one of: {', '.join(OPTIMIZE_CATEGORIES)})",
            field="category",
            value=category,
        ) from None


async def recommend(resolver: PlatformResolver, category: str) -> list[Recommendation]:
    """Resolve every recommended flag concurrently, in table order."""
    table = recommendations_for(category)
    names = list(table)
    records = await asyncio.gather(*(resolver.resolve(name) for name in names))
    logger.info(
        "recommendations_resolved",
        category=category.lower(),
        total=len(names),
        known=sum(1 for r in records if r is not None),
    )
    return [Recommendation(name, table[name], record) for name, record in zip(names, records)]


__all__ = [
    "OPTIMIZE_CATEGORIES",
    "RECOMMENDATIONS",
    "Recommendation",
    "explain",
    "recommend",
    "recommendations_for",
]
