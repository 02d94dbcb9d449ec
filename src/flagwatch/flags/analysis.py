"""
Naming and value statistics over a set of flag records.

Pure functions; no I/O. Feed them the output of ``Aggregator.all_entries``
or ``SearchEngine.search``.

Examples:
    >>> flag_kind("DFlagDebugMode")
    'Dynamic Flag'
    >>> group_by_prefix(["FFlagGraphicsQuality", "FFlagGraphicsOff", "x"])
    {'Graphics': ['FFlagGraphicsQuality', 'FFlagGraphicsOff'], 'Other': ['x']}
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from flagwatch.flags.models import FlagRecord, ValueType

_PREFIX_RE = re.compile(r"^[DF]Flag([A-Z][a-z]+)")
_TYPE_PREFIX_RE = re.compile(r"^[A-Z]+[A-Z][a-z]+")
_WORD_RE = re.compile(r"[A-Z][a-z]+")


def flag_kind(flag_name: str) -> str:
    if flag_name.startswith("DFlag"):
        return "Dynamic Flag"
    if flag_name.startswith("FFlag"):
        return "Fast Flag"
    return "Unknown Flag Type"


def categorize_by_kind(names: Iterable[str]) -> dict[str, list[str]]:
    """Bucket names into ``DFlags``, ``FFlags`` and ``Other``."""
    buckets: dict[str, list[str]] = {"DFlags": [], "FFlags": [], "Other": []}
    for name in names:
        if name.startswith("DFlag"):
            buckets["DFlags"].append(name)
        elif name.startswith("FFlag"):
            buckets["FFlags"].append(name)
        else:
            buckets["Other"].append(name)
    return buckets


def group_by_prefix(names: Iterable[str]) -> dict[str, list[str]]:
    """Group by the first capitalized word after ``DFlag``/``FFlag``."""
    groups: dict[str, list[str]] = {}
    for name in names:
        match = _PREFIX_RE.match(name)
        key = match.group(1) if match else "Other"
        groups.setdefault(key, []).append(name)
    return groups


def type_prefix(flag_name: str) -> str:
    """Leading tag such as ``FFlag``, ``DFInt`` or ``FString``; ``Other`` if none."""
    match = _TYPE_PREFIX_RE.match(flag_name)
    return match.group(0) if match else "Other"


@dataclass
class FlagStats:
    total: int = 0
    type_distribution: dict[str, int] = field(default_factory=dict)
    platform_distribution: dict[str, int] = field(default_factory=dict)
    value_types: dict[str, int] = field(
        default_factory=lambda: {vt.value: 0 for vt in ValueType}
    )
    patterns: list[tuple[str, int]] = field(default_factory=list)
    enabled: int = 0
    disabled: int = 0

    @property
    def enabled_ratio(self) -> float | None:
        """Share of boolean records set to true, or None without booleans."""
        booleans = self.enabled + self.disabled
        if booleans == 0:
            return None
        return self.enabled / booleans

    def top_platform(self) -> str | None:
        if not self.platform_distribution:
            return None
        return max(self.platform_distribution.items(), key=lambda kv: kv[1])[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "type_distribution": self.type_distribution,
            "platform_distribution": self.platform_distribution,
            "value_types": self.value_types,
            "patterns": [{"name": n, "count": c} for n, c in self.patterns],
            "enabled_ratio": self.enabled_ratio,
        }


def compute_stats(records: Iterable[FlagRecord]) -> FlagStats:
    stats = FlagStats()
    types: Counter[str] = Counter()
    platforms: Counter[str] = Counter()
    words: Counter[str] = Counter()

    for record in records:
        stats.total += 1
        types[type_prefix(record.name)] += 1
        if record.platform:
            platforms[record.platform] += 1
        stats.value_types[record.value_type.value] += 1
        if record.value_type is ValueType.BOOL:
            if record.value:
                stats.enabled += 1
            else:
                stats.disabled += 1
        words.update(_WORD_RE.findall(record.name))

    stats.type_distribution = dict(types.most_common())
    stats.platform_distribution = dict(platforms.most_common())
    stats.patterns = words.most_common()
    return stats


def format_distribution(distribution: dict[str, int]) -> list[str]:
    """``key: NN%`` lines, largest first."""
    total = sum(distribution.values())
    if total == 0:
        return []
    ordered = sorted(distribution.items(), key=lambda kv: kv[1], reverse=True)
    return [f"{key}: {round(count / total * 100)}%" for key, count in ordered]
