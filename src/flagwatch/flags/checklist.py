"""
Validate a user-supplied list of flags against the live tracker.

Input is either a JSON document (any nesting; every key that looks like a
flag name is collected) or plain text with one flag per line. Each name is
resolved and classified:

    replaced   metadata names a replacement flag
    outdated   metadata marks the flag outdated
    valid      resolved, neither of the above
    invalid    not found anywhere
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from flagwatch.core.errors import ValidationError
from flagwatch.core.logging import get_logger
from flagwatch.core.timestamps import to_iso8601, utc_now
from flagwatch.flags.descriptions import describe
from flagwatch.flags.resolver import PlatformResolver

logger = get_logger(__name__)

FLAG_NAME_RE = re.compile(r"^[DF]Flag[A-Za-z0-9]+$")
LIST_FORMATS = ("json", "txt")


class CheckStatus(str, Enum):
    VALID = "valid"
    OUTDATED = "outdated"
    INVALID = "invalid"
    REPLACED = "replaced"


@dataclass(frozen=True)
class FlagCheck:
    name: str
    status: CheckStatus
    replacement: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name, "status": self.status.value}
        if self.replacement:
            result["replacement"] = self.replacement
        if self.description:
            result["description"] = self.description
        return result


def _dedupe(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(names))


def _walk_keys(node: Any, found: list[str]) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            if isinstance(key, str) and FLAG_NAME_RE.match(key):
                found.append(key)
            _walk_keys(value, found)
    elif isinstance(node, list):
        for value in node:
            _walk_keys(value, found)


def parse_flag_list(content: str, fmt: str) -> list[str]:
    """Extract flag names from ``content``.

    Args:
        content: Raw file contents.
        fmt: ``json`` or ``txt``.

    Returns:
        Flag names in first-seen order, duplicates removed. Invalid JSON
        yields an empty list.

    Raises:
        ValidationError: ``fmt`` is not a supported list format.
    """
    fmt = fmt.lower()
    if fmt == "json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            logger.info("flag_list_unparsable", format=fmt)
            return []
        found: list[str] = []
        _walk_keys(data, found)
        return _dedupe(found)
    if fmt == "txt":
        lines = (line.strip() for line in content.splitlines())
        return _dedupe(line for line in lines if FLAG_NAME_RE.match(line))
    raise ValidationError(
        f"Unsupported list format {fmt!r} (expected one of: {', '.join(LIST_FORMATS)})",
        field="format",
        value=fmt,
    )


async def check_flags(resolver: PlatformResolver, names: Iterable[str]) -> list[FlagCheck]:
    """Resolve each name in turn and classify it."""
    results: list[FlagCheck] = []
    for name in names:
        record = await resolver.resolve(name)
        if record is None:
            results.append(FlagCheck(name, CheckStatus.INVALID))
            continue
        description = record.description or describe(name)
        if record.replacement:
            results.append(FlagCheck(name, CheckStatus.REPLACED, record.replacement, description))
        elif record.outdated:
            results.append(FlagCheck(name, CheckStatus.OUTDATED, description=description))
        else:
            results.append(FlagCheck(name, CheckStatus.VALID, description=description))
    return results


def summarize(checks: Iterable[FlagCheck]) -> dict[str, int]:
    counts = {status.value: 0 for status in CheckStatus}
    total = 0
    for check in checks:
        counts[check.status.value] += 1
        total += 1
    counts["total"] = total
    return counts


def export_checks(checks: Iterable[FlagCheck]) -> dict[str, Any]:
    """JSON-ready export document with a generation timestamp."""
    return {
        "timestamp": to_iso8601(utc_now()),
        "results": [check.to_dict() for check in checks],
    }
