"""
Render flag records as JSON, CSV or a Markdown table.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence

from flagwatch.core.errors import ValidationError
from flagwatch.core.timestamps import to_iso8601
from flagwatch.flags.models import FlagRecord

EXPORT_FORMATS = ("json", "csv", "md")
CSV_HEADER = ["Name", "Type", "Value", "Platform", "ObservedAt"]


def _platform(record: FlagRecord) -> str:
    return record.platform or "All"


def to_json(records: Sequence[FlagRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], indent=2)


def to_csv(records: Sequence[FlagRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in records:
        writer.writerow([r.name, r.value_type.value, r.value, _platform(r), to_iso8601(r.observed_at)])
    return buffer.getvalue()


def to_markdown(records: Sequence[FlagRecord]) -> str:
    lines = [
        "# Flag Export",
        "",
        "| Name | Type | Value | Platform | Observed |",
        "|------|------|-------|----------|----------|",
    ]
    for r in records:
        value = str(r.value).replace("|", "\\|")
        lines.append(
            f"| {r.name} | {r.value_type.value} | {value} | {_platform(r)} | {to_iso8601(r.observed_at)} |"
        )
    return "\n".join(lines) + "\n"


_RENDERERS = {"json": to_json, "csv": to_csv, "md": to_markdown}


def export_records(records: Sequence[FlagRecord], fmt: str) -> str:
    """Render ``records`` in ``fmt`` (json, csv or md)."""
    renderer = _RENDERERS.get(fmt.lower())
    if renderer is None:
        raise ValidationError(
            f"Unsupported export format {fmt!r} (expected one of: {', '.join(EXPORT_FORMATS)})",
            field="format",
            value=fmt,
        )
    return renderer(records)
