"""
Convert flag assignments between the formats people paste around.

Input is either a JSON object (``{"FFlagX": true}``) or comma-separated
``key=value`` pairs (``FFlagX=true, DFIntY=30``). Output formats:

    json            ``{"FFlagX": true}``
    ini             ``FFlagX=true`` one per line
    clientsettings  ``{"FFlagX": {"Value": true, "Type": "boolean"}}``
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from flagwatch.core.errors import ValidationError
from flagwatch.core.logging import get_logger

logger = get_logger(__name__)

CONVERT_FORMATS = ("json", "ini", "clientsettings")

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")


def coerce_value(text: str) -> str | bool | int | float:
    """Typed value for the right-hand side of ``key=value``."""
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return text


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bool, int, float))


def parse_flag_input(text: str) -> dict[str, str | bool | int | float]:
    """Parse a JSON object or ``key=value`` pairs into an ordered mapping.

    JSON input keeps only scalar values; nested objects, arrays and null
    are dropped. In pair input a later duplicate key overwrites an earlier
    one, and a pair without ``=`` or with an empty key is ignored.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None
    if isinstance(data, dict):
        return {str(k): v for k, v in data.items() if _is_scalar(v)}

    flags: dict[str, str | bool | int | float] = {}
    for pair in text.split(","):
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        flags[key] = coerce_value(value.strip())
    logger.debug("flag_input_parsed", pairs=len(flags))
    return flags


def _ini_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "string"


def convert_flags(flags: Mapping[str, Any], fmt: str) -> str:
    """Render ``flags`` as json, ini or clientsettings.

    Raises:
        ValidationError: ``fmt`` is not one of ``CONVERT_FORMATS``.
    """
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(dict(flags), indent=2)
    if fmt == "ini":
        return "\n".join(f"{name}={_ini_value(value)}" for name, value in flags.items())
    if fmt == "clientsettings":
        settings = {
            name: {"Value": value, "Type": _type_name(value)} for name, value in flags.items()
        }
        return json.dumps(settings, indent=2)
    raise ValidationError(
        f"Unsupported conversion format {fmt!r} (expected one of: {', '.join(CONVERT_FORMATS)})",
        field="format",
        value=fmt,
    )


__all__ = ["CONVERT_FORMATS", "coerce_value", "convert_flags", "parse_flag_input"]
