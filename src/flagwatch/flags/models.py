"""
Flag data model.

``FlagRecord`` is the single value type handed back to callers. Records are
rebuilt from cached documents on every call and never stored, so two calls
backed by the same cached document differ only in ``observed_at``.

Only boolean, numeric and string values are representable. ``bool`` is
checked before numbers because ``True`` is an ``int`` in Python.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from flagwatch.core.errors import ParseError
from flagwatch.core.timestamps import to_iso8601, utc_now

Scalar = bool | int | float | str

PLATFORMS_TYPE_TAG = "Platforms"
METADATA_DEFAULT_DESCRIPTION = "Metadata available"


class ValueType(str, Enum):
    """Runtime type of a flag value."""

    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"


def value_type_of(value: Any) -> ValueType | None:
    """Classify a JSON value, or ``None`` when it is not representable."""
    if isinstance(value, bool):
        return ValueType.BOOL
    if isinstance(value, (int, float)):
        return ValueType.NUMBER
    if isinstance(value, str):
        return ValueType.STRING
    return None


@dataclass(frozen=True)
class FlagRecord:
    """One observation of a flag value in one document."""

    name: str
    value_type: ValueType
    value: Scalar
    platform: str | None = None
    description: str | None = None
    replacement: str | None = None
    outdated: bool | None = None
    type_tag: str | None = None
    observed_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        actual = value_type_of(self.value)
        if actual is not self.value_type:
            raise ValueError(
                f"value_type {self.value_type.value} does not match value {self.value!r}"
            )

    @classmethod
    def from_value(cls, name: str, value: Any, platform: str | None = None, **kwargs: Any) -> FlagRecord | None:
        """Build a record from a document entry; ``None`` for non-scalar values."""
        value_type = value_type_of(value)
        if value_type is None:
            return None
        return cls(name=name, value_type=value_type, value=value, platform=platform, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "value_type": self.value_type.value,
            "value": self.value,
            "platform": self.platform,
            "observed_at": to_iso8601(self.observed_at),
        }
        for key in ("description", "replacement", "outdated", "type_tag"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class MetadataDocument:
    """Per-flag metadata document (``FVariables/FFlag/X/<name>.json``)."""

    type: str
    value: Any
    description: str | None = None
    platform: str | None = None
    replacement: str | None = None
    outdated: bool | None = None

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> MetadataDocument:
        if "Type" not in payload or "Value" not in payload:
            raise ParseError("Metadata document lacks Type/Value")
        outdated = payload.get("Outdated")
        return cls(
            type=str(payload["Type"]),
            value=payload["Value"],
            description=_text(payload.get("Description")),
            platform=_text(payload.get("Platform")),
            replacement=_text(payload.get("Replacement")),
            outdated=outdated if isinstance(outdated, bool) else None,
        )

    @property
    def per_platform(self) -> bool:
        return self.type == PLATFORMS_TYPE_TAG and isinstance(self.value, dict)

    def first_platform(self) -> str | None:
        """First platform key with a defined value, in document order."""
        if not self.per_platform:
            return None
        for platform, value in self.value.items():
            if value is not None:
                return platform
        return None

    def to_record(self, flag_name: str) -> FlagRecord | None:
        """Convert to a FlagRecord, or ``None`` if no scalar value can be found."""
        platform = self.platform
        value = self.value
        if self.per_platform:
            platform = self.first_platform()
            if platform is None:
                return None
            value = self.value[platform]
        return FlagRecord.from_value(
            flag_name,
            value,
            platform=platform,
            description=self.description or METADATA_DEFAULT_DESCRIPTION,
            replacement=self.replacement,
            outdated=self.outdated,
            type_tag=self.type,
        )


class ResolutionStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    SOURCE_UNAVAILABLE = "source_unavailable"


@dataclass
class Resolution:
    """Outcome of a lookup that keeps "absent" apart from "could not read".

    ``failed_sources`` lists every platform id (or the metadata URL) whose
    fetch raised. A flag is ``NOT_FOUND`` only when that list is empty.
    """

    flag_name: str
    status: ResolutionStatus
    record: FlagRecord | None = None
    failed_sources: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status is ResolutionStatus.FOUND


@dataclass
class PlatformValue:
    platform: str
    record: FlagRecord | None


@dataclass
class FlagComparison:
    """A flag's value on several platforms, in requested order."""

    flag_name: str
    entries: list[PlatformValue]

    @property
    def found(self) -> list[PlatformValue]:
        return [e for e in self.entries if e.record is not None]

    @property
    def missing(self) -> list[str]:
        return [e.platform for e in self.entries if e.record is None]

    @property
    def consistent(self) -> bool:
        """All found values render to the same string."""
        values = {str(e.record.value) for e in self.found}
        return len(values) <= 1

    @property
    def has_enabled(self) -> bool:
        return any(str(e.record.value).lower() == "true" for e in self.found)

    @property
    def numeric_spread(self) -> float | None:
        numbers = [
            e.record.value for e in self.found if e.record.value_type is ValueType.NUMBER
        ]
        if not numbers:
            return None
        return max(numbers) - min(numbers)


__all__ = [
    "Scalar",
    "ValueType",
    "value_type_of",
    "FlagRecord",
    "MetadataDocument",
    "ResolutionStatus",
    "Resolution",
    "PlatformValue",
    "FlagComparison",
]
