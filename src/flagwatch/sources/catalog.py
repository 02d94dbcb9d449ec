"""
Fixed catalog of platform documents.

The tracker publishes one JSON document per deployment target plus one
metadata document per flag. ``SourceCatalog`` knows the platform ids, their
fixed order, and how to build both kinds of URL from a base URL.

Catalog order matters: when a flag is defined on several platforms,
``resolve`` returns the first platform in this order.

Examples:
    >>> catalog = SourceCatalog("https://example.invalid/tracker")
    >>> catalog.descriptor("AndroidApp").document_url
    'https://example.invalid/tracker/AndroidApp.json'
    >>> catalog.metadata_url("fFlagLower")
    'https://example.invalid/tracker/FVariables/FFlag/F/fFlagLower.json'
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import quote

from flagwatch.core.errors import InvalidPlatformError, ValidationError

PLATFORMS: tuple[str, ...] = (
    "PCDesktopClient",
    "MacDesktopClient",
    "AndroidApp",
    "iOSApp",
    "XboxClient",
    "PCStudioApp",
)

STUDIO_MARKER = "Studio"
METADATA_ROOT = "FVariables/FFlag"
METADATA_SOURCE = "metadata"


def is_studio(platform_id: str) -> bool:
    """Studio-only documents are the ones whose id mentions Studio."""
    return STUDIO_MARKER in platform_id


@dataclass(frozen=True)
class SourceDescriptor:
    """One platform document."""

    platform_id: str
    document_url: str

    @property
    def studio_only(self) -> bool:
        return is_studio(self.platform_id)


class SourceCatalog:
    """Ordered platform descriptors and the metadata-path convention."""

    def __init__(self, base_url: str, platforms: Iterable[str] = PLATFORMS):
        self._base_url = base_url.rstrip("/")
        self._descriptors = tuple(
            SourceDescriptor(platform_id=p, document_url=f"{self._base_url}/{p}.json")
            for p in platforms
        )
        self._by_id = {d.platform_id: d for d in self._descriptors}

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def platform_ids(self) -> tuple[str, ...]:
        return tuple(d.platform_id for d in self._descriptors)

    def __iter__(self):
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, platform_id: object) -> bool:
        return platform_id in self._by_id

    def descriptor(self, platform_id: str) -> SourceDescriptor:
        """Look up one platform, raising on ids outside the catalog."""
        try:
            return self._by_id[platform_id]
        except KeyError:
            raise InvalidPlatformError(platform_id, self.platform_ids) from None

    def select(
        self,
        *,
        include_studio: bool = True,
        platforms: Iterable[str] | None = None,
    ) -> list[SourceDescriptor]:
        """Descriptors to scan, always in catalog order.

        Args:
            include_studio: Drop studio-only documents when False.
            platforms: Restrict to these ids (validated). ``None`` means all.
                A bare string is treated as a single id.
        """
        if isinstance(platforms, str):
            platforms = [platforms]
        if platforms is not None:
            wanted = set()
            for platform_id in platforms:
                wanted.add(self.descriptor(platform_id).platform_id)
            selected = [d for d in self._descriptors if d.platform_id in wanted]
        else:
            selected = list(self._descriptors)
        if not include_studio:
            selected = [d for d in selected if not d.studio_only]
        return selected

    def metadata_path(self, flag_name: str) -> str:
        """``FVariables/FFlag/{FirstLetterUppercased}/{flag_name}.json``.

        Both segments are percent-encoded, so ``?``, ``#``, ``/`` and control
        characters in a name stay inside the file name.
        """
        if not flag_name:
            raise ValidationError("Flag name must not be empty", field="flag_name", value=flag_name)
        first = quote(flag_name[0].upper(), safe="")
        file_name = quote(flag_name, safe="")
        return f"{METADATA_ROOT}/{first}/{file_name}.json"

    def metadata_url(self, flag_name: str) -> str:
        return f"{self._base_url}/{self.metadata_path(flag_name)}"


__all__ = [
    "PLATFORMS",
    "METADATA_SOURCE",
    "SourceCatalog",
    "SourceDescriptor",
    "is_studio",
]
