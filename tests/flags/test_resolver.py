"""
Tests for flagwatch.flags.resolver — resolve, lookup, resolve_for_platform, compare.

Documents come from the ``documents`` fixture in conftest:

    PCDesktopClient   FFlagShared=true, DFIntFrameRateCap=60, FFlagGraphicsQuality=false
    MacDesktopClient  FFlagShared=false, FStringRegion="us-east"
    AndroidApp        FFlagShared=true, FFlagMobileOnly=true, DFIntFrameRateCap=30
    iOSApp            FFlagGraphicsMobile=true, FFlagNullValue=null
    XboxClient        DFIntFrameRateCap=30
    PCStudioApp       FFlagStudioOnly="enabled", FFlagGraphicsStudio=true
"""

import json

import pytest

from flagwatch.core.errors import InvalidPlatformError
from flagwatch.core.logging import configure_logging
from flagwatch.flags.models import ResolutionStatus, ValueType
from flagwatch.sources.catalog import PLATFORMS


class TestResolvePlatformScan:
    """First match in catalog order wins."""

    @pytest.mark.parametrize(
        "name,platform,value_type,value",
        [
            ("FFlagMobileOnly", "AndroidApp", ValueType.BOOL, True),
            ("FStringRegion", "MacDesktopClient", ValueType.STRING, "us-east"),
            ("FFlagGraphicsMobile", "iOSApp", ValueType.BOOL, True),
            ("FFlagStudioOnly", "PCStudioApp", ValueType.STRING, "enabled"),
        ],
    )
    @pytest.mark.asyncio
    async def test_single_platform_flag(self, service, name, platform, value_type, value):
        """A flag in exactly one document resolves to that platform with a matching type."""
        record = await service.resolve(name)
        assert record is not None
        assert record.platform == platform
        assert record.value_type is value_type
        assert record.value == value

    @pytest.mark.asyncio
    async def test_bool_flag_on_desktop(self, service, tracker):
        tracker.documents["PCDesktopClient"]["FFlagFoo"] = True
        record = await service.resolve("FFlagFoo")
        assert (record.name, record.value_type, record.value, record.platform) == (
            "FFlagFoo",
            ValueType.BOOL,
            True,
            "PCDesktopClient",
        )

    @pytest.mark.asyncio
    async def test_number_flag(self, service):
        record = await service.resolve("DFIntFrameRateCap")
        assert record.value_type is ValueType.NUMBER
        assert record.value == 60

    @pytest.mark.asyncio
    async def test_catalog_order_breaks_ties_deterministically(self, service):
        """FFlagShared is true on PC, false on Mac; PC always wins."""
        for _ in range(3):
            record = await service.resolve("FFlagShared")
            assert record.platform == "PCDesktopClient"
            assert record.value is True

    @pytest.mark.asyncio
    async def test_sequential_scan_stops_at_first_match(self, service, tracker):
        await service.resolve("FFlagShared")
        assert tracker.requests == ["PCDesktopClient.json"]

    @pytest.mark.asyncio
    async def test_parallel_scan_keeps_catalog_order(self, make_service, tracker):
        service = make_service(parallel_scan=True)
        record = await service.resolve("FFlagShared")
        assert record.platform == "PCDesktopClient"
        assert sorted(tracker.requests) == sorted(f"{p}.json" for p in PLATFORMS)

    @pytest.mark.asyncio
    async def test_non_scalar_values_are_skipped(self, service):
        assert await service.resolve("FFlagNestedConfig") is None
        assert await service.resolve("FFlagNullValue") is None

    @pytest.mark.asyncio
    async def test_empty_name_does_no_io(self, service, tracker):
        assert await service.resolve("") is None
        assert tracker.requests == []


class TestResolveCaching:
    """Resolution reads documents through the shared cache."""

    @pytest.mark.asyncio
    async def test_repeat_resolve_hits_cache(self, service, tracker):
        first = await service.resolve("FFlagShared")
        second = await service.resolve("FFlagShared")
        assert tracker.count("PCDesktopClient.json") == 1
        assert (first.name, first.value, first.platform) == (
            second.name,
            second.value,
            second.platform,
        )

    @pytest.mark.asyncio
    async def test_expired_document_refetched(self, service, tracker, clock):
        await service.resolve("FFlagShared")
        clock.advance(300)
        await service.resolve("FFlagShared")
        assert tracker.count("PCDesktopClient.json") == 2

    @pytest.mark.asyncio
    async def test_updated_document_visible_after_ttl(self, service, tracker, clock):
        await service.resolve("FFlagShared")
        tracker.documents["PCDesktopClient"]["FFlagShared"] = False

        clock.advance(120)
        assert (await service.resolve("FFlagShared")).value is True
        clock.advance(180)
        assert (await service.resolve("FFlagShared")).value is False


class TestMetadataFallback:
    """Flags missing from every platform document."""

    @pytest.mark.asyncio
    async def test_metadata_document_builds_record(self, service, tracker):
        tracker.metadata["FFlagRetired"] = {
            "Type": "Bool",
            "Value": False,
            "Description": "Old rendering path",
            "Replacement": "FFlagRenderV2",
            "Outdated": True,
        }
        record = await service.resolve("FFlagRetired")
        assert record.value is False
        assert record.description == "Old rendering path"
        assert record.replacement == "FFlagRenderV2"
        assert record.outdated is True
        assert record.type_tag == "Bool"
        assert "FVariables/FFlag/F/FFlagRetired.json" in tracker.requests

    @pytest.mark.asyncio
    async def test_platforms_type_uses_first_defined_platform(self, service, tracker):
        tracker.metadata["DFIntSplit"] = {
            "Type": "Platforms",
            "Value": {"PCDesktopClient": None, "AndroidApp": 42, "iOSApp": 7},
        }
        record = await service.resolve("DFIntSplit")
        assert record.platform == "AndroidApp"
        assert record.value == 42
        assert record.type_tag == "Platforms"
        assert record.description == "Metadata available"

    @pytest.mark.asyncio
    async def test_absent_everywhere_is_not_found(self, service, tracker):
        assert await service.resolve("FFlagDoesNotExist") is None
        assert len(tracker.requests) == len(PLATFORMS) + 1

    @pytest.mark.asyncio
    async def test_malformed_metadata_is_not_found(self, service, tracker):
        tracker.raw["FVariables/FFlag/F/FFlagBroken.json"] = b"<html>"
        assert await service.resolve("FFlagBroken") is None
        resolution = await service.lookup("FFlagBroken")
        assert resolution.status is ResolutionStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_metadata_without_type_is_not_found(self, service, tracker):
        tracker.metadata["FFlagPartial"] = {"Value": True}
        assert await service.resolve("FFlagPartial") is None

    @pytest.mark.asyncio
    async def test_name_with_control_character_is_not_found(self, service, tracker):
        assert await service.resolve("FFlagBad\nName") is None
        resolution = await service.lookup("FFlagBad\nName")
        assert resolution.status is ResolutionStatus.NOT_FOUND
        assert "FVariables/FFlag/F/FFlagBad\nName.json" in tracker.requests

    @pytest.mark.asyncio
    async def test_name_too_long_for_a_url_is_not_found(self, service):
        name = "FFlag" + "x" * 70000
        assert await service.resolve(name) is None
        resolution = await service.lookup(name)
        assert resolution.status is ResolutionStatus.NOT_FOUND
        assert resolution.failed_sources == []

    @pytest.mark.asyncio
    async def test_reserved_characters_stay_in_the_file_name(self, service, tracker):
        """A "?" in the name must not turn the rest into a query string."""
        tracker.metadata["FFlagOdd?x=1"] = {"Type": "Int", "Value": 3}
        record = await service.resolve("FFlagOdd?x=1")
        assert record.value == 3
        assert "FVariables/FFlag/F/FFlagOdd?x=1.json" in tracker.requests


class TestUnavailableSources:
    """resolve folds failures into None; lookup reports them."""

    @pytest.mark.asyncio
    async def test_failed_platform_is_skipped(self, service, tracker):
        tracker.fail("PCDesktopClient")
        record = await service.resolve("FFlagShared")
        assert record.platform == "MacDesktopClient"
        assert record.value is False

    @pytest.mark.asyncio
    async def test_unreachable_only_source_reads_as_none(self, service, tracker):
        tracker.fail("PCDesktopClient")
        assert await service.resolve("FFlagGraphicsQuality") is None

    @pytest.mark.asyncio
    async def test_lookup_reports_unavailable(self, service, tracker):
        tracker.fail("PCDesktopClient")
        resolution = await service.lookup("FFlagGraphicsQuality")
        assert resolution.status is ResolutionStatus.SOURCE_UNAVAILABLE
        assert resolution.failed_sources == ["PCDesktopClient"]
        assert resolution.record is None

    @pytest.mark.asyncio
    async def test_lookup_found_despite_failure(self, service, tracker):
        tracker.fail("PCDesktopClient")
        resolution = await service.lookup("FFlagShared")
        assert resolution.found
        assert resolution.failed_sources == ["PCDesktopClient"]

    @pytest.mark.asyncio
    async def test_lookup_not_found(self, service):
        resolution = await service.lookup("FFlagDoesNotExist")
        assert resolution.status is ResolutionStatus.NOT_FOUND
        assert resolution.failed_sources == []

    @pytest.mark.asyncio
    async def test_metadata_outage_is_unavailable(self, service, tracker):
        tracker.statuses["FVariables/FFlag/F/FFlagMissing.json"] = 502
        assert await service.resolve("FFlagMissing") is None
        resolution = await service.lookup("FFlagMissing")
        assert resolution.status is ResolutionStatus.SOURCE_UNAVAILABLE
        assert resolution.failed_sources == [
            "https://tracker.test/FVariables/FFlag/F/FFlagMissing.json"
        ]

    @pytest.mark.asyncio
    async def test_failure_log_classifies_error(self, service, tracker, capsys):
        configure_logging(level="WARNING", json_format=True)
        tracker.fail("PCDesktopClient", retry_after=30)
        await service.resolve("FFlagShared")

        err = capsys.readouterr().err
        events = [json.loads(line) for line in err.splitlines() if line.startswith("{")]
        failed = next(e for e in events if e["event"] == "source_fetch_failed")
        assert failed["platform"] == "PCDesktopClient"
        assert failed["error_type"] == "SourceUnavailableError"
        assert failed["category"] == "NETWORK"
        assert failed["retryable"] is True
        assert failed["retry_after"] == 30

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, service, tracker):
        tracker.fail("PCDesktopClient")
        await service.resolve("FFlagShared")
        del tracker.statuses["PCDesktopClient.json"]
        record = await service.resolve("FFlagShared")
        assert record.platform == "PCDesktopClient"


class TestResolveForPlatform:
    @pytest.mark.asyncio
    async def test_present_on_platform(self, service):
        record = await service.resolve_for_platform("FFlagShared", "MacDesktopClient")
        assert record.value is False
        assert record.platform == "MacDesktopClient"

    @pytest.mark.asyncio
    async def test_absent_on_platform_even_if_resolvable(self, service, tracker):
        """FFlagMobileOnly lives on AndroidApp; asking iOSApp finds nothing."""
        assert await service.resolve_for_platform("FFlagMobileOnly", "iOSApp") is None
        assert tracker.requests == ["iOSApp.json"]
        assert (await service.resolve("FFlagMobileOnly")).platform == "AndroidApp"

    @pytest.mark.asyncio
    async def test_no_metadata_fallback(self, service, tracker):
        tracker.metadata["FFlagMetaOnly"] = {"Type": "Bool", "Value": True}
        assert await service.resolve_for_platform("FFlagMetaOnly", "AndroidApp") is None
        assert not any(path.startswith("FVariables") for path in tracker.requests)

    @pytest.mark.asyncio
    async def test_unknown_platform_raises(self, service, tracker):
        with pytest.raises(InvalidPlatformError):
            await service.resolve_for_platform("FFlagShared", "Wii")
        assert tracker.requests == []

    @pytest.mark.asyncio
    async def test_platform_failure_is_none(self, service, tracker):
        tracker.fail("XboxClient", 500)
        assert await service.resolve_for_platform("DFIntFrameRateCap", "XboxClient") is None


class TestCompare:
    @pytest.mark.asyncio
    async def test_compare_across_catalog(self, service):
        comparison = await service.compare("DFIntFrameRateCap")
        assert [e.platform for e in comparison.entries] == list(PLATFORMS)
        assert {e.platform: e.record.value for e in comparison.found} == {
            "PCDesktopClient": 60,
            "AndroidApp": 30,
            "XboxClient": 30,
        }
        assert comparison.missing == ["MacDesktopClient", "iOSApp", "PCStudioApp"]
        assert not comparison.consistent
        assert comparison.numeric_spread == 30

    @pytest.mark.asyncio
    async def test_compare_selected_platforms_in_requested_order(self, service):
        comparison = await service.compare("FFlagShared", ["AndroidApp", "PCDesktopClient"])
        assert [e.platform for e in comparison.entries] == ["AndroidApp", "PCDesktopClient"]
        assert comparison.consistent
        assert comparison.has_enabled

    @pytest.mark.asyncio
    async def test_compare_validates_before_fetching(self, service, tracker):
        with pytest.raises(InvalidPlatformError):
            await service.compare("FFlagShared", ["AndroidApp", "Wii"])
        assert tracker.requests == []
