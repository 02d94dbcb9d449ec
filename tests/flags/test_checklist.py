"""Tests for flagwatch.flags.checklist — flag list parsing and classification."""

import json

import pytest

from flagwatch.core.errors import ValidationError
from flagwatch.flags.checklist import (
    CheckStatus,
    FlagCheck,
    export_checks,
    parse_flag_list,
    summarize,
)
from flagwatch.flags.descriptions import NO_DESCRIPTION


class TestParseFlagList:
    def test_json_collects_nested_flag_keys(self):
        content = json.dumps(
            {
                "FFlagA": True,
                "settings": {"DFlagB": 1, "notAFlag": 2},
                "list": [{"FFlagC": "x"}, {"FFlagA": False}],
            }
        )
        assert parse_flag_list(content, "json") == ["FFlagA", "DFlagB", "FFlagC"]

    def test_invalid_json_is_empty(self):
        assert parse_flag_list("{oops", "json") == []

    def test_txt_one_per_line(self):
        content = "FFlagA\n  DFlagB  \n\nFIntNotMatched\nFFlag with spaces\nFFlagA\n"
        assert parse_flag_list(content, "TXT") == ["FFlagA", "DFlagB"]

    def test_unknown_format(self):
        with pytest.raises(ValidationError):
            parse_flag_list("", "yaml")


class TestCheckFlags:
    @pytest.mark.asyncio
    async def test_classification(self, service, tracker):
        tracker.metadata["FFlagRetired"] = {
            "Type": "Bool",
            "Value": True,
            "Replacement": "FFlagRetiredV2",
        }
        tracker.metadata["FFlagStale"] = {
            "Type": "Bool",
            "Value": False,
            "Description": "Legacy toggle",
            "Outdated": True,
        }

        checks = await service.check(["FFlagShared", "FFlagRetired", "FFlagStale", "FFlagGhost"])

        assert [(c.name, c.status) for c in checks] == [
            ("FFlagShared", CheckStatus.VALID),
            ("FFlagRetired", CheckStatus.REPLACED),
            ("FFlagStale", CheckStatus.OUTDATED),
            ("FFlagGhost", CheckStatus.INVALID),
        ]
        assert checks[1].replacement == "FFlagRetiredV2"
        assert checks[2].description == "Legacy toggle"

    @pytest.mark.asyncio
    async def test_known_flag_description_fallback(self, service, tracker):
        tracker.documents["PCDesktopClient"]["FFlagDebugMode"] = True
        checks = await service.check(["FFlagDebugMode", "FFlagShared"])
        assert checks[0].description == "Enables debug mode features"
        assert checks[1].description == NO_DESCRIPTION


class TestSummaries:
    def test_summarize_counts_every_status(self):
        checks = [
            FlagCheck("FFlagA", CheckStatus.VALID),
            FlagCheck("FFlagB", CheckStatus.VALID),
            FlagCheck("FFlagC", CheckStatus.INVALID),
        ]
        assert summarize(checks) == {
            "valid": 2,
            "outdated": 0,
            "invalid": 1,
            "replaced": 0,
            "total": 3,
        }

    def test_export_checks(self):
        exported = export_checks([FlagCheck("FFlagA", CheckStatus.REPLACED, "FFlagB")])
        assert "timestamp" in exported
        assert exported["results"] == [
            {"name": "FFlagA", "status": "replaced", "replacement": "FFlagB"}
        ]
