"""Tests for the format_result dispatcher and OutputSettings."""

import json

from subrules.output.formatters import OutputSettings, format_result
from subrules.services.result import ServiceError, ServiceResult


def _generated() -> ServiceResult:
    return ServiceResult(
        ok=True,
        op="generate",
        data={
            "handler": "Sales.Orders.Handler",
            "version": "1.0.0",
            "count": 2,
            "items": [
                {"name": "1_v_1_0_0", "filter_expression": "(MessageType='A')", "length": 17},
                {"name": "2_v_1_0_0", "filter_expression": "(MessageType='B')", "length": 17},
            ],
        },
    )


def _err() -> ServiceResult:
    return ServiceResult(
        ok=False,
        op="reconcile",
        error=ServiceError(code="INVALID_STATE", message="Bad", detail={"rules": ["1_v_1_0_0"]}),
    )


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResultJSON:
    def test_json_mode_returns_valid_json(self) -> None:
        output = format_result(_generated(), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["data"]["items"][1]["name"] == "2_v_1_0_0"

    def test_json_wins_over_quiet(self) -> None:
        output = format_result(_err(), settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(output)["error"]["code"] == "INVALID_STATE"


class TestFormatResultQuiet:
    def test_rule_names_only(self) -> None:
        output = format_result(_generated(), settings=OutputSettings(quiet=True))
        assert output == "1_v_1_0_0\n2_v_1_0_0"

    def test_error_single_line(self) -> None:
        output = format_result(_err(), settings=OutputSettings(quiet=True))
        assert output.startswith("ERROR: reconcile")
        assert "Bad" in output


class TestFormatResultRich:
    def test_default_is_rich_table(self) -> None:
        output = format_result(_generated())
        assert "OK" in output
        assert "1_v_1_0_0" in output
        assert "MessageType" not in output

    def test_verbose_shows_filters(self) -> None:
        output = format_result(_generated(), settings=OutputSettings(verbose=True))
        assert "(MessageType='A')" in output
