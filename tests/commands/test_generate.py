"""Tests for the generate CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from subrules.cli import cli

BASE = ["--subscriber", "Orders", "--version-override", "1.0.0"]
HANDLER = "Sales.Orders.Handler"


@pytest.mark.usefixtures("isolated_dir")
class TestGenerateCommand:
    def test_generate_table(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, [*BASE, "generate", HANDLER, "Sales.OrderPlaced"])
        assert result.exit_code == 0
        assert "OK" in result.stdout
        assert "1_v_1_0_0" in result.stdout

    def test_generate_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", *BASE, "generate", HANDLER, "Sales.OrderPlaced", "Sales.OrderCancelled"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["op"] == "generate"
        assert data["data"]["handler"] == HANDLER
        filter_expression = data["data"]["items"][0]["filter_expression"]
        assert filter_expression.startswith(
            "(MessageType='Sales.OrderPlaced' OR MessageType='Sales.OrderCancelled')"
        )
        assert "SpecificSubscriber = 'Orders'" in filter_expression

    def test_generate_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", *BASE, "generate", HANDLER, "A"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "1_v_1_0_0"

    def test_omit_specific_subscriber(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", *BASE, "generate", "--omit-specific-subscriber", HANDLER, "A"]
        )
        data = json.loads(result.stdout)
        assert "SpecificSubscriber" not in data["data"]["items"][0]["filter_expression"]

    def test_subscriber_from_config(self, cli_runner: CliRunner, isolated_dir: Path) -> None:
        (isolated_dir / "subrules.toml").write_text(
            '[subscriber]\nname = "FromToml"\n[version]\nvalue = "0.2.0"\n'
        )
        result = cli_runner.invoke(cli, ["--json", "generate", HANDLER, "A"])
        data = json.loads(result.stdout)
        assert data["data"]["items"][0]["name"] == "1_v_0_2_0"
        assert "'FromToml'" in data["data"]["items"][0]["filter_expression"]

    def test_requires_message_types(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, [*BASE, "generate", HANDLER])
        assert result.exit_code == 2

    def test_oversized_type_exits_one(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", *BASE, "generate", HANDLER, "X" * 1100])
        assert result.exit_code == 1
        assert result.stdout == ""
        assert json.loads(result.stderr)["error"]["code"] == "GENERATION_FAILED"
