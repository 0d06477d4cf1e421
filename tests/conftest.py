"""Shared pytest fixtures and test helpers for subrules tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import structlog
from click.testing import CliRunner

from subrules.domain.versions import RuleVersion
from subrules.infrastructure.versions import StaticVersionSource
from subrules.services.builder import RuleBuilder

HANDLER = "Pat.Domain.SubDomain.Handler"
SUBSCRIBER = "SubscriberName"


@pytest.fixture(autouse=True)
def _clear_log_context() -> Generator[None]:
    """Drop subscriber/handler bindings left behind by service calls."""
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def isolated_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from an empty directory with no config discovery or env leaks."""
    monkeypatch.chdir(tmp_path)
    for var in ("SUBRULES_CONFIG", "SUBRULES_SUBSCRIBER__NAME", "SUBRULES_VERSION__VALUE"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def applier() -> AsyncMock:
    """A RuleApplier double recording every awaited call."""
    return AsyncMock()


@pytest.fixture
def builder(applier: AsyncMock) -> RuleBuilder:
    """RuleBuilder at version 1.0.0 for ``SubscriberName``."""
    return make_builder(applier, RuleVersion(1, 0, 0))


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def make_builder(applier: AsyncMock, version: RuleVersion) -> RuleBuilder:
    return RuleBuilder(applier, StaticVersionSource(version), SUBSCRIBER)


def spanning_message_types(count: int = 40) -> list[str]:
    """Enough moderately long message types to need three rules."""
    return [f"TestNamespace.TestRuleName.TestEvent{i}" for i in range(count)]


def added_names(applier: AsyncMock) -> list[str]:
    return [call.args[0].name for call in applier.add_rule.await_args_list]


def removed_names(applier: AsyncMock) -> list[str]:
    return [call.args[0].name for call in applier.remove_rule.await_args_list]
