"""Tests for the Reconciler's planning and convergence properties."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import anyio
import pytest

from subrules.domain.errors import (
    InvalidReconciliationStateError,
    RuleAlreadyExistsError,
    RuleNameDecodeError,
)
from subrules.domain.rules import RuleDefinition
from subrules.domain.versions import RuleVersion
from subrules.infrastructure.appliers import InMemoryRuleApplier
from subrules.infrastructure.versions import StaticVersionSource
from subrules.services.generator import RuleGenerator
from subrules.services.reconciler import Reconciler
from tests.conftest import HANDLER, SUBSCRIBER, spanning_message_types

V1 = RuleVersion(1, 0, 0)
V0 = RuleVersion(0, 1, 0)


def _rules(version: RuleVersion, message_types: list[str]) -> list[RuleDefinition]:
    return RuleGenerator(SUBSCRIBER, StaticVersionSource(version)).generate(
        message_types, HANDLER
    )


class TestPlan:
    def test_plan_never_calls_applier(self) -> None:
        applier = AsyncMock()
        reconciler = Reconciler(applier)
        types = spanning_message_types()

        plan = reconciler.plan(_rules(V1, types), _rules(V0, types), types, V1)

        assert [r.name for r in plan.to_add] == ["1_v_1_0_0", "2_v_1_0_0", "3_v_1_0_0"]
        assert [r.name for r in plan.to_remove] == ["1_v_0_1_0", "2_v_0_1_0", "3_v_0_1_0"]
        assert applier.mock_calls == []

    def test_converged_plan_is_noop(self) -> None:
        types = spanning_message_types()
        desired = _rules(V1, types)

        plan = Reconciler(AsyncMock()).plan(desired, desired, types, V1)

        assert plan.is_noop
        assert plan.unchanged == [r.name for r in desired]
        assert plan.skipped is False

    def test_skipped_plan_records_reason(self, caplog: pytest.LogCaptureFixture) -> None:
        deployed = _rules(RuleVersion(2, 0, 0), ["A"])

        with caplog.at_level(logging.WARNING, logger="subrules"):
            plan = Reconciler(AsyncMock()).plan(_rules(V1, ["A"]), deployed, ["A"], V1)

        assert plan.skipped is True
        assert plan.is_noop
        assert "1_v_2_0_0" in (plan.reason or "")
        assert any("newer" in record.getMessage() for record in caplog.records)

    def test_newer_legacy_name_also_blocks(self) -> None:
        legacy = RuleDefinition(name="Orders.Subscriber_3_0_0", filter_expression="1=1")

        plan = Reconciler(AsyncMock()).plan(_rules(V1, ["A"]), [legacy], ["A"], V1)

        assert plan.skipped is True

    def test_extra_ordinal_at_same_version_is_invalid(self) -> None:
        types = spanning_message_types()
        deployed = _rules(V1, types)
        desired = deployed[:2]

        with pytest.raises(InvalidReconciliationStateError) as exc_info:
            Reconciler(AsyncMock()).plan(desired, deployed, types[:28], V1)
        assert "3_v_1_0_0" in exc_info.value.rule_names

    def test_marker_name_with_trailing_version_is_replaced(self) -> None:
        odd = RuleDefinition(name="1_v_beta_0_1_0", filter_expression="1=1")

        plan = Reconciler(AsyncMock()).plan(_rules(V1, ["A"]), [odd], ["A"], V1)

        assert [r.name for r in plan.to_add] == ["1_v_1_0_0"]
        assert plan.to_remove == [odd]

    def test_marker_name_with_newer_trailing_version_blocks(self) -> None:
        odd = RuleDefinition(name="4_v_2_0_0_0", filter_expression="1=1")

        plan = Reconciler(AsyncMock()).plan(_rules(V1, ["A"]), [odd], ["A"], V1)

        assert plan.skipped is True

    def test_malformed_deployed_name_propagates(self) -> None:
        broken = RuleDefinition(name="1_v_1_0", filter_expression="1=1")

        with pytest.raises(RuleNameDecodeError):
            Reconciler(AsyncMock()).plan(_rules(V1, ["A"]), [broken], ["A"], V1)


class TestConvergence:
    def test_reconcile_twice_equals_once(self) -> None:
        types = spanning_message_types()
        broker = InMemoryRuleApplier(_rules(V0, types[:20]))
        reconciler = Reconciler(broker)
        desired = _rules(V1, types)

        anyio.run(reconciler.reconcile, desired, broker.rules, types, V1)
        after_first = broker.rules
        second = anyio.run(reconciler.reconcile, desired, broker.rules, types, V1)

        assert second.is_noop
        assert broker.rules == after_first == desired

    def test_rerun_after_partial_failure_converges(self) -> None:
        types = spanning_message_types()
        desired = _rules(V1, types)
        stale = _rules(V0, types)
        broker = InMemoryRuleApplier(stale)
        failing = AsyncMock(wraps=broker)
        calls = 0

        async def flaky_add(rule: RuleDefinition) -> None:
            nonlocal calls
            calls += 1
            if calls == 2:
                raise ConnectionError("broker unavailable")
            await broker.add_rule(rule)

        failing.add_rule.side_effect = flaky_add

        with pytest.raises(ConnectionError):
            anyio.run(Reconciler(failing).reconcile, desired, broker.rules, types, V1)
        assert {r.name for r in broker.rules} == {
            "1_v_1_0_0",
            "1_v_0_1_0",
            "2_v_0_1_0",
            "3_v_0_1_0",
        }

        anyio.run(Reconciler(broker).reconcile, desired, broker.rules, types, V1)

        assert broker.rules == desired

    def test_applier_failure_propagates_unmodified(self) -> None:
        desired = _rules(V1, ["A"])
        broker = InMemoryRuleApplier(desired)

        plan = Reconciler(broker).plan(desired, [], ["A"], V1)

        with pytest.raises(RuleAlreadyExistsError):
            anyio.run(Reconciler(broker).execute, plan)
