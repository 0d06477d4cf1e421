"""Reconciler — converge deployed rules onto the desired rule set.

Pipeline: DECODE → GUARD → VALIDATE → DIFF → APPLY

- GUARD: any deployed rule newer than the current version means a newer
  rollout owns the subscription; the whole call becomes a no-op.
- VALIDATE: deployed current-format rules at the current version must be
  exactly the desired rules of the same name. A changed message-type set
  under an unchanged version is an invalid state and fails before the
  applier is touched.
- DIFF: stale and legacy-named rules are removed; desired rules whose exact
  name is not deployed are added.
- APPLY: additions, then removals, one awaited call each. Nothing is
  transactional, so re-running after a partial failure converges.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field

from subrules.domain.errors import InvalidReconciliationStateError
from subrules.domain.filters import parse_message_types
from subrules.domain.names import (
    DefaultRuleName,
    LegacyRuleName,
    ParsedRuleName,
    VersionedRuleName,
    decode_rule_name,
)
from subrules.domain.rules import DeployedRule, RuleDefinition
from subrules.domain.versions import RuleVersion
from subrules.services.contracts import RuleApplier

logger = logging.getLogger(__name__)


class ReconciliationPlan(BaseModel):
    """The add/remove delta computed for one reconciliation call."""

    model_config = {"frozen": True}

    current_version: str
    to_add: list[RuleDefinition] = Field(default_factory=list)
    to_remove: list[DeployedRule] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)
    skipped: bool = False
    reason: str | None = None

    @property
    def is_noop(self) -> bool:
        return not self.to_add and not self.to_remove


def _newer_rules(
    decoded: list[tuple[DeployedRule, ParsedRuleName]], current: RuleVersion
) -> list[str]:
    """Names of deployed rules stamped with a version above *current*."""
    newer: list[str] = []
    for rule, parsed in decoded:
        if isinstance(parsed, DefaultRuleName) or parsed.version is None:
            continue
        if parsed.version > current:
            newer.append(rule.name)
    return newer


def _is_stale(parsed: ParsedRuleName, current: RuleVersion) -> bool:
    if isinstance(parsed, VersionedRuleName):
        return parsed.version < current
    # Legacy-named and default rules are always superseded by the current format.
    return isinstance(parsed, LegacyRuleName | DefaultRuleName)


def _check_same_version(
    decoded: list[tuple[DeployedRule, ParsedRuleName]],
    desired: Sequence[RuleDefinition],
    message_types: set[str],
    current: RuleVersion,
) -> None:
    desired_by_name = {rule.name: rule for rule in desired}
    divergent: list[str] = []
    unknown_types: set[str] = set()
    for rule, parsed in decoded:
        if not isinstance(parsed, VersionedRuleName) or parsed.version != current:
            continue
        counterpart = desired_by_name.get(rule.name)
        if counterpart is None or counterpart.filter_expression != rule.filter_expression:
            divergent.append(rule.name)
        unknown_types.update(set(parse_message_types(rule.filter_expression)) - message_types)

    if divergent or unknown_types:
        msg = (
            f"Deployed rules at version {current} do not match the requested "
            "message types; bump the version to change the subscription"
        )
        raise InvalidReconciliationStateError(msg, rule_names=sorted(divergent))


class Reconciler:
    """Computes and executes the minimal rule delta through a RuleApplier."""

    def __init__(self, applier: RuleApplier) -> None:
        self._applier = applier

    def plan(
        self,
        desired: Sequence[RuleDefinition],
        deployed: Sequence[DeployedRule],
        message_types: Iterable[str],
        current_version: RuleVersion,
    ) -> ReconciliationPlan:
        """Decide what to add and remove. Pure: never touches the applier.

        Raises:
            RuleNameDecodeError: A deployed rule name is malformed.
            InvalidReconciliationStateError: Same version, different message types.
        """
        decoded = [(rule, decode_rule_name(rule.name)) for rule in deployed]

        newer = _newer_rules(decoded, current_version)
        if newer:
            reason = (
                f"Deployed rule(s) {', '.join(newer)} are newer than {current_version}; "
                "leaving the subscription untouched"
            )
            logger.warning(reason)
            return ReconciliationPlan(
                current_version=str(current_version), skipped=True, reason=reason
            )

        _check_same_version(decoded, desired, set(message_types), current_version)

        deployed_names = {rule.name for rule in deployed}
        to_remove = [rule for rule, parsed in decoded if _is_stale(parsed, current_version)]
        to_add = [rule for rule in desired if rule.name not in deployed_names]
        unchanged = [rule.name for rule in desired if rule.name in deployed_names]

        return ReconciliationPlan(
            current_version=str(current_version),
            to_add=to_add,
            to_remove=to_remove,
            unchanged=unchanged,
        )

    async def execute(self, plan: ReconciliationPlan) -> None:
        """Issue every add, then every remove, in plan order."""
        for rule in plan.to_add:
            logger.info("Adding rule %s", rule.name)
            await self._applier.add_rule(rule)
        for rule in plan.to_remove:
            logger.info("Removing rule %s", rule.name)
            await self._applier.remove_rule(rule)

    async def reconcile(
        self,
        desired: Sequence[RuleDefinition],
        deployed: Sequence[DeployedRule],
        message_types: Iterable[str],
        current_version: RuleVersion,
    ) -> ReconciliationPlan:
        """Plan, then apply. Returns the plan that was executed."""
        plan = self.plan(desired, deployed, message_types, current_version)
        if not plan.skipped:
            await self.execute(plan)
        return plan
