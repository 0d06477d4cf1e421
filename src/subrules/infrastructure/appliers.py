"""In-memory RuleApplier — a simulated subscription.

Behaves like the broker's rule endpoint: adding an existing name and
removing a missing one both fail. Used for offline reconciliation against a
snapshot file and as a test double with real state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from subrules.domain.errors import RuleAlreadyExistsError, RuleNotFoundError
from subrules.domain.rules import DeployedRule, RuleDefinition

logger = logging.getLogger(__name__)


class InMemoryRuleApplier:
    """Holds deployed rules keyed by name, in insertion order."""

    def __init__(self, rules: Iterable[DeployedRule] = ()) -> None:
        self._rules: dict[str, DeployedRule] = {rule.name: rule for rule in rules}
        self.added: list[str] = []
        self.removed: list[str] = []

    @property
    def rules(self) -> list[DeployedRule]:
        """Current deployed rules."""
        return list(self._rules.values())

    async def add_rule(self, rule: RuleDefinition) -> None:
        if rule.name in self._rules:
            msg = f"Rule {rule.name!r} already exists"
            raise RuleAlreadyExistsError(msg)
        self._rules[rule.name] = rule
        self.added.append(rule.name)
        logger.debug("Rule %s added", rule.name)

    async def remove_rule(self, rule: DeployedRule) -> None:
        if self._rules.pop(rule.name, None) is None:
            msg = f"Rule {rule.name!r} does not exist"
            raise RuleNotFoundError(msg)
        self.removed.append(rule.name)
        logger.debug("Rule %s removed", rule.name)
