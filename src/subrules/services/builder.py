"""RuleBuilder — one object wiring generation, reconciliation, and the codec.

This is the surface a subscriber host uses at startup::

    builder = RuleBuilder(applier, version_source, "OrdersSubscriber")
    rules = builder.generate_subscription_rules(message_types, handler_identity)
    await builder.apply_rule_changes(rules, deployed_rules, message_types)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from subrules.domain.filters import MAX_FILTER_LENGTH
from subrules.domain.names import decode_rule_name
from subrules.domain.rules import DeployedRule, RuleDefinition
from subrules.domain.versions import RuleVersion
from subrules.services.contracts import RuleApplier, RuleVersionSource
from subrules.services.generator import RuleGenerator
from subrules.services.reconciler import ReconciliationPlan, Reconciler


class RuleBuilder:
    """Generates a subscriber's rules and converges the broker onto them."""

    def __init__(
        self,
        applier: RuleApplier,
        version_source: RuleVersionSource,
        subscriber_name: str,
        *,
        max_filter_length: int = MAX_FILTER_LENGTH,
    ) -> None:
        self._version_source = version_source
        self._generator = RuleGenerator(
            subscriber_name, version_source, max_filter_length=max_filter_length
        )
        self._reconciler = Reconciler(applier)

    def generate_subscription_rules(
        self,
        message_types: Iterable[str],
        handler_identity: str,
        omit_specific_subscriber_filter: bool = False,
    ) -> list[RuleDefinition]:
        return self._generator.generate(
            message_types,
            handler_identity,
            omit_specific_subscriber_filter=omit_specific_subscriber_filter,
        )

    def current_version(self, new_rules: Sequence[RuleDefinition]) -> RuleVersion:
        """The version the desired rules were built at.

        Falls back to the version source when there are no desired rules.
        """
        if new_rules:
            version = self.get_rule_version(new_rules[0])
            if version is not None:
                return version
        return self._version_source.get_version()

    async def apply_rule_changes(
        self,
        new_rules: Sequence[RuleDefinition],
        existing_rules: Sequence[DeployedRule],
        message_types: Iterable[str],
    ) -> ReconciliationPlan:
        """Add and remove rules until *existing_rules* matches *new_rules*.

        Raises:
            InvalidReconciliationStateError: The version is unchanged but the
                message types are not. No rule is added or removed.
        """
        return await self._reconciler.reconcile(
            new_rules, existing_rules, message_types, self.current_version(new_rules)
        )

    @staticmethod
    def get_rule_version(rule: RuleDefinition) -> RuleVersion | None:
        """Decoded version of *rule*; ``$Default`` yields ``RuleVersion(1, 0)``."""
        return decode_rule_name(rule.name).version
