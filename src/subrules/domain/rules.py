"""Rule definitions exchanged between the generator, reconciler, and applier."""

from __future__ import annotations

from pydantic import BaseModel


class RuleDefinition(BaseModel):
    """A named SQL filter rule for one subscription.

    Immutable once created. Reconciliation replaces rules, never edits them.
    """

    model_config = {"frozen": True}

    name: str
    filter_expression: str


# A rule as currently known to exist on the broker. Same shape, sourced externally.
DeployedRule = RuleDefinition
