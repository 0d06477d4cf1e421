"""Capability interfaces and typed payload contracts.

The two protocols are the only seams to the outside world: the running
build's version, and the broker that adds and removes rules. Keeping the
core behind them means generation and reconciliation never see a broker
client type.

The payload models validate operation payload shapes before they leave
the service layer so key regressions fail fast in tests.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict

from subrules.domain.rules import DeployedRule, RuleDefinition
from subrules.domain.versions import RuleVersion

T = TypeVar("T", bound=BaseModel)


@runtime_checkable
class RuleVersionSource(Protocol):
    """Supplies the current application version. No side effects."""

    def get_version(self) -> RuleVersion: ...


@runtime_checkable
class RuleApplier(Protocol):
    """Adds and removes single rules on the broker.

    Each call may suspend and may fail; failures propagate to the
    reconciliation caller and are never retried by the core.
    """

    async def add_rule(self, rule: RuleDefinition) -> None: ...

    async def remove_rule(self, rule: DeployedRule) -> None: ...


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class RuleItem(BaseModel):
    """One rule row."""

    model_config = ConfigDict(extra="allow")

    name: str
    filter_expression: str
    length: int


class GenerateResultData(BaseModel):
    """Payload contract for ``RuleService.generate``."""

    handler: str
    version: str
    count: int
    items: list[RuleItem]


class ReconcileResultData(BaseModel):
    """Payload contract for ``RuleService.reconcile``."""

    handler: str
    version: str
    skipped: bool
    reason: str | None = None
    added: list[str]
    removed: list[str]
    unchanged: list[str]
    deployed: list[RuleItem]
    written: str | None = None


class DecodedName(BaseModel):
    """One decoded rule name."""

    name: str
    format: str
    index: int | None = None
    version: str | None = None


class InspectResultData(BaseModel):
    """Payload contract for ``RuleService.inspect_names``."""

    count: int
    items: list[DecodedName]
