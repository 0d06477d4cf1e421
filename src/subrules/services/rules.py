"""RuleService — ServiceResult adapters over RuleBuilder for the CLI.

Core exceptions become structured errors here:

- ``VERSION_UNAVAILABLE``: the configured version cannot be resolved.
- ``GENERATION_FAILED``: a message type does not fit under the length cap.
- ``DECODE_FAILED``: a rule name is malformed.
- ``INVALID_STATE``: same version, divergent message types.
- ``SNAPSHOT_INVALID``: the deployed-rule snapshot cannot be read.
- ``APPLY_FAILED``: the applier rejected an add or remove.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from importlib import metadata
from pathlib import Path
from typing import TYPE_CHECKING, Any

import anyio

from subrules.config.logging import bind_subscriber
from subrules.domain.errors import (
    InvalidReconciliationStateError,
    RuleApplierError,
    RuleGenerationError,
    RuleNameDecodeError,
)
from subrules.domain.names import (
    DefaultRuleName,
    LegacyRuleName,
    VersionedRuleName,
    decode_rule_name,
)
from subrules.domain.rules import RuleDefinition
from subrules.domain.versions import RuleVersion
from subrules.infrastructure.appliers import InMemoryRuleApplier
from subrules.infrastructure.snapshots import load_snapshot, save_snapshot
from subrules.infrastructure.versions import DistributionVersionSource, StaticVersionSource
from subrules.services.builder import RuleBuilder
from subrules.services.contracts import (
    GenerateResultData,
    InspectResultData,
    ReconcileResultData,
    RuleVersionSource,
    dump_validated,
)
from subrules.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from subrules.config.settings import RulesSettings

logger = logging.getLogger(__name__)


def _rule_items(rules: Sequence[RuleDefinition]) -> list[dict[str, Any]]:
    return [
        {
            "name": rule.name,
            "filter_expression": rule.filter_expression,
            "length": len(rule.filter_expression),
        }
        for rule in rules
    ]


def _failure(op: str, code: str, exc: Exception, **detail: Any) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=str(exc), detail=detail),
    )


class RuleService:
    """Generate, reconcile, and inspect rules for the configured subscriber."""

    def __init__(
        self,
        settings: RulesSettings,
        *,
        version_source: RuleVersionSource | None = None,
    ) -> None:
        self._settings = settings
        self._version_source = version_source or self._configured_version_source()

    def _configured_version_source(self) -> RuleVersionSource:
        version = self._settings.version
        if version.value is not None:
            return StaticVersionSource(RuleVersion.parse(version.value))
        return DistributionVersionSource(version.distribution)

    def _builder(self, applier: InMemoryRuleApplier) -> RuleBuilder:
        return RuleBuilder(
            applier,
            self._version_source,
            self._settings.subscriber.name,
            max_filter_length=self._settings.broker.max_filter_length,
        )

    def _omit(self, omit_specific_subscriber_filter: bool | None) -> bool:
        if omit_specific_subscriber_filter is None:
            return self._settings.subscriber.omit_specific_subscriber_filter
        return omit_specific_subscriber_filter

    def generate(
        self,
        handler: str,
        message_types: Sequence[str],
        *,
        omit_specific_subscriber_filter: bool | None = None,
    ) -> ServiceResult:
        """Generate the desired rules for *handler*."""
        op = "generate"
        bind_subscriber(self._settings.subscriber.name, handler)
        try:
            version = self._version_source.get_version()
            rules = self._builder(InMemoryRuleApplier()).generate_subscription_rules(
                message_types, handler, self._omit(omit_specific_subscriber_filter)
            )
        except metadata.PackageNotFoundError as exc:
            return _failure(op, "VERSION_UNAVAILABLE", exc, distribution=str(exc))
        except (RuleGenerationError, ValueError) as exc:
            return _failure(op, "GENERATION_FAILED", exc, handler=handler)

        data = dump_validated(
            GenerateResultData,
            {
                "handler": handler,
                "version": str(version),
                "count": len(rules),
                "items": _rule_items(rules),
            },
        )
        return ServiceResult(ok=True, op=op, data=data)

    def reconcile(
        self,
        handler: str,
        message_types: Sequence[str],
        snapshot: Path,
        *,
        write: bool = False,
        omit_specific_subscriber_filter: bool | None = None,
    ) -> ServiceResult:
        """Reconcile against the rules in *snapshot*, entirely in memory.

        With *write*, the converged rule set is saved back to *snapshot*.
        """
        op = "reconcile"
        bind_subscriber(self._settings.subscriber.name, handler)
        warnings: list[str] = []

        try:
            deployed = load_snapshot(snapshot)
        except (OSError, ValueError) as exc:
            return _failure(op, "SNAPSHOT_INVALID", exc, path=str(snapshot))

        applier = InMemoryRuleApplier(deployed)
        builder = self._builder(applier)
        try:
            desired = builder.generate_subscription_rules(
                message_types, handler, self._omit(omit_specific_subscriber_filter)
            )
            version = builder.current_version(desired)
            plan = anyio.run(builder.apply_rule_changes, desired, deployed, message_types)
        except metadata.PackageNotFoundError as exc:
            return _failure(op, "VERSION_UNAVAILABLE", exc, distribution=str(exc))
        except RuleNameDecodeError as exc:
            return _failure(op, "DECODE_FAILED", exc, name=exc.name)
        except InvalidReconciliationStateError as exc:
            return _failure(op, "INVALID_STATE", exc, rules=exc.rule_names)
        except RuleApplierError as exc:
            return _failure(op, "APPLY_FAILED", exc)
        except (RuleGenerationError, ValueError) as exc:
            return _failure(op, "GENERATION_FAILED", exc, handler=handler)

        if plan.skipped and plan.reason:
            warnings.append(plan.reason)

        written: str | None = None
        if write and not plan.skipped:
            save_snapshot(snapshot, applier.rules)
            written = str(snapshot)
            logger.info("Wrote %d rule(s) to %s", len(applier.rules), snapshot)

        data = dump_validated(
            ReconcileResultData,
            {
                "handler": handler,
                "version": str(version),
                "skipped": plan.skipped,
                "reason": plan.reason,
                "added": applier.added,
                "removed": applier.removed,
                "unchanged": plan.unchanged,
                "deployed": _rule_items(applier.rules),
                "written": written,
            },
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def inspect_names(self, names: Sequence[str]) -> ServiceResult:
        """Decode each rule name into its format and version."""
        op = "inspect"
        items: list[dict[str, Any]] = []
        for name in names:
            try:
                parsed = decode_rule_name(name)
            except RuleNameDecodeError as exc:
                return _failure(op, "DECODE_FAILED", exc, name=name)
            item: dict[str, Any] = {"name": name}
            if isinstance(parsed, VersionedRuleName):
                item.update(format="current", index=parsed.index)
            elif isinstance(parsed, LegacyRuleName):
                item["format"] = "legacy"
            elif isinstance(parsed, DefaultRuleName):
                item["format"] = "default"
            item["version"] = str(parsed.version) if parsed.version is not None else None
            items.append(item)

        data = dump_validated(InspectResultData, {"count": len(items), "items": items})
        return ServiceResult(ok=True, op=op, data=data)
