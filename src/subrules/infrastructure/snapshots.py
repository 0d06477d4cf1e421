"""Deployed-rule snapshot files.

A snapshot is a JSON array of ``{"name": ..., "filter_expression": ...}``
objects, as exported from a subscription. A missing file is an empty
subscription.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import TypeAdapter

from subrules.domain.rules import DeployedRule

_ADAPTER = TypeAdapter(list[DeployedRule])


def load_snapshot(path: Path) -> list[DeployedRule]:
    """Read deployed rules from *path*.

    Raises:
        pydantic.ValidationError: The file is not a valid rule list.
        ValueError: Two rules share a name.
    """
    if not path.is_file():
        return []
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return []
    rules = _ADAPTER.validate_json(raw)
    seen: set[str] = set()
    for rule in rules:
        if rule.name in seen:
            msg = f"Duplicate rule name {rule.name!r} in {path}"
            raise ValueError(msg)
        seen.add(rule.name)
    return rules


def save_snapshot(path: Path, rules: list[DeployedRule]) -> None:
    """Write *rules* to *path*.

    Creates parent directories if they don't exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(_ADAPTER.dump_json(rules, indent=2) + b"\n")
