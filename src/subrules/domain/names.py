"""Rule name codec — ordinal index and version encoded into a rule name.

Current format: ``{index}_v_{major}_{minor}_{patch}`` (e.g. ``3_v_1_0_0``).

The decoder is total over every name this system has ever deployed:

- ``$Default``: the broker's reserved catch-all rule, always superseded.
- Current format: index and version recovered exactly.
- Legacy format: any other string. Older deployments named rules
  ``{Subscriber}_{major}_{minor}_{patch}``; the trailing suffix is read as
  the version when present, otherwise the rule carries no version at all.

INVARIANT: Any name ending in a parseable ``_{major}_{minor}_{patch}`` suffix
decodes. Only a current-format marker with no such suffix is a decode error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from subrules.domain.errors import RuleNameDecodeError
from subrules.domain.versions import DEFAULT_RULE_VERSION, RuleVersion

DEFAULT_RULE_NAME = "$Default"
VERSION_MARKER = "_v_"

_VERSIONED_RE = re.compile(r"^(\d+)_v_(\d+)_(\d+)_(\d+)$")
_MARKER_RE = re.compile(r"^(\d+)_v_(.*)$")
_LEGACY_SUFFIX_RE = re.compile(r"_(\d+)_(\d+)_(\d+)$")


@dataclass(frozen=True)
class VersionedRuleName:
    """A name in the current ``{index}_v_{version}`` format."""

    index: int
    version: RuleVersion

    is_current_format = True


@dataclass(frozen=True)
class LegacyRuleName:
    """A name from an earlier naming scheme, version recovered if possible."""

    raw: str
    version: RuleVersion | None = None

    is_current_format = False


@dataclass(frozen=True)
class DefaultRuleName:
    """The broker's reserved default rule."""

    raw: str = DEFAULT_RULE_NAME
    is_current_format = False

    @property
    def version(self) -> RuleVersion:
        return DEFAULT_RULE_VERSION


ParsedRuleName = VersionedRuleName | LegacyRuleName | DefaultRuleName


def encode_rule_name(index: int, version: RuleVersion) -> str:
    """Build the current-format name for rule *index* at *version*."""
    if index < 1:
        msg = f"Rule ordinals start at 1, got {index}"
        raise ValueError(msg)
    if not version.is_complete:
        msg = f"Rule names need a major.minor.patch version, got {version}"
        raise ValueError(msg)
    return f"{index}{VERSION_MARKER}{version.major}_{version.minor}_{version.patch}"


def decode_rule_name(name: str) -> ParsedRuleName:
    """Parse *name* into its tagged variant.

    Raises:
        RuleNameDecodeError: *name* uses the current-format marker but the
            name does not end in a three-integer version.
    """
    if name == DEFAULT_RULE_NAME:
        return DefaultRuleName()

    match = _VERSIONED_RE.match(name)
    if match:
        index, major, minor, patch = (int(g) for g in match.groups())
        return VersionedRuleName(index=index, version=RuleVersion(major, minor, patch))

    suffix = _LEGACY_SUFFIX_RE.search(name)
    if suffix:
        major, minor, patch = (int(g) for g in suffix.groups())
        return LegacyRuleName(raw=name, version=RuleVersion(major, minor, patch))

    marker = _MARKER_RE.match(name)
    if marker:
        raise RuleNameDecodeError(name, f"malformed version {marker.group(2)!r}")
    return LegacyRuleName(raw=name)
