"""Rule versions — the build version stamped into every generated rule name.

A version is ``(major, minor, patch)`` ordered component-wise. ``patch`` may
be absent only for the default-rule sentinel ``RuleVersion(1, 0)``; an absent
component orders below any present one, so ``1.0 < 1.0.0``.

INVARIANT: A version embedded in a rule name never changes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

_VERSION_RE = re.compile(r"^\s*v?(\d+)\.(\d+)(?:\.(\d+))?")


@total_ordering
@dataclass(frozen=True)
class RuleVersion:
    """Totally ordered ``major.minor.patch`` version."""

    major: int
    minor: int
    patch: int | None = None

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if part is not None and part < 0:
                msg = f"Version components must be non-negative: {self!s}"
                raise ValueError(msg)

    @property
    def is_complete(self) -> bool:
        """True when all three components are present."""
        return self.patch is not None

    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, -1 if self.patch is None else self.patch)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RuleVersion):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        if self.patch is None:
            return f"{self.major}.{self.minor}"
        return f"{self.major}.{self.minor}.{self.patch}"

    @classmethod
    def parse(cls, text: str) -> RuleVersion:
        """Parse ``"1.2.3"`` (or ``"1.2"``, padded to ``1.2.0``).

        Trailing qualifiers such as ``.dev0`` or ``rc1`` are ignored, so a
        package version like ``2.4.1.post3`` parses as ``2.4.1``.
        """
        match = _VERSION_RE.match(text)
        if match is None:
            msg = f"Not a version: {text!r}"
            raise ValueError(msg)
        major, minor, patch = match.groups()
        return cls(int(major), int(minor), int(patch or 0))


# The broker's reserved default rule predates versioning and is always superseded.
DEFAULT_RULE_VERSION = RuleVersion(1, 0)
