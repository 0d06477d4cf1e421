"""Exception hierarchy for rule generation and reconciliation.

Every failure raised by the core derives from :class:`RuleError` so callers
can catch the whole family at a service boundary.
"""

from __future__ import annotations


class RuleError(Exception):
    """Base class for all subrules failures."""


class RuleNameDecodeError(RuleError, ValueError):
    """A rule name carries a version marker that cannot be parsed."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Cannot decode rule name {name!r}: {reason}")
        self.name = name


class RuleGenerationError(RuleError, ValueError):
    """A message type cannot be packed into any rule under the length cap."""


class InvalidReconciliationStateError(RuleError, RuntimeError):
    """Deployed rules at the current version disagree with the desired set.

    The same version must always correspond to the same message-type set.
    Raised before any applier call is made.
    """

    def __init__(self, message: str, *, rule_names: list[str] | None = None) -> None:
        super().__init__(message)
        self.rule_names = rule_names or []


class RuleApplierError(RuleError):
    """A broker-side add or remove failed."""


class RuleAlreadyExistsError(RuleApplierError):
    """An add targeted a rule name that is already deployed."""


class RuleNotFoundError(RuleApplierError):
    """A remove targeted a rule name that is not deployed."""
