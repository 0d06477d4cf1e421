"""SQL filter fragments understood by the broker.

Every generated rule is::

    (MessageType='A' OR MessageType='B' ...)
        AND <synthetic exclusion, admitting this handler's domain under test>
        [AND <specific subscriber>]

The predicate grammar is fixed. String literals are single-quoted with
embedded quotes doubled.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

MAX_FILTER_LENGTH = 1024

MESSAGE_TYPE_PROPERTY = "MessageType"
CLAUSE_SEPARATOR = " OR "
PREDICATE_SEPARATOR = " AND "

_MESSAGE_TYPE_RE = re.compile(r"MessageType='((?:[^']|'')*)'")


def quote(value: str) -> str:
    """Render *value* as a SQL string literal."""
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def domain_prefix(handler_identity: str) -> str:
    """The dotted prefix a ``DomainUnderTest`` value is matched against.

    A ``DomainUnderTest`` of ``Pat.`` or ``Pat.Domain.`` matches a handler
    identity of ``Pat.Domain.Handler``. Publishers set domains with their
    trailing dot so ``Pat.Dom`` cannot match ``Pat.Domain``.
    """
    identity = handler_identity.strip().rstrip(".")
    if not identity:
        msg = "Handler identity must not be empty"
        raise ValueError(msg)
    return f"{identity}."


def domain_ownership_predicate(handler_identity: str) -> str:
    """True when ``DomainUnderTest`` names this handler's domain or an ancestor."""
    return f"{quote(domain_prefix(handler_identity))} like DomainUnderTest +'%'"


def synthetic_exclusion_predicate(handler_identity: str) -> str:
    """Reject synthetic traffic unless it is aimed at this handler's domain."""
    return (
        "(NOT EXISTS(Synthetic) OR "
        "(Synthetic <> 'true' AND Synthetic <> 'True' AND Synthetic <> 'TRUE') OR "
        f"{domain_ownership_predicate(handler_identity)})"
    )


def specific_subscriber_predicate(subscriber_name: str) -> str:
    """Reject messages targeted at a different specific subscriber."""
    return (
        "(NOT EXISTS(SpecificSubscriber) OR "
        f"SpecificSubscriber = {quote(subscriber_name)})"
    )


def message_type_clause(message_type: str) -> str:
    return f"{MESSAGE_TYPE_PROPERTY}={quote(message_type)}"


def type_match_predicate(clauses: Iterable[str]) -> str:
    """OR the given clauses together, parenthesized."""
    return f"({CLAUSE_SEPARATOR.join(clauses)})"


def combine(type_match: str, fixed_predicates: Iterable[str]) -> str:
    """AND the type match with the fixed predicates shared by every rule."""
    return PREDICATE_SEPARATOR.join([type_match, *fixed_predicates])


def parse_message_types(filter_expression: str) -> list[str]:
    """Recover the message-type names of a generated filter, in order."""
    return [m.replace("''", "'") for m in _MESSAGE_TYPE_RE.findall(filter_expression)]
