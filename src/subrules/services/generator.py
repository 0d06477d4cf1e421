"""RuleGenerator — compile message-type names into length-bounded rules.

Message-type clauses are packed greedily, in input order, into the current
rule until the next clause would push the complete expression past the
broker's limit. The rule is then closed and the next ordinal started.

Generation is a pure function of its inputs plus the bound subscriber name
and the version source. Safe to call concurrently.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from subrules.domain.errors import RuleGenerationError
from subrules.domain.filters import (
    CLAUSE_SEPARATOR,
    MAX_FILTER_LENGTH,
    combine,
    message_type_clause,
    specific_subscriber_predicate,
    synthetic_exclusion_predicate,
    type_match_predicate,
)
from subrules.domain.names import encode_rule_name
from subrules.domain.rules import RuleDefinition
from subrules.services.contracts import RuleVersionSource

logger = logging.getLogger(__name__)


class RuleGenerator:
    """Builds the desired rule set for one subscriber."""

    def __init__(
        self,
        subscriber_name: str,
        version_source: RuleVersionSource,
        *,
        max_filter_length: int = MAX_FILTER_LENGTH,
    ) -> None:
        self._subscriber_name = subscriber_name
        self._version_source = version_source
        self._max_filter_length = max_filter_length

    def fixed_predicates(
        self, handler_identity: str, *, omit_specific_subscriber_filter: bool = False
    ) -> list[str]:
        """Predicates ANDed into every rule for *handler_identity*."""
        predicates = [synthetic_exclusion_predicate(handler_identity)]
        if not omit_specific_subscriber_filter:
            predicates.append(specific_subscriber_predicate(self._subscriber_name))
        return predicates

    def generate(
        self,
        message_types: Iterable[str],
        handler_identity: str,
        *,
        omit_specific_subscriber_filter: bool = False,
    ) -> list[RuleDefinition]:
        """Return rules covering *message_types*, in ascending ordinal order.

        Raises:
            RuleGenerationError: A single message type is too long to fit in
                a rule alongside the fixed predicates.
        """
        fixed = self.fixed_predicates(
            handler_identity,
            omit_specific_subscriber_filter=omit_specific_subscriber_filter,
        )
        # Everything but the clauses themselves: the shared predicates, their
        # separators, and the parentheses around the type match.
        overhead = len(combine(type_match_predicate([]), fixed))
        budget = self._max_filter_length - overhead

        groups: list[list[str]] = []
        current: list[str] = []
        used = 0
        for message_type in dict.fromkeys(message_types):
            clause = message_type_clause(message_type)
            if len(clause) > budget:
                msg = (
                    f"Message type {message_type!r} cannot fit in a filter of "
                    f"{self._max_filter_length} characters"
                )
                raise RuleGenerationError(msg)
            cost = len(clause) if not current else len(CLAUSE_SEPARATOR) + len(clause)
            if current and used + cost > budget:
                groups.append(current)
                current, used = [], 0
                cost = len(clause)
            current.append(clause)
            used += cost
        if current:
            groups.append(current)

        if not groups:
            return []

        version = self._version_source.get_version()
        rules = [
            RuleDefinition(
                name=encode_rule_name(index, version),
                filter_expression=combine(type_match_predicate(clauses), fixed),
            )
            for index, clauses in enumerate(groups, start=1)
        ]
        logger.debug(
            "Generated %d rule(s) for %s at version %s",
            len(rules),
            handler_identity,
            version,
        )
        return rules
