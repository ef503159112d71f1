"""
Rule index - compiled, queryable rule storage.

Rules are kept in declaration order; that order decides precedence
(later rules override earlier ones). The index buckets rule positions by
their exact (action, subject) pair so a lookup only has to merge four
buckets: the exact pair plus the three wildcard combinations.
"""

from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from typing import Any

import structlog

from .errors import RuleValidationError
from .rules import ALL, MANAGE, Rule

logger = structlog.get_logger()

# Lookups are memoized per (action, subject); bounded so arbitrary
# caller-supplied names can't grow it without limit.
LOOKUP_CACHE_SIZE = 1024


class RuleIndex:
    """
    Immutable index over an ordered list of rules.

    Usage:
        index = RuleIndex.compile([
            Rule("read", "User", fields=("email",)),
            {"action": "manage", "subject": "all"},
        ])
        index.matching_rules("read", "User")  # both rules, in order
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: tuple[Rule, ...] = tuple(rules)

        buckets: dict[tuple[str, str], list[int]] = defaultdict(list)
        for position, rule in enumerate(self._rules):
            buckets[(rule.action, rule.subject)].append(position)
        self._buckets: dict[tuple[str, str], tuple[int, ...]] = {
            key: tuple(positions) for key, positions in buckets.items()
        }

        self._lookup = lru_cache(maxsize=LOOKUP_CACHE_SIZE)(self._collect)

    @classmethod
    def compile(cls, rules: Iterable[Rule | Mapping[str, Any]]) -> "RuleIndex":
        """
        Compile rules (or loose rule records) into an index.

        An empty list is valid and produces an index nothing matches.

        Raises:
            RuleValidationError: If any record is malformed
        """
        compiled: list[Rule] = []
        for item in rules:
            if isinstance(item, Rule):
                compiled.append(item)
            elif isinstance(item, Mapping):
                compiled.extend(Rule.expand(item))
            else:
                raise RuleValidationError(f"Cannot compile {type(item).__name__} into a rule")

        index = cls(compiled)
        logger.debug("Rules compiled", rule_count=len(compiled), pairs=len(index._buckets))
        return index

    def matching_rules(self, action: str, subject: str) -> tuple[Rule, ...]:
        """
        All rules matching (action, subject) at type level, in declaration order.

        Conditions and field scopes are not considered here.
        """
        return self._lookup(action, subject)

    def _collect(self, action: str, subject: str) -> tuple[Rule, ...]:
        positions: set[int] = set()
        for key in {(action, subject), (MANAGE, subject), (action, ALL), (MANAGE, ALL)}:
            positions.update(self._buckets.get(key, ()))
        return tuple(self._rules[position] for position in sorted(positions))

    # ============================================================
    # INTROSPECTION
    # ============================================================

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def actions(self) -> frozenset[str]:
        return frozenset(action for action, _ in self._buckets)

    @property
    def subjects(self) -> frozenset[str]:
        return frozenset(subject for _, subject in self._buckets)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"<RuleIndex rules={len(self._rules)}>"
