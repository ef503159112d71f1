"""
Field-level permissions.

Works out which fields of a subject an ability may act on for a given
action. Every matching rule contributes, in declaration order:

- a grant adds its fields (or the caller's default fields if it has none)
- a denial with fields removes those fields
- a denial without fields clears everything granted so far

Usage:
    fields = permitted_fields(ability, "read", "User", ["id", "email", "name"])
    columns = ordered_permitted_fields(ability, "read", "User", User.field_names())
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any

from .rules import Rule

if TYPE_CHECKING:
    from .ability import Ability

FieldsFrom = Callable[[Rule, Sequence[str]], Iterable[str]]


def fields_or_default(rule: Rule, default_fields: Sequence[str]) -> Iterable[str]:
    """Fields granted by a rule: its own scope, or the full default set."""
    return rule.fields if rule.fields is not None else default_fields


class FieldPermissionResolver:
    """
    Computes permitted field sets.

    Args:
        fields_from: Maps a granting rule to the fields it grants.
            Defaults to the rule's own fields, falling back to the
            caller-supplied default fields.
    """

    def __init__(self, fields_from: FieldsFrom | None = None):
        self.fields_from = fields_from or fields_or_default

    def permitted_fields(
        self,
        ability: Ability,
        action: str,
        subject: str,
        default_fields: Sequence[str],
        instance: Any = None,
    ) -> frozenset[str]:
        """
        Fields the ability may use for action on subject.

        If an instance is given, rules whose conditions it does not meet
        are skipped.
        """
        permitted: set[str] = set()

        for rule in ability.rules_for(action, subject):
            if not rule.matches_conditions(instance):
                continue

            if not rule.inverted:
                permitted.update(self.fields_from(rule, default_fields))
            elif rule.fields is None:
                permitted.clear()
            else:
                permitted.difference_update(rule.fields)

        return frozenset(permitted)

    def ordered_permitted_fields(
        self,
        ability: Ability,
        action: str,
        subject: str,
        default_fields: Sequence[str],
        instance: Any = None,
    ) -> list[str]:
        """
        Same as permitted_fields, as a list in default_fields order.

        Granted fields that are not in default_fields follow, sorted.
        """
        permitted = self.permitted_fields(ability, action, subject, default_fields, instance)
        ordered = [name for name in dict.fromkeys(default_fields) if name in permitted]
        extra = sorted(permitted.difference(ordered))
        return ordered + extra


default_resolver = FieldPermissionResolver()


def permitted_fields(
    ability: Ability,
    action: str,
    subject: str,
    default_fields: Sequence[str],
    instance: Any = None,
) -> frozenset[str]:
    return default_resolver.permitted_fields(ability, action, subject, default_fields, instance)


def ordered_permitted_fields(
    ability: Ability,
    action: str,
    subject: str,
    default_fields: Sequence[str],
    instance: Any = None,
) -> list[str]:
    return default_resolver.ordered_permitted_fields(ability, action, subject, default_fields, instance)
