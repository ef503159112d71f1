"""
Permission rules.

A rule grants (or, when inverted, revokes) one action on one subject type.
Rules may be narrowed to a list of fields, or to object instances whose
attributes match a set of conditions.

Wildcards:
- action "manage" matches every action
- subject "all" matches every subject

Examples:
    Rule("read", "User", fields=("email",))
    Rule("manage", "all")
    Rule("update", "Post", conditions={"author_id": user.id})
    Rule("delete", "Post", inverted=True, reason="Posts are archived")

    # Loose records (e.g. from the database or a JSON file)
    Rule.from_dict({"action": "read", "subject": "User", "fields": ["email"]})
    list(Rule.expand({"action": ["read", "update"], "subject": "Post"}))
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from itertools import product
from types import MappingProxyType
from typing import Any

from .errors import RuleValidationError

MANAGE = "manage"
ALL = "all"

_RULE_KEYS = frozenset({"action", "subject", "fields", "conditions", "inverted", "reason"})
_MISSING = object()


def _resolve(instance: Any, path: str) -> Any:
    """Read a dotted attribute path from an object or mapping."""
    value = instance
    for part in path.split("."):
        if isinstance(value, Mapping):
            value = value.get(part, _MISSING)
        else:
            value = getattr(value, part, _MISSING)
        if value is _MISSING:
            return _MISSING
    return value


def _freeze(value: Any) -> Any:
    """Read-only deep copy of condition data."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    return value


def _thaw(value: Any) -> Any:
    """Plain dict/list copy of frozen condition data (JSON friendly)."""
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    if isinstance(value, frozenset):
        return sorted(value, key=repr)
    return value


def _hashable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return frozenset((key, _hashable(item)) for key, item in value.items())
    if isinstance(value, tuple):
        return tuple(_hashable(item) for item in value)
    return value


def _as_names(value: Any, what: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, Sequence):
        raise RuleValidationError(f"Rule {what} must be a string or a list of strings, got {value!r}")
    return tuple(value)


@dataclass(frozen=True)
class Rule:
    """
    One grant or denial.

    Attributes:
        action: Action name, or MANAGE for any action
        subject: Subject type, or ALL for any subject
        fields: Fields this rule is scoped to (None = the caller's default set)
        conditions: Attribute values an instance must have for the rule to apply
        inverted: True if the rule revokes instead of grants
        reason: Message shown when this rule is the one that denied access
    """

    action: str
    subject: str
    fields: tuple[str, ...] | None = None
    conditions: Mapping[str, Any] | None = None
    inverted: bool = False
    reason: str | None = None

    def __post_init__(self) -> None:
        for name in ("action", "subject"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise RuleValidationError(f"Rule {name} must be a non-empty string, got {value!r}")

        if self.fields is not None:
            if isinstance(self.fields, str) or not isinstance(self.fields, Sequence):
                raise RuleValidationError(f"Rule fields must be a list of names, got {self.fields!r}")
            for name in self.fields:
                if not isinstance(name, str) or not name:
                    raise RuleValidationError(f"Rule field names must be non-empty strings, got {name!r}")
            # An empty field list scopes nothing, same as no list at all
            object.__setattr__(self, "fields", tuple(self.fields) or None)

        if self.conditions is not None:
            if not isinstance(self.conditions, Mapping):
                raise RuleValidationError(f"Rule conditions must be a mapping, got {self.conditions!r}")
            object.__setattr__(self, "conditions", _freeze(self.conditions) or None)

        if not isinstance(self.inverted, bool):
            raise RuleValidationError(f"Rule inverted flag must be a bool, got {self.inverted!r}")
        if self.reason is not None and not isinstance(self.reason, str):
            raise RuleValidationError(f"Rule reason must be a string, got {self.reason!r}")

    def __hash__(self) -> int:
        return hash((
            self.action,
            self.subject,
            self.fields,
            _hashable(self.conditions),
            self.inverted,
            self.reason,
        ))

    # ============================================================
    # CONSTRUCTION
    # ============================================================

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rule":
        """Build a single rule from a loose record."""
        if not isinstance(data, Mapping):
            raise RuleValidationError(f"Rule record must be a mapping, got {type(data).__name__}")

        unknown = set(data) - _RULE_KEYS
        if unknown:
            raise RuleValidationError(f"Unknown rule keys: {sorted(unknown)}")

        return cls(
            action=data.get("action"),
            subject=data.get("subject"),
            fields=data.get("fields"),
            conditions=data.get("conditions"),
            inverted=data.get("inverted", False),
            reason=data.get("reason"),
        )

    @classmethod
    def expand(cls, data: Mapping[str, Any]) -> Iterator["Rule"]:
        """
        Build rules from a record whose action/subject may be lists.

        Yields one rule per (action, subject) combination, actions first.
        """
        if not isinstance(data, Mapping):
            raise RuleValidationError(f"Rule record must be a mapping, got {type(data).__name__}")

        actions = _as_names(data.get("action"), "action")
        subjects = _as_names(data.get("subject"), "subject")
        if not actions or not subjects:
            raise RuleValidationError(f"Rule record needs at least one action and subject: {dict(data)!r}")

        for action, subject in product(actions, subjects):
            yield cls.from_dict({**data, "action": action, "subject": subject})

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "subject": self.subject,
            "fields": list(self.fields) if self.fields is not None else None,
            "conditions": _thaw(self.conditions) if self.conditions is not None else None,
            "inverted": self.inverted,
            "reason": self.reason,
        }

    # ============================================================
    # MATCHING
    # ============================================================

    def matches(self, action: str, subject: str) -> bool:
        """Type-level match, honouring wildcards."""
        return (self.action == MANAGE or self.action == action) and (
            self.subject == ALL or self.subject == subject
        )

    def matches_instance(self, instance: Any) -> bool:
        """
        Check conditions against an object or mapping.

        A list-like expected value means "one of".
        """
        if not self.conditions:
            return True

        for path, expected in self.conditions.items():
            actual = _resolve(instance, path)
            if actual is _MISSING:
                return False
            if isinstance(expected, (list, tuple, set, frozenset)):
                if actual not in expected:
                    return False
            elif actual != expected:
                return False

        return True

    def matches_conditions(self, instance: Any = None) -> bool:
        """
        Does this rule apply to the given instance?

        Without an instance, conditioned grants still apply at type level
        ("can read some Posts"), but conditioned denials do not, since they
        only revoke access to particular instances.
        """
        if not self.conditions:
            return True
        if instance is None:
            return not self.inverted
        return self.matches_instance(instance)

    def matches_field(self, field: str | None = None) -> bool:
        """Same idea as matches_conditions, one level down: per field."""
        if self.fields is None:
            return True
        if field is None:
            return not self.inverted
        return field in self.fields

    def applies_to(self, instance: Any = None, field: str | None = None) -> bool:
        return self.matches_conditions(instance) and self.matches_field(field)

    def __repr__(self) -> str:
        kind = "deny" if self.inverted else "grant"
        parts = [f"{kind} {self.action} {self.subject}"]
        if self.fields:
            parts.append(f"fields={list(self.fields)}")
        if self.conditions:
            parts.append(f"conditions={_thaw(self.conditions)}")
        return f"<Rule {' '.join(parts)}>"
