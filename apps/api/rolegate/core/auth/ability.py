"""
Ability - the compiled permission set of one role.

An ability answers two questions:
- can this role perform an action on a subject (optionally a specific
  instance, optionally a specific field)?
- which fields of a subject may it use for an action?

Precedence is positional: among the rules that apply, the last one
declared decides. A "manage all" rule matches every action on every
subject, which is how an administrative role gets blanket access.

Usage:
    ability = Ability([
        Rule("read", "Post"),
        Rule("read", "Post", conditions={"status": "draft"}, inverted=True),
    ])
    ability.can("read", "Post")              # True
    ability.can("read", "Post", draft_post)  # False
    ability.throw_unless_can("delete", "Post")  # raises AuthorizationError

Abilities are immutable once built and safe to share between threads
and requests.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import structlog

from .decision import PolicyDecision
from .errors import DEFAULT_MESSAGE, AuthorizationError
from .fields import default_resolver
from .index import RuleIndex
from .rules import Rule

logger = structlog.get_logger()


class Ability:
    """
    Evaluation surface over a RuleIndex.

    Args:
        rules: A compiled RuleIndex, or rules / rule records to compile
        default_message: Denial message used when no inverted rule gives
            a reason (defaults to "Not authorized")
    """

    def __init__(
        self,
        rules: RuleIndex | Iterable[Rule | Mapping[str, Any]] = (),
        *,
        default_message: str | None = None,
    ):
        self._index = rules if isinstance(rules, RuleIndex) else RuleIndex.compile(rules)
        self._default_message = default_message or DEFAULT_MESSAGE

    @classmethod
    def from_rules(
        cls,
        rules: Iterable[Rule | Mapping[str, Any]],
        default_message: str | None = None,
    ) -> "Ability":
        return cls(RuleIndex.compile(rules), default_message=default_message)

    @property
    def index(self) -> RuleIndex:
        return self._index

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._index.rules

    @property
    def default_message(self) -> str:
        return self._default_message

    # ============================================================
    # RULE LOOKUP
    # ============================================================

    def rules_for(self, action: str, subject: str) -> tuple[Rule, ...]:
        """Rules matching (action, subject) at type level, in declaration order."""
        return self._index.matching_rules(action, subject)

    def relevant_rule_for(
        self,
        action: str,
        subject: str,
        instance: Any = None,
        field: str | None = None,
    ) -> Rule | None:
        """The deciding rule: the last matching rule that applies, if any."""
        for rule in reversed(self.rules_for(action, subject)):
            if rule.applies_to(instance, field):
                return rule
        return None

    # ============================================================
    # CHECKS
    # ============================================================

    def check(
        self,
        action: str,
        subject: str,
        instance: Any = None,
        field: str | None = None,
    ) -> PolicyDecision:
        """
        Evaluate a permission without raising.

        Returns:
            PolicyDecision carrying the deciding rule and, on denial,
            the reason to show the caller
        """
        rule = self.relevant_rule_for(action, subject, instance, field)

        if rule is None:
            return PolicyDecision.deny(self._default_message, action=action, subject=subject, field=field)
        if rule.inverted:
            return PolicyDecision.deny(
                rule.reason or self._default_message,
                rule=rule,
                action=action,
                subject=subject,
                field=field,
            )
        return PolicyDecision.allow(rule, action=action, subject=subject, field=field)

    def can(
        self,
        action: str,
        subject: str,
        instance: Any = None,
        field: str | None = None,
    ) -> bool:
        rule = self.relevant_rule_for(action, subject, instance, field)
        return rule is not None and not rule.inverted

    def cannot(
        self,
        action: str,
        subject: str,
        instance: Any = None,
        field: str | None = None,
    ) -> bool:
        return not self.can(action, subject, instance, field)

    def throw_unless_can(
        self,
        action: str,
        subject: str,
        instance: Any = None,
        field: str | None = None,
    ) -> None:
        """
        Require a permission.

        Raises:
            AuthorizationError: With the deciding inverted rule's reason,
                or the default message if nothing granted the action
        """
        decision = self.check(action, subject, instance, field)
        if decision.allowed:
            return

        logger.debug(
            "Permission denied",
            action=action,
            subject=subject,
            field=field,
            explicit=decision.rule is not None,
        )
        raise AuthorizationError(
            action,
            subject,
            reason=decision.rule.reason if decision.rule is not None else None,
            field=field,
            default_message=self._default_message,
        )

    # ============================================================
    # FIELDS
    # ============================================================

    def permitted_fields(
        self,
        action: str,
        subject: str,
        default_fields: Sequence[str],
        instance: Any = None,
    ) -> frozenset[str]:
        """See FieldPermissionResolver.permitted_fields."""
        return default_resolver.permitted_fields(self, action, subject, default_fields, instance)

    def __repr__(self) -> str:
        return f"<Ability rules={len(self._index)}>"
