"""
Policy decision - the explicit result of an ability check.

Ability.check() returns one of these instead of raising, so callers can
branch on the outcome (or turn it into an error) in their own idiom.
"""

from dataclasses import dataclass, field
from typing import Any

from .rules import Rule


@dataclass(frozen=True)
class PolicyDecision:
    """
    Result of evaluating an ability.

    Attributes:
        allowed: Whether the action is permitted
        reason: Human-readable explanation (for errors/logging)
        rule: The deciding rule, or None if no rule applied
        metadata: Additional data about the check
    """
    allowed: bool
    reason: str | None = None
    rule: Rule | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def allow(cls, rule: Rule, **metadata: Any) -> "PolicyDecision":
        return cls(allowed=True, rule=rule, metadata=metadata)

    @classmethod
    def deny(cls, reason: str, rule: Rule | None = None, **metadata: Any) -> "PolicyDecision":
        return cls(allowed=False, reason=reason, rule=rule, metadata=metadata)

    def __bool__(self) -> bool:
        return self.allowed
