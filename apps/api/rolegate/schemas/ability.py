"""
Ability schemas.
"""

from typing import Any
from pydantic import BaseModel, Field

from rolegate.core.auth import PolicyDecision, Rule


class RuleResponse(BaseModel):
    """A single compiled rule."""
    action: str
    subject: str
    fields: list[str] | None = None
    conditions: dict[str, Any] | None = None
    inverted: bool = False
    reason: str | None = None

    @classmethod
    def from_rule(cls, rule: Rule) -> "RuleResponse":
        return cls(**rule.to_dict())


class AbilityRulesResponse(BaseModel):
    """Rules of the caller's ability."""
    role: str
    rules: list[RuleResponse]


class PermissionCheckResponse(BaseModel):
    """Outcome of a single permission check."""
    action: str
    subject: str
    field: str | None = None
    allowed: bool
    reason: str | None = None
    rule: RuleResponse | None = None

    @classmethod
    def from_decision(
        cls,
        decision: PolicyDecision,
        action: str,
        subject: str,
        field: str | None = None,
    ) -> "PermissionCheckResponse":
        return cls(
            action=action,
            subject=subject,
            field=field,
            allowed=decision.allowed,
            reason=decision.reason,
            rule=RuleResponse.from_rule(decision.rule) if decision.rule is not None else None,
        )


class PermittedFieldsResponse(BaseModel):
    """Fields the caller may use for an action on a subject."""
    action: str
    subject: str
    fields: list[str] = Field(default_factory=list)


class ReloadResponse(BaseModel):
    """Roles available after a registry reload."""
    roles: list[str]
