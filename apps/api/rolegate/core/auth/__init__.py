"""
Authorization module - rule-based abilities.

Permissions are declared as ordered rules and compiled per role into an
Ability that can be queried at request time.

Rules
=====
    Rule("read", "User", fields=("email",))        # grant, narrowed to fields
    Rule("update", "Post", conditions={"author_id": 7})  # grant, per instance
    Rule("delete", "Post", inverted=True, reason="Archived")  # denial
    Rule("manage", "all")                          # everything

- "manage" is the wildcard action, "all" the wildcard subject.
- Among the rules that apply, the last one declared wins.

Checks
======
    ability = Ability(rules)

    ability.can("read", "User")
    ability.can("update", "Post", post)            # instance-level
    ability.can("read", "User", field="email")     # field-level
    ability.check("read", "User")                  # PolicyDecision, no raise
    ability.throw_unless_can("read", "User")       # AuthorizationError

Fields
======
    ability.permitted_fields("read", "User", ["id", "email"])
    ordered_permitted_fields(ability, "read", "User", User.field_names())

Roles
=====
    registry = AbilityRegistry.build_all({"admin": [...], "guest": [...]})
    registry.lookup_or_default("editor", "guest")

In routes
=========
    @router.get("/users")
    async def list_users(ability: CurrentAbility):
        ability.throw_unless_can("read", "User")
"""

from .errors import AuthorizationError, RuleValidationError, DEFAULT_MESSAGE
from .rules import Rule, MANAGE, ALL
from .index import RuleIndex
from .decision import PolicyDecision
from .ability import Ability
from .fields import (
    FieldPermissionResolver,
    permitted_fields,
    ordered_permitted_fields,
)
from .registry import AbilityRegistry, UnknownRoleError
from .dependencies import (
    AbilityRegistryDep,
    CurrentAbility,
    get_ability_registry,
    get_current_ability,
    get_requested_role,
    require_ability,
)

__all__ = [
    # Errors
    "AuthorizationError",
    "RuleValidationError",
    "UnknownRoleError",
    "DEFAULT_MESSAGE",
    # Rules
    "Rule",
    "MANAGE",
    "ALL",
    "RuleIndex",
    # Evaluation
    "Ability",
    "PolicyDecision",
    "FieldPermissionResolver",
    "permitted_fields",
    "ordered_permitted_fields",
    # Registry
    "AbilityRegistry",
    # Dependencies
    "AbilityRegistryDep",
    "CurrentAbility",
    "get_ability_registry",
    "get_current_ability",
    "get_requested_role",
    "require_ability",
]
