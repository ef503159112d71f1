"""
Ability registry - role name to compiled Ability.

Built once from the role/permission store at startup and rebuilt on
reload. A reload compiles the complete new mapping first and then
publishes it with a single reference swap, so concurrent lookups see
either the old mapping or the new one, never a partial one.

Usage:
    registry = AbilityRegistry.build_all({
        "admin": [Rule("manage", "all")],
        "guest": [Rule("read", "User", fields=("email",))],
    })

    ability = registry.lookup_or_default(role_name, "guest")
"""

import threading
from collections.abc import Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Any

import structlog

from .ability import Ability
from .index import RuleIndex
from .rules import Rule

logger = structlog.get_logger()

RoleRules = Mapping[str, Sequence[Rule | Mapping[str, Any]]]


class UnknownRoleError(LookupError):
    """Neither the requested role nor its fallback has an ability."""

    def __init__(self, role: str, fallback: str | None = None):
        self.role = role
        self.fallback = fallback
        tried = [role] if fallback is None else [role, fallback]
        super().__init__(f"No ability registered for roles: {tried}")


class AbilityRegistry:
    """
    Read-mostly role → Ability lookup.

    Lookups never lock; only reloads are serialized.
    """

    def __init__(
        self,
        abilities: Mapping[str, Ability] | None = None,
        *,
        default_message: str | None = None,
    ):
        self._abilities: Mapping[str, Ability] = MappingProxyType(dict(abilities or {}))
        self._default_message = default_message
        self._reload_lock = threading.Lock()

    @classmethod
    def build_all(
        cls,
        role_rules: RoleRules,
        *,
        default_message: str | None = None,
    ) -> "AbilityRegistry":
        """
        Compile an ability for every role.

        Raises:
            RuleValidationError: If any role has malformed rules
        """
        registry = cls(default_message=default_message)
        registry.reload(role_rules)
        return registry

    def _compile(self, role_rules: RoleRules) -> dict[str, Ability]:
        abilities: dict[str, Ability] = {}
        for role, rules in role_rules.items():
            if not isinstance(role, str) or not role:
                raise ValueError(f"Role name must be a non-empty string, got {role!r}")
            abilities[role] = Ability(
                RuleIndex.compile(rules),
                default_message=self._default_message,
            )
        return abilities

    def reload(self, role_rules: RoleRules) -> None:
        """Replace every ability at once."""
        with self._reload_lock:
            abilities = self._compile(role_rules)
            self._abilities = MappingProxyType(abilities)

        logger.info(
            "Ability registry loaded",
            roles=sorted(abilities),
            rule_count=sum(len(ability.rules) for ability in abilities.values()),
        )

    # ============================================================
    # LOOKUP
    # ============================================================

    def lookup(self, role: str) -> Ability | None:
        return self._abilities.get(role)

    def lookup_or_default(self, role: str | None, fallback: str) -> Ability:
        """
        Ability for role, else for fallback.

        Raises:
            UnknownRoleError: If neither role is registered
        """
        abilities = self._abilities
        if role is not None and role in abilities:
            return abilities[role]
        if fallback in abilities:
            return abilities[fallback]
        raise UnknownRoleError(role or "", fallback)

    @property
    def abilities(self) -> Mapping[str, Ability]:
        """Read-only snapshot of the current mapping."""
        return self._abilities

    @property
    def roles(self) -> list[str]:
        return sorted(self._abilities)

    def __contains__(self, role: object) -> bool:
        return role in self._abilities

    def __len__(self) -> int:
        return len(self._abilities)

    def __iter__(self) -> Iterator[str]:
        return iter(self.roles)

    def __repr__(self) -> str:
        return f"<AbilityRegistry roles={self.roles}>"
