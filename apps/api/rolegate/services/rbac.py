"""
RBAC Service - manage roles and their permission rules.

Also the loader that feeds the ability registry: load_role_rules() reads
every role with its permissions in stored order.

Usage:
    service = RBACService(db)

    # Create a role with rules
    role = await service.create_role("editor", rules=[
        {"action": ["read", "update"], "subject": "Post"},
        {"action": "delete", "subject": "Post", "inverted": True},
    ])

    # Feed the registry
    registry = AbilityRegistry.build_all(await service.load_role_rules())
"""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.core.auth.index import RuleIndex
from rolegate.core.auth.rules import Rule
from rolegate.models.rbac import Permission, Role, RolePermission
from rolegate.models.user import User

logger = structlog.get_logger()

RuleInput = Rule | Mapping[str, Any]

# Demo data: an administrator with blanket access and an anonymous guest
# who may only see user emails.
DEFAULT_ROLES: dict[str, list[dict[str, Any]]] = {
    "admin": [{"action": "manage", "subject": "all"}],
    "guest": [{"action": "read", "subject": "User", "fields": ["email"]}],
}
DEFAULT_USERS = ["user@example.org"]


class RBACService:
    """
    Service for managing roles and permission rules.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============================================================
    # ROLE MANAGEMENT
    # ============================================================

    async def create_role(
        self,
        name: str,
        rules: Iterable[RuleInput] | None = None,
        description: str | None = None,
    ) -> Role:
        """
        Create a new role with optional rules.

        Args:
            name: Unique role name
            rules: Rules or rule records, in precedence order
            description: Role description

        Returns:
            Created Role

        Raises:
            RuleValidationError: If any rule is malformed (nothing is written)
        """
        compiled = RuleIndex.compile(rules or ()).rules

        role = Role(name=name, description=description)
        for rule in compiled:
            role.permissions.append(Permission.from_rule(rule))

        self.db.add(role)
        await self.db.flush()

        logger.info("Role created", role=name, rule_count=len(compiled))
        return role

    async def get_role_by_name(self, name: str) -> Role | None:
        """Get role by name."""
        result = await self.db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def list_roles(self) -> list[Role]:
        """List all roles, ordered by name."""
        result = await self.db.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())

    async def delete_role(self, name: str) -> bool:
        """Delete a role together with its permissions."""
        role = await self.get_role_by_name(name)
        if not role:
            return False

        permission_ids = [link.permission_id for link in role.permission_links]

        await self.db.delete(role)
        await self.db.flush()

        if permission_ids:
            still_linked = select(RolePermission.permission_id)
            await self.db.execute(
                delete(Permission)
                .where(Permission.id.in_(permission_ids))
                .where(Permission.id.not_in(still_linked))
                .execution_options(synchronize_session="fetch")
            )

        logger.info("Role deleted", role=name)
        return True

    async def add_rule_to_role(self, name: str, rule: RuleInput) -> Role | None:
        """
        Append rules to the end of a role's list.

        A record with several actions/subjects appends one rule per pair.
        """
        role = await self.get_role_by_name(name)
        if not role:
            return None

        for compiled in RuleIndex.compile([rule]).rules:
            role.permissions.append(Permission.from_rule(compiled))

        await self.db.flush()
        return role

    # ============================================================
    # LOADING
    # ============================================================

    async def load_role_rules(self) -> dict[str, list[Rule]]:
        """
        Every role's rules, in stored order.

        Raises:
            RuleValidationError: If a stored permission is malformed
        """
        roles = await self.list_roles()
        role_rules = {role.name: role.rules for role in roles}

        logger.debug("Role rules loaded", roles=sorted(role_rules))
        return role_rules

    async def seed_defaults(self) -> bool:
        """
        Create the default roles and user if no roles exist yet.

        Returns:
            True if anything was created
        """
        existing = await self.db.scalar(select(func.count()).select_from(Role))
        if existing:
            return False

        for name, rules in DEFAULT_ROLES.items():
            await self.create_role(name, rules=rules)

        for email in DEFAULT_USERS:
            self.db.add(User(email=email))

        await self.db.flush()
        logger.info("Default roles seeded", roles=sorted(DEFAULT_ROLES))
        return True
