"""
RBAC Models - Roles and their ordered permission rules.

A role owns an ordered list of permissions. Order is significant: later
rules override earlier ones when abilities are evaluated, so the position
of each permission within its role is stored explicitly on the link row
rather than inferred from insertion time.

Usage:
    guest = Role(name="guest")
    guest.permissions.append(Permission(action="read", subject="User", fields=["email"]))

    admin = Role(name="admin")
    admin.permissions.append(Permission(action="manage", subject="all"))

    admin.rules  # [<Rule grant manage all>]
"""

from typing import Any
from uuid import UUID
from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String
from sqlalchemy.ext.associationproxy import AssociationProxy, association_proxy
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rolegate.core.auth.rules import Rule

from .base import Base, TimestampMixin, UUIDMixin


class RolePermission(Base):
    """Link between a role and one of its permissions, with its position."""

    __tablename__ = "role_permissions"

    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    permission_id: Mapped[UUID] = mapped_column(
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    role: Mapped["Role"] = relationship(back_populates="permission_links")
    permission: Mapped["Permission"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<RolePermission role={self.role_id} permission={self.permission_id} #{self.position}>"


class Role(Base, UUIDMixin, TimestampMixin):
    """Named role owning an ordered list of permissions."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    permission_links: Mapped[list[RolePermission]] = relationship(
        back_populates="role",
        order_by=RolePermission.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    permissions: AssociationProxy[list["Permission"]] = association_proxy(
        "permission_links",
        "permission",
        creator=lambda permission: RolePermission(permission=permission),
    )

    @property
    def rules(self) -> list[Rule]:
        """This role's permissions as rules, in declaration order."""
        return [permission.to_rule() for permission in self.permissions]

    def __repr__(self) -> str:
        return f"<Role {self.name}>"


class Permission(Base, UUIDMixin, TimestampMixin):
    """
    A stored permission rule.

    Examples:
        Permission(action="manage", subject="all")
        Permission(action="read", subject="User", fields=["email"])
        Permission(action="update", subject="Post", conditions={"status": "draft"})
        Permission(action="delete", subject="Post", inverted=True, reason="Posts are archived")
    """

    __tablename__ = "permissions"

    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    fields: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    conditions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    inverted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    @classmethod
    def from_rule(cls, rule: Rule) -> "Permission":
        return cls(**rule.to_dict())

    def to_rule(self) -> Rule:
        """
        Convert to a validated Rule.

        Raises:
            RuleValidationError: If the stored record is malformed
        """
        return Rule(
            action=self.action,
            subject=self.subject,
            fields=self.fields,
            conditions=self.conditions,
            inverted=bool(self.inverted),
            reason=self.reason,
        )

    def __repr__(self) -> str:
        kind = "deny" if self.inverted else "grant"
        return f"<Permission {kind} {self.action}:{self.subject}>"
