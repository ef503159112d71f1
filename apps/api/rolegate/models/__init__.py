"""
Database models.
"""

from .base import Base, TimestampMixin, UUIDMixin
from .user import User
from .rbac import Role, Permission, RolePermission

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Models
    "User",
    "Role",
    "Permission",
    "RolePermission",
]
