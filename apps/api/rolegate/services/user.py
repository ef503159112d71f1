"""
User service.
"""

from collections.abc import Sequence
from typing import Any
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rolegate.models.user import User


class UserService:
    """User queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        stmt = select(User).where(User.email == email)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_projected(self, fields: Sequence[str]) -> list[dict[str, Any]]:
        """
        List users, selecting only the given columns.

        Unknown field names are ignored. With no selectable columns there
        is nothing to show and the result is empty.
        """
        known = set(User.field_names())
        columns = [getattr(User, name) for name in fields if name in known]
        if not columns:
            return []

        stmt = select(*columns).order_by(User.email)
        result = await self.db.execute(stmt)
        return [dict(row._mapping) for row in result]
