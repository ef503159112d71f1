"""
Base model classes and mixins.

- TimestampMixin: created_at, updated_at
- UUIDMixin: UUID primary key

Column types are the dialect-neutral ones (Uuid, JSON) so the same models
run on SQLite in development/tests and on PostgreSQL in production.
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4
from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }

    @classmethod
    def field_names(cls) -> list[str]:
        """Column attribute names, in declaration order."""
        return [column.key for column in cls.__table__.columns]

    def to_dict(self, fields: list[str] | None = None) -> dict[str, Any]:
        """Convert model to dictionary, optionally restricted to fields."""
        names = fields if fields is not None else self.field_names()
        return {name: getattr(self, name) for name in names}


class TimestampMixin:
    """
    Mixin for created_at and updated_at timestamps.

    All timestamps are stored in UTC (timezone-aware).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class UUIDMixin:
    """Mixin for UUID primary key (v4)."""

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
