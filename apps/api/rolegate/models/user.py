"""
User model.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin


class User(Base, UUIDMixin):
    """
    User account.

    Every column is a candidate for field-level permissions: responses are
    projected down to whatever the caller's ability permits.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
