"""
Database connection and session management.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)

from sqlalchemy.pool import StaticPool

from rolegate.core.config import settings


def _engine_options(url: str) -> dict:
    # An in-memory SQLite database lives only as long as its connection,
    # so every session must share one.
    if url.startswith("sqlite") and ":memory:" in url:
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {}


# Create async engine
engine = create_async_engine(
    settings.database.url,
    echo=settings.database.echo,
    **_engine_options(settings.database.url),
)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize database (create tables)."""
    from .base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
