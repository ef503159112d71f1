"""
Pytest fixtures for testing.

Provides:
- Async database session on in-memory SQLite
- Ability registry built from the default seed roles
- Test client wired to both
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from rolegate.main import app
from rolegate.models.base import Base
from rolegate.api.dependencies.database import get_db
from rolegate.core.auth import AbilityRegistry, Rule
from rolegate.services.rbac import RBACService


# Test database URL (SQLite in-memory for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create database session with automatic rollback.
    """
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def rbac_service(db: AsyncSession) -> RBACService:
    return RBACService(db)


@pytest_asyncio.fixture
async def seeded(rbac_service: RBACService) -> RBACService:
    """Database holding the default admin/guest roles and one user."""
    await rbac_service.seed_defaults()
    await rbac_service.db.commit()
    return rbac_service


@pytest_asyncio.fixture
async def registry(seeded: RBACService) -> AbilityRegistry:
    return AbilityRegistry.build_all(
        await seeded.load_role_rules(),
        default_message="Not authorized",
    )


@pytest_asyncio.fixture(scope="function")
async def client(db: AsyncSession, registry: AbilityRegistry) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with database session and ability registry overrides.
    """

    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.state.abilities = registry

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
    del app.state.abilities


# ============ Rule Fixtures ============


@pytest.fixture
def admin_rules() -> list[Rule]:
    return [Rule("manage", "all")]


@pytest.fixture
def guest_rules() -> list[Rule]:
    return [Rule("read", "User", fields=["email"])]
