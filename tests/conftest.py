"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from coddy_public.core.config import Settings, get_settings
from coddy_public.infrastructure.auth import PasswordHasher, TokenService
from coddy_public.infrastructure.persistence.database import Base, get_db_session
from coddy_public.infrastructure.persistence.models import UserModel  # noqa: F401

TEST_SECRET = "test-secret-key-with-at-least-32-bytes!!"


def make_settings(**overrides) -> Settings:
    """Settings for tests: in-memory database and cheap hashing."""
    values = {
        "environment": "testing",
        "database_url": "sqlite+aiosqlite:///:memory:",
        "jwt_secret": TEST_SECRET,
        "login_failure_delay_ms": 0,
        "password_hash_time_cost": 1,
        "password_hash_memory_cost": 8,
        "password_hash_parallelism": 1,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def settings_factory():
    """Build test settings with selected overrides."""
    return make_settings


@pytest.fixture
def password_hasher(settings: Settings) -> PasswordHasher:
    return PasswordHasher.from_settings(settings)


@pytest.fixture
def token_service(settings: Settings) -> TokenService:
    return TokenService.from_settings(settings)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, settings: Settings
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden settings and database dependency."""
    from coddy_public.infrastructure.api.app import app

    async def override_get_db_session():
        yield db_session

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_db_session] = override_get_db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
