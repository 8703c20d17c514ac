"""
Pytest configuration and fixtures
Shared test setup for all test modules
"""

import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.database import get_db
from app.core.config import settings
from app.db.models.repository import Repository
from app.db import models  # noqa: F401

from fakes import FakeProvider

# Test database URL
# A single shared in-memory SQLite connection per test
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create clean database for each test"""

    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestSessionLocal = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    await test_engine.dispose()


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def github_token(monkeypatch) -> str:
    """Configure a hosting provider token"""
    monkeypatch.setattr(settings, "GITHUB_TOKEN", "ghp_test_token")
    return "ghp_test_token"


@pytest.fixture
def no_github_token(monkeypatch):
    monkeypatch.setattr(settings, "GITHUB_TOKEN", None)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
async def test_repository(db_session: AsyncSession) -> Repository:
    """Create test repository"""

    repo = Repository(
        name="web-app",
        full_name="acme/web-app",
        url="https://github.com/acme/web-app",
        provider="github",
        default_branch="main",
    )

    db_session.add(repo)
    await db_session.commit()
    await db_session.refresh(repo)

    return repo
