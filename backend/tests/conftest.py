"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("SEED_DEFAULT_RULES", "false")
os.environ.setdefault("AUDIT_URL", "")

from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.deps import get_llm_provider, get_session
from app.main import app
from app.models import domain  # noqa: F401  registers tables on Base.metadata
from app.services.rule_store import RuleStore, rule_cache
from helpers import FakeLLMProvider

# Test database
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(autouse=True)
def reset_rule_cache():
    """The active-rule snapshot is process-wide; start every test cold."""
    rule_cache.invalidate()
    yield
    rule_cache.invalidate()


@pytest.fixture
async def engine():
    eng = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database and session"""
    TestingSessionLocal = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
async def seeded_rules(db_session):
    """Default rule set stored in the test database."""
    store = RuleStore(db_session)
    await store.seed_default_rules()
    return await store.get_active_rules()


@pytest.fixture
def llm_provider() -> Optional[FakeLLMProvider]:
    """LLM provider handed to the API; override in a module to turn LLM features on."""
    return None


@pytest.fixture
async def client(db_session, llm_provider) -> AsyncGenerator[AsyncClient, None]:
    """Create API client with test database"""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_llm_provider] = lambda: llm_provider

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
