import os

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import Base + all models so metadata is complete
from mcp_registry.models import Base  # noqa: F401

from mcp_registry.core.db import get_db
from mcp_registry.main import app
from mcp_registry.services.rate_limit import RateLimitResult, get_rate_limiter

from tests.fixtures_seed import admin_user, make_server, seed_user  # noqa: F401


def _test_db_url() -> str:
    # In-memory SQLite unless a real database is provided
    return os.getenv("DATABASE_URL_TEST", "sqlite+aiosqlite://")


class FakeRateLimiter:
    """In-process stand-in for the Redis limiter: counts hits per key."""

    def __init__(self):
        self.hits: dict[str, int] = {}

    async def allow(self, *, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        self.hits[key] = self.hits.get(key, 0) + 1
        val = self.hits[key]
        return RateLimitResult(allowed=val <= limit, remaining=max(0, limit - val), reset_seconds=window_seconds)


@pytest.fixture
async def async_engine():
    url = _test_db_url()
    if url.startswith("sqlite"):
        engine = create_async_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    else:
        engine = create_async_engine(url, pool_pre_ping=True)
    try:
        # Fresh schema per test
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(async_engine):
    session_factory = async_sessionmaker(bind=async_engine, expire_on_commit=False, class_=AsyncSession)
    async with session_factory() as session:
        yield session


@pytest.fixture
def rate_limiter():
    return FakeRateLimiter()


@pytest.fixture
async def client(db_session: AsyncSession, rate_limiter: FakeRateLimiter):
    """
    HTTP client that uses the test DB session via dependency override.
    """
    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
