"""
Test infrastructure for the blog platform API.

Strategy
--------
- SQLite in-memory via aiosqlite: no running Postgres needed.  SQLite
  understands the same ``INSERT .. ON CONFLICT DO UPDATE`` and
  ``row_number() OVER`` the reaction store relies on, and ignores
  ``FOR UPDATE`` (it serializes writers anyway).
- StaticPool makes every session share the one in-memory connection.
- The app's get_db dependency is overridden to use the test engine.
- Tables are created before and dropped after each test.
- Redis is disabled by setting cache._redis = None; the CacheManager
  treats that as "always miss, never store".  The ``cached_redis``
  fixture swaps in a dict-backed client for the cache tests.
"""
import fnmatch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from blog_platform.cache import cache
from blog_platform.database import Base, get_db, run_after_commit
from blog_platform.errors import StorageError
from blog_platform.main import app
from blog_platform.middleware import install_query_counter
from helpers import make_user

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
            await run_after_commit(session)
        except SQLAlchemyError as exc:
            await session.rollback()
            raise StorageError(f"Database error: {exc.__class__.__name__}") from exc
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    cache._redis = None
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for tests that call services directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def author() -> dict:
    return make_user("author")


@pytest.fixture
def reader() -> dict:
    return make_user("reader")


class DictRedis:
    """In-memory stand-in for the few ``redis.asyncio`` calls CacheManager makes."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self.store[key] = value

    async def scan_iter(self, match: str = "*"):
        for key in list(self.store):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.store.pop(key, None)


@pytest.fixture
def cached_redis():
    """Enable the listing cache for one test, backed by a dict."""
    fake = DictRedis()
    cache._redis = fake
    yield fake
    cache._redis = None
