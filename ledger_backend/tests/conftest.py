"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from ledger_backend.app.main import app
from ledger_backend.app.db.session import get_db, Base
from ledger_backend.app.core.security import get_password_hash
from ledger_backend.app.domain.ledger.locks import SellLockRegistry, sell_locks
from ledger_backend.app.domain.ledger.transition_engine import LedgerTransitionEngine
from ledger_backend.app.models.enums import UserRole
from ledger_backend.app.models.user import User
import ledger_backend.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture
async def db_engine():
    """Fresh in-memory database per test."""
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


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


# Shared session for fixture data creation and service-level tests
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


class MockRedis:
    """In-memory stand-in for the revocation list; `down` simulates an outage."""

    def __init__(self):
        self.store = {}
        self.down = False

    def _check(self):
        if self.down:
            raise ConnectionError("redis is down")

    async def ping(self):
        self._check()
        return True

    async def set(self, key, value, ex=None):
        self._check()
        self.store[key] = value
        return True

    async def exists(self, key):
        self._check()
        return 1 if key in self.store else 0

    async def aclose(self):
        self.store = {}


@pytest.fixture
def mock_redis():
    """Patch the global redis client used for token revocation."""
    original_client = redis_client_module.redis_client
    client = MockRedis()
    redis_client_module.redis_client = client
    yield client
    redis_client_module.redis_client = original_client


@pytest.fixture
async def client(session_factory, mock_redis):
    """Async client for testing, bound to the per-test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    sell_locks.clear()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
    sell_locks.clear()


# ---------------------------------------------------------------------------
# Ledger fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def user_factory(db_session):
    """Create users directly in the database."""
    counter = {"n": 0}

    async def create(role: UserRole = UserRole.ADMIN) -> User:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@shop.com",
            username=f"user{counter['n']}",
            hashed_password=get_password_hash("password123"),
            role=role,
            is_active=True
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return create


@pytest.fixture
async def owner(user_factory):
    return await user_factory()


@pytest.fixture
async def other_user(user_factory):
    return await user_factory()


@pytest.fixture
def ledger_engine(db_session):
    """Transition engine with its own lock registry."""
    return LedgerTransitionEngine(db_session, locks=SellLockRegistry())
