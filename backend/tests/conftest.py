"""
FlagArchive Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:   AsyncMock standing in for AsyncSession
    ├── mock_repository:   AsyncMock following the EntityRepository contract
    ├── db_engine:         Fresh in-memory SQLite database with all tables
    ├── db_session:        AsyncSession on db_engine (no auto-commit)
    ├── session_factory:   Session factory on db_engine, for multi-session tests
    ├── sample_entity:     Unsaved FlagEntity with every field set
    └── test_client:       HTTPX AsyncClient wired to the app and db_engine
"""

import os

# Must run before any flagarchive import: settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["DB_RETRY_MIN_WAIT"] = "0"
os.environ["DB_RETRY_MAX_WAIT"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from flagarchive.database import get_db_session, init_models  # noqa: E402
from flagarchive.models.entity import FlagEntity  # noqa: E402
from flagarchive.repositories.base import EntityRepository  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Services only hand the session to their repository factory, so most
    tests never configure it.
    """
    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_repository():
    """An AsyncMock that satisfies the EntityRepository interface."""
    return AsyncMock(spec=EntityRepository)


@pytest.fixture
def sample_entity():
    created = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
    return FlagEntity(
        id=1,
        name="Japan",
        unique_id="JP",
        category="country",
        alt_parent_id="ASIA",
        description="Hinomaru",
        created_at=created,
        updated_at=created,
    )


@pytest_asyncio.fixture
async def db_engine():
    """
    A private in-memory database per test.

    StaticPool keeps the single connection alive, otherwise every new
    connection would see an empty database.
    """
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the app in-process.

    get_db_session is overridden so each request gets a session on the test
    database, with the same commit/rollback behavior as production.
    """
    from flagarchive.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
