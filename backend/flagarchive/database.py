"""
FlagArchive Backend: Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling, provides a session
       dependency that commits on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Transaction Model:
    One session per request, one transaction per session. Every service
    operation therefore either commits all of its statements or none of
    them: a cancelled or failing request leaves no partial mutation.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from flagarchive.config import settings


# ── Identifier Range ──────────────────────────────────────────────────────
# INTEGER primary keys are 32-bit signed on PostgreSQL; no stored row can
# have an id outside 1..MAX_ID, and binding a larger value fails in the driver.
MAX_ID = 2**31 - 1


def in_id_range(value: int) -> bool:
    return 0 < value <= MAX_ID


def _engine_options() -> Dict[str, Any]:
    """
    Builds keyword arguments for create_async_engine from settings.

    SQLite (used by the test suite) rejects pool sizing, and
    `command_timeout` is an asyncpg connect argument.
    """
    options: Dict[str, Any] = {
        "echo": settings.log_level == "DEBUG",
        "pool_pre_ping": settings.db_pool_pre_ping,
    }
    if settings.is_sqlite:
        return options

    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=3600,
    )
    if "+asyncpg" in settings.database_url:
        options["connect_args"] = {"command_timeout": settings.db_command_timeout}
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine: AsyncEngine = create_async_engine(settings.database_url, **_engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: mapped objects stay readable after commit so the
# service can build responses from them.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers its table on `Base.metadata`, which `init_models()`
    uses to create the schema.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/entities/{entity_id}")
        async def get_entity(entity_id: int, db: AsyncSession = Depends(get_db_session)):
            return await entity_service.get_entity(db, entity_id)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_models(bind: AsyncEngine = engine) -> None:
    """
    Creates every table registered on Base.metadata that does not exist yet.

    Not a migration tool: existing tables are left exactly as they are.
    """
    # Registers the tables on Base.metadata
    from flagarchive.models import entity, user  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await engine.dispose()
