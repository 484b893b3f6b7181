"""Async engine and session handling for the SQL repository.

PostgreSQL (asyncpg) in deployments; any SQLAlchemy async URL works, which
is how the tests run against SQLite.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskgraph.core.config import get_settings
from taskgraph.core.exceptions import TaskGraphError

# Process-wide engine, created from DATABASE_URL on first use
_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None

# Connection pool sizing for server databases
POOL_OPTIONS = {
    "pool_size": 10,
    "max_overflow": 20,
    "pool_timeout": 30,
    "pool_recycle": 3600,
    "pool_pre_ping": True,
}


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for a database URL.

    SQLite URLs get SQLAlchemy's default pool, everything else the
    ``POOL_OPTIONS`` sizing.

    Args:
        url: SQLAlchemy async URL, e.g. ``postgresql+asyncpg://...``.
        echo: Log every SQL statement.

    Returns:
        AsyncEngine instance.

    Example:
        >>> engine = build_engine("sqlite+aiosqlite://")
    """
    options = {} if url.startswith("sqlite") else POOL_OPTIONS
    return create_async_engine(url, echo=echo, **options)


def get_engine() -> AsyncEngine:
    """
    Get the process-wide engine, creating it from settings.

    Raises:
        TaskGraphError: If DATABASE_URL is not configured.
    """
    global _engine

    if _engine is None:
        settings = get_settings()
        url = settings.database_url_async

        if url is None:
            raise TaskGraphError("DATABASE_URL is not configured")

        _engine = build_engine(url, echo=settings.taskgraph_debug)
        logger.info("Database engine created")

    return _engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session maker whose objects stay readable after commit."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get the session maker bound to the process-wide engine."""
    global _session_maker

    if _session_maker is None:
        _session_maker = create_session_maker(get_engine())
        logger.debug("Session maker created")

    return _session_maker


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Run one unit of work: commit when the block exits, roll back if it raises.

    Args:
        session_maker: Session factory to open the session from.

    Yields:
        AsyncSession instance.
    """
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Open a unit of work on the process-wide database.

    Example:
        >>> async with get_db_session() as session:
        ...     await session.execute(select(TaskRecord))
    """
    async with session_scope(get_session_maker()) as session:
        yield session


async def init_db(engine: AsyncEngine | None = None) -> None:
    """
    Create the ``tasks`` and ``task_dependencies`` tables if missing.

    Args:
        engine: Engine to use. Defaults to the process-wide engine.
    """
    from taskgraph.storage.models import Base

    engine = engine or get_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")


async def close_db() -> None:
    """Dispose of the process-wide engine, if one was created."""
    global _engine, _session_maker

    if _engine is None:
        return

    await _engine.dispose()
    _engine = None
    _session_maker = None
    logger.info("Database connections closed")


async def health_check() -> bool:
    """
    Check that the configured database answers a trivial query.

    Returns:
        True if reachable. Failures are logged, never raised.
    """
    try:
        async with get_db_session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
    return True
