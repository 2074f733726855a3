"""
Database Configuration.

SQLAlchemy async engine and session management for the note store.
Uses lazy initialization to prevent import-time failures when config is missing.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from notesync.backend.core.logging import get_logger

logger = get_logger(__name__)

# Module-level state for lazy initialization
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _create_engine() -> AsyncEngine:
    """Create async SQLAlchemy engine from database.yaml."""
    from notesync.backend.core.config import get_app_config, get_database_url

    url = get_database_url()
    db_config = get_app_config().database

    engine = create_async_engine(url, echo=db_config.echo)
    logger.debug("Database engine created", dialect=engine.dialect.name)
    return engine


def get_engine() -> AsyncEngine:
    """Get the database engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = _create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory, creating it on first use."""
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_factory


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create all note store tables that do not exist yet."""
    from notesync.backend.models.base import Base

    target = engine or get_engine()
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def dispose_engine() -> None:
    """Dispose the engine and forget the cached factory."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_factory = None


async def get_db_session() -> AsyncGenerator[AsyncSession, Any]:
    """
    Dependency that provides a database session.

    Commits on success, rolls back on any exception.

    Usage in endpoints:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
