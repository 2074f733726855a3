"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Test Database Configuration:
    Tests use an in-memory SQLite database (aiosqlite) created fresh for
    every test, so no test can see another test's notes.
"""

import os
from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-testing-purposes"

# Secrets normally come from config/.env; environment variables win over it.
os.environ.setdefault("JWT_SECRET", TEST_JWT_SECRET)

from notesync.backend.events.feed import reset_change_feed  # noqa: E402
from notesync.backend.models.base import Base  # noqa: E402


# =============================================================================
# Change Feed Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_change_feed():
    """Every test starts with a change feed that has no subscribers."""
    reset_change_feed()
    yield
    reset_change_feed()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the note store tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(
    db_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a database session for a single test.

    Usage:
        async def test_put_note(db_session: AsyncSession):
            repo = NoteRepository(db_session)
            await repo.put("uid-1", "note-1", title="t", body="b")
    """
    async with db_session_factory() as session:
        yield session
        await session.rollback()
