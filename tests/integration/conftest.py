"""
Shared fixtures for integration tests.

Provides an in-memory SQLite database with the transfer_event schema
for store-backed tests.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from transfer_sync.models import Base


@pytest.fixture
async def engine():
    """
    In-memory SQLite engine with all tables created.

    StaticPool keeps one connection so every session sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session maker bound to the in-memory engine."""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Single session for repository tests."""
    async with session_factory() as session:
        yield session
