"""Database engine and session maker for job actors."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from transfer_sync.config.settings import settings


def create_task_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create an engine for use inside tasks.

    NullPool: each actor run owns its event loop, pooled connections
    would outlive it.
    """
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.database_echo,
        poolclass=NullPool,
    )


def create_task_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create a session maker for tasks."""
    if engine is None:
        engine = create_task_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
