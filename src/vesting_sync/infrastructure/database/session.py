"""Database session management."""

from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from vesting_sync.core.config import get_settings


def create_async_db_engine(database_url: str | None = None) -> AsyncEngine:
    """Create asynchronous database engine."""
    settings = get_settings()
    return create_async_engine(
        database_url or settings.database_url,
        pool_size=5,
        max_overflow=5,
        pool_recycle=1800,
        pool_pre_ping=True,
        echo=settings.debug,
    )


@lru_cache
def get_async_engine() -> AsyncEngine:
    """Get the process-wide engine, created on first use."""
    return create_async_db_engine()


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the process-wide session factory."""
    return async_sessionmaker(
        bind=get_async_engine(),
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )
