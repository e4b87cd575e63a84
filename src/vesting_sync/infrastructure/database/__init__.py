"""Database infrastructure module."""

from vesting_sync.infrastructure.database.session import (
    create_async_db_engine,
    get_async_engine,
    get_session_factory,
)

__all__ = [
    "create_async_db_engine",
    "get_async_engine",
    "get_session_factory",
]
