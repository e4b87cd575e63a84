"""Base repository for SQLAlchemy models."""

from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from vesting_sync.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic async repository bound to one session."""

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with async session.

        @param session - SQLAlchemy async session
        """
        self.session = session
