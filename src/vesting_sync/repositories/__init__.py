"""Data access repositories."""

from vesting_sync.repositories.base import BaseRepository
from vesting_sync.repositories.event_log import EventLogRepository

__all__ = [
    "BaseRepository",
    "EventLogRepository",
]
