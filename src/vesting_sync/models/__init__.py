"""Database models."""

from vesting_sync.models.base import Base, TimestampMixin
from vesting_sync.models.event_log import EventLog

__all__ = [
    "Base",
    "TimestampMixin",
    "EventLog",
]
