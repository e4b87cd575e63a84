"""Event persistence service module."""

from vesting_sync.services.event_logger.logger import EventLogger

__all__ = [
    "EventLogger",
]
