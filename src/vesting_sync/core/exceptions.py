"""Error taxonomy for the synchronizer.

Fatal errors propagate to the supervisor, which terminates the process so an
external process manager can restart it from the last persisted checkpoint.
"""

from typing import Any


class SyncError(Exception):
    """Base class for synchronizer errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({details})"


class TransientConnectivity(SyncError):
    """Chain node could not be reached. Recovered by reconnecting."""


class FatalSyncError(SyncError):
    """Error that must terminate the process."""


class ConfigUnavailable(FatalSyncError):
    """Checkpoint document or ABI file is missing or malformed."""


class PersistFailure(FatalSyncError):
    """Checkpoint document could not be written."""


class EventFetchFailure(FatalSyncError):
    """Event log query for a sub-range failed."""


class DownstreamPersistFailure(FatalSyncError):
    """Persistence collaborator rejected an event batch."""
