"""Checkpointed event sync service module."""

from vesting_sync.services.event_sync.checkpoint import (
    Checkpoint,
    CheckpointStore,
)
from vesting_sync.services.event_sync.engine import (
    BlockRange,
    EngineStats,
    EventPersister,
    RangeSyncEngine,
    plan_sub_ranges,
    sub_range_count,
)
from vesting_sync.services.event_sync.oracle import ChainHeightOracle
from vesting_sync.services.event_sync.scheduler import (
    SchedulerLoop,
    SchedulerState,
    SchedulerStats,
)
from vesting_sync.services.event_sync.supervisor import EXIT_FATAL, SyncSupervisor

__all__ = [
    # Checkpoint
    "Checkpoint",
    "CheckpointStore",
    # Oracle
    "ChainHeightOracle",
    # Engine
    "BlockRange",
    "EngineStats",
    "EventPersister",
    "RangeSyncEngine",
    "plan_sub_ranges",
    "sub_range_count",
    # Scheduler
    "SchedulerLoop",
    "SchedulerState",
    "SchedulerStats",
    # Supervisor
    "EXIT_FATAL",
    "SyncSupervisor",
]
