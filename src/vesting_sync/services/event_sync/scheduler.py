"""Outer loop that keeps the checkpoint following the chain head."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from vesting_sync.core.exceptions import FatalSyncError
from vesting_sync.infrastructure.blockchain.connection import ChainConnection
from vesting_sync.services.event_sync.checkpoint import Checkpoint, CheckpointStore
from vesting_sync.services.event_sync.engine import RangeSyncEngine, Sleep
from vesting_sync.services.event_sync.oracle import ChainHeightOracle

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    """Scheduler loop state."""

    CATCHING_UP = "catching_up"
    IDLE_WAIT = "idle_wait"
    FATAL = "fatal"


@dataclass
class SchedulerStats:
    """Statistics for the scheduler loop."""

    cycles: int = 0
    latest_chain_block: int | None = None
    oracle_failures: int = 0
    reorg_clamps: int = 0
    last_error: str = ""
    last_synced_at: datetime | None = None
    started_at: datetime | None = None


class SchedulerLoop:
    """Re-evaluates the gap between checkpoint and chain head forever.

    One cycle reads the head height and then either reconnects and waits
    (node unreachable), clamps the checkpoint down (head behind checkpoint),
    runs the engine (head ahead) or waits (caught up). Engine and checkpoint
    failures move the loop to ``FATAL`` and are re-raised.
    """

    def __init__(
        self,
        connection: ChainConnection,
        oracle: ChainHeightOracle,
        engine: RangeSyncEngine,
        checkpoint_store: CheckpointStore,
        checkpoint: Checkpoint,
        sleep: Sleep = asyncio.sleep,
    ):
        self.connection = connection
        self.oracle = oracle
        self.engine = engine
        self.checkpoint_store = checkpoint_store
        self.checkpoint = checkpoint
        self._sleep = sleep
        self._state = SchedulerState.CATCHING_UP
        self._stats = SchedulerStats()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def stats(self) -> SchedulerStats:
        return self._stats

    async def run(self, max_cycles: int | None = None) -> None:
        """Run cycles until a fatal error, or ``max_cycles`` when given."""
        self._stats.started_at = self._stats.started_at or datetime.now(timezone.utc)
        logger.info(
            f"Starting sync loop from block {self.checkpoint.synced_block_height}"
        )

        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            state = await self.run_cycle()
            cycles += 1
            if state == SchedulerState.IDLE_WAIT:
                await self.idle_wait()

    async def run_cycle(self) -> SchedulerState:
        """Evaluate one cycle and return the next state."""
        self._stats.cycles += 1
        latest = await self.oracle.current_height()

        if latest is None:
            self._stats.oracle_failures += 1
            logger.warning("Failed to connect to the chain node, reconnecting")
            await self.connection.reinit()
            self._state = SchedulerState.IDLE_WAIT
            return self._state

        self._stats.latest_chain_block = latest
        synced = self.checkpoint.synced_block_height

        if latest < synced:
            logger.warning(
                f"Checkpoint {synced} is ahead of chain head {latest}, moving it back"
            )
            try:
                self.checkpoint = await self.checkpoint_store.update_height(
                    self.checkpoint, latest
                )
            except FatalSyncError as e:
                self._fail(e)
                raise
            self._stats.reorg_clamps += 1
            self._state = SchedulerState.CATCHING_UP
            return self._state

        if latest > synced:
            logger.info(f"{synced} < {latest}, catching up")
            try:
                self.checkpoint = await self.engine.sync(self.checkpoint, latest)
            except FatalSyncError as e:
                # Sub-ranges completed before the failure stay persisted
                if self.engine.last_checkpoint is not None:
                    self.checkpoint = self.engine.last_checkpoint
                self._fail(e)
                raise
            self._stats.last_synced_at = datetime.now(timezone.utc)
            self._state = SchedulerState.CATCHING_UP
            return self._state

        logger.info(f"{latest} is synced")
        self._stats.last_synced_at = datetime.now(timezone.utc)
        self._state = SchedulerState.IDLE_WAIT
        return self._state

    def _fail(self, error: FatalSyncError) -> None:
        self._stats.last_error = str(error)
        self._state = SchedulerState.FATAL

    async def idle_wait(self) -> None:
        """Sleep for the checkpoint's interval, then resume catching up."""
        await self._sleep(self.checkpoint.sleep_interval)
        self._state = SchedulerState.CATCHING_UP

    def status(self) -> dict[str, Any]:
        """Snapshot of the loop for monitoring."""
        stats = self._stats
        synced = self.checkpoint.synced_block_height
        latest = stats.latest_chain_block
        uptime = (
            (datetime.now(timezone.utc) - stats.started_at).total_seconds()
            if stats.started_at
            else 0.0
        )
        return {
            "state": self._state.value,
            "synced_block_height": synced,
            "latest_block": latest,
            "blocks_behind": max(latest - synced, 0) if latest is not None else None,
            "synced": latest is not None and synced >= latest,
            "cycles": stats.cycles,
            "sub_ranges_synced": self.engine.stats.sub_ranges_synced,
            "events_fetched": self.engine.stats.events_fetched,
            "batches_logged": self.engine.stats.batches_logged,
            "oracle_failures": stats.oracle_failures,
            "reorg_clamps": stats.reorg_clamps,
            "client_reinits": self.connection.reinit_count,
            "last_error": stats.last_error,
            "last_synced_at": (
                stats.last_synced_at.isoformat() if stats.last_synced_at else None
            ),
            "uptime_seconds": uptime,
        }
