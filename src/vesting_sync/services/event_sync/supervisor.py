"""Top-level owner of the sync loop and the decision to terminate."""

import asyncio
import logging

from vesting_sync.core.config import Settings
from vesting_sync.core.exceptions import FatalSyncError
from vesting_sync.infrastructure.blockchain.connection import ChainConnection
from vesting_sync.infrastructure.blockchain.contracts import load_abi
from vesting_sync.services.event_logger.logger import EventLogger
from vesting_sync.services.event_sync.checkpoint import CheckpointStore
from vesting_sync.services.event_sync.engine import (
    EventPersister,
    RangeSyncEngine,
    Sleep,
)
from vesting_sync.services.event_sync.oracle import ChainHeightOracle
from vesting_sync.services.event_sync.scheduler import SchedulerLoop

logger = logging.getLogger(__name__)

EXIT_FATAL = 1


class SyncSupervisor:
    """Wires the sync components together and runs them.

    Fatal errors end the run with a non-zero exit code; recovery is left to
    the process manager, which restarts the process at checkpoint load.
    """

    def __init__(
        self,
        settings: Settings,
        persister: EventPersister | None = None,
        connection: ChainConnection | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings = settings
        self.persister = persister or EventLogger()
        self.connection = connection
        self._sleep = sleep
        self.scheduler: SchedulerLoop | None = None

    async def build(self) -> SchedulerLoop:
        """Load inputs and assemble the scheduler.

        Raises:
            ConfigUnavailable: Checkpoint document or ABI is unusable
        """
        store = CheckpointStore(self.settings.checkpoint_path)
        checkpoint = await store.load()

        if self.connection is None:
            abi = load_abi(self.settings.abi_path)
            self.connection = ChainConnection.from_settings(self.settings, abi)

        engine = RangeSyncEngine(
            connection=self.connection,
            persister=self.persister,
            checkpoint_store=store,
            fetch_pause_seconds=self.settings.fetch_pause_seconds,
            sleep=self._sleep,
        )
        self.scheduler = SchedulerLoop(
            connection=self.connection,
            oracle=ChainHeightOracle(self.connection),
            engine=engine,
            checkpoint_store=store,
            checkpoint=checkpoint,
            sleep=self._sleep,
        )
        return self.scheduler

    async def run(self, max_cycles: int | None = None) -> int:
        """Run until a fatal error and return the process exit code."""
        try:
            scheduler = await self.build()
            await scheduler.run(max_cycles=max_cycles)
        except FatalSyncError as e:
            logger.critical(
                f"{type(e).__name__}: {e}. Exiting for restart", exc_info=e
            )
            return EXIT_FATAL
        return 0
