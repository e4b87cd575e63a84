"""Range sync engine: walks the unsynced gap in bounded sub-ranges."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

from vesting_sync.core.exceptions import (
    DownstreamPersistFailure,
    EventFetchFailure,
)
from vesting_sync.infrastructure.blockchain.client import ChainClient
from vesting_sync.infrastructure.blockchain.connection import ChainConnection
from vesting_sync.infrastructure.blockchain.contracts import ContractTarget
from vesting_sync.services.event_sync.checkpoint import Checkpoint, CheckpointStore

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class EventPersister(Protocol):
    """Receives every non-empty batch, once per contract per sub-range."""

    async def log_sync(
        self,
        contract_name: str,
        events: list[dict[str, Any]],
        client: ChainClient,
        duration: int,
    ) -> Any: ...


@dataclass(frozen=True)
class BlockRange:
    """Inclusive span of blocks queried in one log request."""

    from_block: int
    to_block: int

    def __post_init__(self) -> None:
        if self.from_block > self.to_block:
            raise ValueError(
                f"from_block {self.from_block} is after to_block {self.to_block}"
            )


def sub_range_count(synced_block_height: int, latest_block: int, offset: int) -> int:
    """Number of sub-ranges needed to cover the gap; zero when caught up."""
    if offset <= 0:
        raise ValueError(f"offset must be positive, got {offset}")
    gap = latest_block - synced_block_height
    if gap <= 0:
        return 0
    return -(-gap // offset)


def plan_sub_ranges(
    synced_block_height: int, latest_block: int, offset: int
) -> list[BlockRange]:
    """Split ``[synced_block_height, latest_block]`` into contiguous sub-ranges.

    Each sub-range starts where the previous one ended and spans at most
    ``offset`` blocks, so ``(100, 250, 100)`` yields ``(100, 200)`` and
    ``(200, 250)``.
    """
    if offset <= 0:
        raise ValueError(f"offset must be positive, got {offset}")

    ranges: list[BlockRange] = []
    from_block = synced_block_height
    while from_block < latest_block:
        to_block = min(from_block + offset, latest_block)
        ranges.append(BlockRange(from_block, to_block))
        from_block = to_block
    return ranges


@dataclass
class EngineStats:
    """Counters for the engine since process start."""

    sub_ranges_synced: int = 0
    events_fetched: int = 0
    batches_logged: int = 0


class RangeSyncEngine:
    """Fetches and hands off events for every contract, sub-range by sub-range.

    The checkpoint is persisted after each sub-range and only after every
    contract in it was fetched and logged. Any failure aborts the run and
    leaves the checkpoint at the start of the failed sub-range.
    """

    def __init__(
        self,
        connection: ChainConnection,
        persister: EventPersister,
        checkpoint_store: CheckpointStore,
        fetch_pause_seconds: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ):
        """Initialize range sync engine.

        Args:
            connection: Owner of the chain client and contract targets
            persister: Collaborator that stores event batches
            checkpoint_store: Checkpoint persistence
            fetch_pause_seconds: Pause between per-contract log queries
            sleep: Awaitable sleep, replaceable in tests
        """
        self.connection = connection
        self.persister = persister
        self.checkpoint_store = checkpoint_store
        self.fetch_pause_seconds = fetch_pause_seconds
        self._sleep = sleep
        self.stats = EngineStats()
        self.last_checkpoint: Checkpoint | None = None

    async def sync(self, checkpoint: Checkpoint, latest_block: int) -> Checkpoint:
        """Sync from the checkpoint up to ``latest_block``.

        Returns:
            Checkpoint persisted after the last sub-range

        Raises:
            EventFetchFailure: A log query failed
            DownstreamPersistFailure: The persister rejected a batch
            PersistFailure: The checkpoint could not be written
        """
        self.last_checkpoint = checkpoint
        ranges = plan_sub_ranges(
            checkpoint.synced_block_height, latest_block, checkpoint.offset
        )
        if not ranges:
            return checkpoint

        logger.info(
            f"Syncing blocks {ranges[0].from_block}-{ranges[-1].to_block} "
            f"in {len(ranges)} sub-ranges of up to {checkpoint.offset} blocks"
        )

        for block_range in ranges:
            await self.sync_sub_range(block_range)
            checkpoint = await self.checkpoint_store.update_height(
                checkpoint, block_range.to_block
            )
            self.last_checkpoint = checkpoint
            self.stats.sub_ranges_synced += 1
            logger.debug(f"Checkpoint advanced to {block_range.to_block}")

        return checkpoint

    async def sync_sub_range(self, block_range: BlockRange) -> None:
        """Fetch and log every target's events for one sub-range."""
        client = self.connection.client
        targets = self.connection.targets

        for index, target in enumerate(targets):
            if index > 0 and self.fetch_pause_seconds > 0:
                await self._sleep(self.fetch_pause_seconds)

            events = await self._fetch(target, block_range)
            if not events:
                continue

            try:
                await self.persister.log_sync(
                    target.name, events, client, target.duration
                )
            except DownstreamPersistFailure:
                raise
            except Exception as e:
                raise DownstreamPersistFailure(
                    f"Failed to log {target.name} events",
                    contract=target.name,
                    from_block=block_range.from_block,
                    to_block=block_range.to_block,
                ) from e
            self.stats.batches_logged += 1

    async def _fetch(
        self, target: ContractTarget, block_range: BlockRange
    ) -> list[dict[str, Any]]:
        try:
            events = await target.event_source.get_past_events(
                block_range.from_block, block_range.to_block
            )
        except Exception as e:
            raise EventFetchFailure(
                f"Failed to fetch {target.name} events",
                contract=target.name,
                from_block=block_range.from_block,
                to_block=block_range.to_block,
            ) from e

        self.stats.events_fetched += len(events)
        if events:
            logger.info(
                f"{target.name}: {len(events)} events in blocks "
                f"{block_range.from_block}-{block_range.to_block}"
            )
        return events
