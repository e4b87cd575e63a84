"""Writes fetched contract events into permanent storage."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from vesting_sync.core.exceptions import DownstreamPersistFailure
from vesting_sync.infrastructure.blockchain.client import ChainClient
from vesting_sync.infrastructure.database.session import get_session_factory
from vesting_sync.repositories.event_log import EventLogRepository

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncSession]


class EventLogger:
    """Persistence collaborator for the sync engine.

    Each batch is written in one transaction. Rows already stored are
    skipped, so replaying a sub-range after a crash is harmless.
    """

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> SessionFactory:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    async def log_sync(
        self,
        contract_name: str,
        events: list[dict[str, Any]],
        client: ChainClient,
        duration: int,
    ) -> int:
        """Store one contract's events for a sub-range.

        Args:
            contract_name: Contract identity, e.g. "trust-pad"
            events: Decoded event records in chain order
            client: Chain client used to resolve block timestamps
            duration: Vesting duration configured for the contract

        Returns:
            Number of newly stored events

        Raises:
            DownstreamPersistFailure: If the batch could not be stored
        """
        if not events:
            return 0

        timestamps = await self._get_block_timestamps(client, events)
        rows = [
            self._to_row(contract_name, event, timestamps, duration)
            for event in events
        ]

        async with self.session_factory() as session:
            try:
                inserted = await EventLogRepository(session).insert_ignore_duplicates(
                    rows
                )
                await session.commit()
            except Exception as e:
                await session.rollback()
                raise DownstreamPersistFailure(
                    f"Failed to store {contract_name} events",
                    contract=contract_name,
                    events=len(rows),
                ) from e

        skipped = len(rows) - inserted
        logger.info(
            f"Stored {inserted} {contract_name} events"
            + (f" ({skipped} already present)" if skipped else "")
        )
        return inserted

    async def _get_block_timestamps(
        self, client: ChainClient, events: list[dict[str, Any]]
    ) -> dict[int, datetime]:
        """Resolve timestamps for the blocks holding the events."""
        block_numbers = {e.get("blockNumber") for e in events if e.get("blockNumber")}
        timestamps: dict[int, datetime] = {}

        for block_num in sorted(block_numbers):
            try:
                block = await client.get_block(block_num)
            except Exception as e:
                logger.warning(f"Failed to get block {block_num} timestamp: {e}")
                continue
            if block.get("timestamp") is not None:
                timestamps[block_num] = datetime.fromtimestamp(
                    block["timestamp"], tz=timezone.utc
                )

        return timestamps

    @staticmethod
    def _to_row(
        contract_name: str,
        event: dict[str, Any],
        timestamps: dict[int, datetime],
        duration: int,
    ) -> dict[str, Any]:
        block_number = event.get("blockNumber") or 0
        return {
            "contract_name": contract_name,
            "contract_address": str(event.get("address", "")).lower(),
            "event_name": event.get("event"),
            "tx_hash": event.get("transactionHash") or "",
            "log_index": event.get("logIndex") or 0,
            "block_number": block_number,
            "block_timestamp": timestamps.get(block_number),
            "duration": int(duration or 0),
            "args": event.get("args") or {},
            "raw_data": event.get("raw"),
        }
