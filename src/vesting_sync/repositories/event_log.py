"""Repository for captured contract events."""

from typing import Any

from sqlalchemy.dialects.postgresql import insert

from vesting_sync.models.event_log import EventLog
from vesting_sync.repositories.base import BaseRepository

# asyncpg caps a statement at 32767 bind parameters; EventLog rows bind 10 each
INSERT_CHUNK_SIZE = 1000


class EventLogRepository(BaseRepository[EventLog]):
    """Repository for EventLog database operations.

    Inserts are keyed on ``(tx_hash, log_index)`` and ignore rows that are
    already stored, so a sub-range replayed after a restart is a no-op.
    """

    model = EventLog

    async def insert_ignore_duplicates(
        self, rows: list[dict[str, Any]], chunk_size: int = INSERT_CHUNK_SIZE
    ) -> int:
        """Insert rows, skipping any already present.

        Rows are written in statements of at most ``chunk_size`` rows, all
        within the caller's transaction.

        @param rows - Column dictionaries
        @param chunk_size - Maximum rows per INSERT statement
        @returns Number of rows actually inserted
        """
        inserted = 0
        for start in range(0, len(rows), chunk_size):
            stmt = (
                insert(self.model)
                .values(rows[start : start + chunk_size])
                .on_conflict_do_nothing(constraint="uq_event_log")
                .returning(self.model.id)
            )
            result = await self.session.execute(stmt)
            inserted += len(result.scalars().all())
        return inserted
