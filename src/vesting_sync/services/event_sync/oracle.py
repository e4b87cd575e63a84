"""Chain head height lookup."""

import logging

from vesting_sync.infrastructure.blockchain.connection import ChainConnection

logger = logging.getLogger(__name__)


class ChainHeightOracle:
    """Reports the chain head height, or ``None`` when the node is unreachable."""

    def __init__(self, connection: ChainConnection):
        self.connection = connection

    async def current_height(self) -> int | None:
        try:
            height = await self.connection.client.get_block_number()
        except Exception as e:
            logger.warning(f"Failed to get block number: {e}")
            return None

        if isinstance(height, bool) or not isinstance(height, int) or height < 0:
            logger.warning(f"Node returned an invalid block number: {height!r}")
            return None
        return height
