"""Blockchain client with multi-RPC failover support."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import Web3RPCError
from web3.middleware import ExtraDataToPOAMiddleware
from web3.types import BlockIdentifier

from vesting_sync.core.exceptions import TransientConnectivity

logger = logging.getLogger(__name__)


class ChainClient(ABC):
    """Abstract base class for blockchain clients."""

    @abstractmethod
    async def get_block_number(self) -> int:
        """Get current block number."""
        ...

    @abstractmethod
    async def get_block(self, block_identifier: BlockIdentifier) -> dict[str, Any]:
        """Get block by number or hash."""
        ...

    @abstractmethod
    async def get_logs(
        self,
        from_block: int,
        to_block: int,
        address: str | list[str] | None = None,
        topics: list[Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Get logs matching filter."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release network resources held by the client."""
        ...


class Web3ChainClient(ChainClient):
    """JSON-RPC client with ordered failover across endpoints."""

    def __init__(
        self,
        rpc_urls: list[str],
        poa: bool = True,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        """Initialize client.

        Args:
            rpc_urls: RPC endpoints (primary first, then backups)
            poa: Inject the POA extraData middleware
            max_retries: Maximum retry attempts per RPC
            retry_delay: Delay between retries in seconds
        """
        if not rpc_urls:
            raise ValueError("At least one RPC URL is required")
        self.rpc_urls = rpc_urls
        self.poa = poa
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._current_rpc_index = 0
        self._web3: AsyncWeb3 | None = None

    @property
    def web3(self) -> AsyncWeb3:
        """Get or create Web3 instance."""
        if self._web3 is None:
            self._web3 = self._create_web3()
        return self._web3

    def _create_web3(self, rpc_index: int | None = None) -> AsyncWeb3:
        """Create Web3 instance for the given RPC."""
        index = rpc_index if rpc_index is not None else self._current_rpc_index
        w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_urls[index]))
        if self.poa:
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        return w3

    async def _execute_with_failover(
        self, method: str, *args: Any, **kwargs: Any
    ) -> Any:
        """Execute a web3.eth method, walking the RPC list on failure.

        Raises:
            TransientConnectivity: If every RPC failed every attempt
        """
        last_error: Exception | None = None

        for rpc_offset in range(len(self.rpc_urls)):
            rpc_index = (self._current_rpc_index + rpc_offset) % len(self.rpc_urls)
            web3 = self.web3 if rpc_offset == 0 else self._create_web3(rpc_index)

            for attempt in range(self.max_retries):
                try:
                    result = await getattr(web3.eth, method)(*args, **kwargs)
                    if web3 is not self._web3:
                        await self._disconnect(self._web3)
                    self._current_rpc_index = rpc_index
                    self._web3 = web3
                    return result

                except Web3RPCError as e:
                    last_error = e
                    logger.warning(
                        f"RPC {self.rpc_urls[rpc_index]} rejected {method} "
                        f"(attempt {attempt + 1}): {e}"
                    )

                except Exception as e:
                    last_error = e
                    logger.warning(
                        f"RPC {self.rpc_urls[rpc_index]} error on {method} "
                        f"(attempt {attempt + 1}): {e}"
                    )

                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay * (attempt + 1))

            if rpc_offset > 0:
                await self._disconnect(web3)
            if len(self.rpc_urls) > 1:
                logger.warning(
                    f"Switching from RPC {self.rpc_urls[rpc_index]} to next backup"
                )

        raise TransientConnectivity(
            f"All RPCs failed for {method}", last_error=last_error
        ) from last_error

    async def get_block_number(self) -> int:
        """Get current block number."""
        return await self._execute_with_failover("get_block_number")

    async def get_block(self, block_identifier: BlockIdentifier) -> dict[str, Any]:
        """Get block by number or hash."""
        block = await self._execute_with_failover("get_block", block_identifier)
        return dict(block) if block else {}

    async def get_logs(
        self,
        from_block: int,
        to_block: int,
        address: str | list[str] | None = None,
        topics: list[Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Get logs matching filter."""
        filter_params: dict[str, Any] = {
            "fromBlock": from_block,
            "toBlock": to_block,
        }
        if address:
            filter_params["address"] = address
        if topics:
            filter_params["topics"] = topics

        logs = await self._execute_with_failover("get_logs", filter_params)
        return [dict(log) for log in logs]

    async def close(self) -> None:
        """Close the HTTP session of the active provider."""
        await self._disconnect(self._web3)
        self._web3 = None

    @staticmethod
    async def _disconnect(web3: AsyncWeb3 | None) -> None:
        if web3 is None:
            return
        try:
            await web3.provider.disconnect()
        except Exception as e:
            logger.warning(f"Failed to close RPC session: {e}")
