"""Ownership of the chain client and the contract bindings built on it."""

import logging
from typing import Any, Callable

from vesting_sync.core.config import ContractTargetConfig, Settings
from vesting_sync.infrastructure.blockchain.client import ChainClient, Web3ChainClient
from vesting_sync.infrastructure.blockchain.contracts import (
    ContractTarget,
    load_contract,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], ChainClient]


class ChainConnection:
    """Holds the single chain client and the per-contract targets.

    ``reinit`` builds a fresh client and rebinds every contract to it, then
    swaps both in one assignment so callers never see a client paired with
    bindings from an older one. The replaced client is closed afterwards.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        contracts: list[ContractTargetConfig],
        abi: list[dict[str, Any]],
    ):
        self._client_factory = client_factory
        self._contracts = list(contracts)
        self._abi = abi
        self._client, self._targets = self._build()
        self.reinit_count = 0

    @classmethod
    def from_settings(
        cls, settings: Settings, abi: list[dict[str, Any]]
    ) -> "ChainConnection":
        """Create a connection for the configured node and contracts."""

        def factory() -> ChainClient:
            return Web3ChainClient(
                rpc_urls=settings.rpc_urls,
                poa=settings.poa_chain,
                max_retries=settings.rpc_max_retries,
                retry_delay=settings.rpc_retry_delay,
            )

        return cls(factory, settings.contract_targets, abi)

    @property
    def client(self) -> ChainClient:
        return self._client

    @property
    def targets(self) -> list[ContractTarget]:
        return self._targets

    def _build(self) -> tuple[ChainClient, list[ContractTarget]]:
        client = self._client_factory()
        targets = [
            ContractTarget(
                name=contract.name,
                event_source=load_contract(client, contract.address, self._abi),
                duration=contract.duration,
            )
            for contract in self._contracts
        ]
        return client, targets

    async def reinit(self) -> ChainClient:
        """Swap in a new client and bindings, then close the old client."""
        old_client = self._client
        self._client, self._targets = self._build()
        await old_client.close()
        self.reinit_count += 1
        logger.info(
            f"Chain client reinitialized, rebound {len(self._targets)} contracts"
        )
        return self._client
