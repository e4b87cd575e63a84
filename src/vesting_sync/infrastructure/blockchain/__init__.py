"""Blockchain infrastructure module."""

from vesting_sync.infrastructure.blockchain.client import ChainClient, Web3ChainClient
from vesting_sync.infrastructure.blockchain.connection import ChainConnection
from vesting_sync.infrastructure.blockchain.contracts import (
    ALL_EVENTS,
    ContractBinding,
    ContractTarget,
    load_abi,
    load_contract,
)

__all__ = [
    # Client
    "ChainClient",
    "Web3ChainClient",
    "ChainConnection",
    # Contracts
    "ALL_EVENTS",
    "ContractBinding",
    "ContractTarget",
    "load_abi",
    "load_contract",
]
