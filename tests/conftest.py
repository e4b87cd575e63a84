"""Pytest configuration and fixtures."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from vesting_sync.infrastructure.blockchain.contracts import ContractTarget


@pytest.fixture(scope="function")
def settings(tmp_path):
    """Create settings instance for testing."""
    from vesting_sync.core.config import Settings

    return Settings(
        _env_file=None,
        environment="testing",
        checkpoint_path=tmp_path / "public" / "conf.json",
        static_dir=tmp_path / "public",
        abi_path=tmp_path / "vesting.json",
        fetch_pause_seconds=1.0,
    )


@pytest.fixture
def checkpoint_file(tmp_path):
    """Write a checkpoint document and return its path."""

    def _write(synced=100, sleep_interval=30, offset=100, **extra):
        path = tmp_path / "public" / "conf.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(
                {
                    "syncedBlockHeight": synced,
                    "sleepInterval": sleep_interval,
                    "offset": offset,
                    **extra,
                }
            )
        )
        return path

    return _write


def _make_target(name, side_effect=None, return_value=None, duration=0):
    """Contract target whose event source is an AsyncMock."""
    source = MagicMock()
    if side_effect is not None:
        source.get_past_events = AsyncMock(side_effect=side_effect)
    else:
        source.get_past_events = AsyncMock(return_value=return_value or [])
    return ContractTarget(name=name, event_source=source, duration=duration)


def _make_connection(targets=None, height=None):
    """Stand-in for ChainConnection with a mocked client."""
    connection = MagicMock()
    connection.client = MagicMock()
    connection.client.get_block_number = AsyncMock(return_value=height)
    connection.targets = targets or []
    connection.reinit = AsyncMock()
    connection.reinit_count = 0
    return connection


def _event(block, tx="0xaa", log_index=0, name="Transfer"):
    """Decoded event record as produced by ContractBinding."""
    return {
        "event": name,
        "address": "0x1234567890123456789012345678901234567890",
        "blockNumber": block,
        "transactionHash": tx,
        "logIndex": log_index,
        "args": {},
        "raw": {"data": "0x", "topics": []},
    }


@pytest.fixture
def make_target():
    return _make_target


@pytest.fixture
def make_connection():
    return _make_connection


@pytest.fixture
def make_event():
    return _event
