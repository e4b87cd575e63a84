"""Contract ABI loading and event log bindings."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from eth_utils import event_abi_to_log_topic
from web3 import Web3

from vesting_sync.core.exceptions import ConfigUnavailable
from vesting_sync.infrastructure.blockchain.client import ChainClient

logger = logging.getLogger(__name__)

ALL_EVENTS = "allEvents"


def load_abi(path: str | Path) -> list[dict[str, Any]]:
    """Load a contract ABI from a JSON file.

    Accepts either a bare ABI list or a build artifact with an ``abi`` key.

    Raises:
        ConfigUnavailable: If the file is missing or is not an ABI
    """
    abi_path = Path(path)
    try:
        with open(abi_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigUnavailable(f"Can not read ABI file {abi_path}") from e

    abi = data.get("abi") if isinstance(data, dict) else data
    if not isinstance(abi, list) or not abi:
        raise ConfigUnavailable(f"ABI file {abi_path} holds no ABI entries")

    logger.debug(f"Loaded ABI {abi_path.name} ({len(abi)} entries)")
    return abi


def _to_json_value(value: Any) -> Any:
    """Convert decoded web3 values into JSON-friendly ones."""
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    if isinstance(value, Mapping):
        return {k: _to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json_value(v) for v in value]
    return value


class ContractBinding:
    """Event source for one deployed contract.

    ``get_past_events`` queries ``eth_getLogs`` for the contract address and
    decodes each log against the ABI. Logs whose topic is not in the ABI are
    returned undecoded with ``event`` set to ``None``.
    """

    def __init__(self, client: ChainClient, address: str, abi: list[dict[str, Any]]):
        self.client = client
        try:
            self.address = Web3.to_checksum_address(address)
        except (TypeError, ValueError) as e:
            raise ConfigUnavailable(
                f"Invalid contract address: {address!r}", address=address
            ) from e
        self.abi = abi
        # Offline instance, used for decoding only
        self._contract = Web3().eth.contract(address=self.address, abi=abi)
        self._topics: dict[bytes, str] = {
            event_abi_to_log_topic(item): item["name"]
            for item in abi
            if item.get("type") == "event" and not item.get("anonymous", False)
        }

    @property
    def event_names(self) -> list[str]:
        """Names of the non-anonymous events in the ABI."""
        return list(self._topics.values())

    def topic_for(self, event_name: str) -> bytes:
        """Return topic0 for an event name."""
        for topic, name in self._topics.items():
            if name == event_name:
                return topic
        raise ValueError(f"Event {event_name} is not in the contract ABI")

    async def get_past_events(
        self,
        from_block: int,
        to_block: int,
        event_filter: str = ALL_EVENTS,
    ) -> list[dict[str, Any]]:
        """Fetch and decode the contract's logs in ``[from_block, to_block]``."""
        topics = None
        if event_filter != ALL_EVENTS:
            topics = [Web3.to_hex(self.topic_for(event_filter))]

        logs = await self.client.get_logs(
            from_block=from_block,
            to_block=to_block,
            address=self.address,
            topics=topics,
        )
        return [self.decode_log(log) for log in logs]

    def decode_log(self, log: dict[str, Any]) -> dict[str, Any]:
        """Decode one raw log into an event record."""
        topics = log.get("topics") or []
        event_name = self._topics.get(_topic_bytes(topics[0])) if topics else None

        args: dict[str, Any] = {}
        if event_name:
            try:
                decoded = getattr(self._contract.events, event_name)().process_log(log)
                args = dict(decoded["args"])
            except Exception as e:
                logger.warning(
                    f"Failed to decode {event_name} log at block "
                    f"{log.get('blockNumber')}: {e}"
                )
                event_name = None

        return {
            "event": event_name,
            "address": log.get("address", self.address),
            "blockNumber": log.get("blockNumber"),
            "blockHash": _to_json_value(log.get("blockHash")),
            "transactionHash": _to_json_value(log.get("transactionHash")),
            "transactionIndex": log.get("transactionIndex"),
            "logIndex": log.get("logIndex"),
            "args": _to_json_value(args),
            "raw": {
                "data": _to_json_value(log.get("data")),
                "topics": _to_json_value(list(topics)),
            },
        }


def _topic_bytes(topic: Any) -> bytes:
    if isinstance(topic, str):
        return bytes.fromhex(topic[2:] if topic.startswith("0x") else topic)
    return bytes(topic)


def load_contract(
    client: ChainClient, address: str, abi: list[dict[str, Any]]
) -> ContractBinding:
    """Bind an ABI to a deployed address on the given client."""
    return ContractBinding(client, address, abi)


@dataclass(frozen=True)
class ContractTarget:
    """One monitored contract and the metadata its log consumer needs."""

    name: str
    event_source: ContractBinding
    duration: int = 0
