"""Checkpoint persistence for sync resumption."""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vesting_sync.core.exceptions import ConfigUnavailable, PersistFailure

logger = logging.getLogger(__name__)


class Checkpoint(BaseModel):
    """Last fully synced block height plus the loop's tunables.

    Field aliases match the keys of the on-disk document. Keys not modelled
    here are kept and written back unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    synced_block_height: int = Field(alias="syncedBlockHeight", ge=0)
    sleep_interval: int = Field(alias="sleepInterval", gt=0)
    offset: int = Field(gt=0, description="Sub-range size in blocks")


class CheckpointStore:
    """Loads and saves the checkpoint document.

    The document is read once at startup and overwritten as a whole after
    every synced sub-range.
    """

    def __init__(self, checkpoint_path: str | Path):
        """Initialize checkpoint store.

        Args:
            checkpoint_path: Path of the JSON checkpoint document
        """
        self.checkpoint_path = Path(checkpoint_path)

    async def load(self) -> Checkpoint:
        """Load checkpoint from storage.

        Raises:
            ConfigUnavailable: If the document is missing or malformed
        """
        try:
            with open(self.checkpoint_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigUnavailable(
                f"Can not read {self.checkpoint_path}"
            ) from e

        try:
            checkpoint = Checkpoint.model_validate(data)
        except ValidationError as e:
            raise ConfigUnavailable(
                f"Malformed checkpoint in {self.checkpoint_path}"
            ) from e

        logger.info(
            f"Loaded checkpoint: block {checkpoint.synced_block_height}, "
            f"sleep {checkpoint.sleep_interval}s, offset {checkpoint.offset}"
        )
        return checkpoint

    async def save(self, checkpoint: Checkpoint) -> None:
        """Overwrite the document with the given checkpoint.

        Written to a sibling temporary file and renamed over the original.

        Raises:
            PersistFailure: If the document could not be written
        """
        payload = checkpoint.model_dump(mode="json", by_alias=True)
        directory = self.checkpoint_path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self.checkpoint_path.name}.",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(payload, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.checkpoint_path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistFailure(
                f"Can not write {self.checkpoint_path}",
                synced_block_height=checkpoint.synced_block_height,
            ) from e

    async def update_height(self, checkpoint: Checkpoint, height: int) -> Checkpoint:
        """Persist a new synced height.

        Returns:
            Updated copy; the given checkpoint is left untouched

        Raises:
            PersistFailure: If the document could not be written
        """
        updated = checkpoint.model_copy(update={"synced_block_height": height})
        await self.save(updated)
        return updated
