"""Tests for checkpoint persistence."""

import json

import pytest

from vesting_sync.core.exceptions import ConfigUnavailable, PersistFailure
from vesting_sync.services.event_sync.checkpoint import Checkpoint, CheckpointStore


class TestCheckpoint:
    """Tests for Checkpoint model."""

    def test_checkpoint_from_document_keys(self):
        """Test creating checkpoint from the on-disk key names."""
        checkpoint = Checkpoint.model_validate(
            {"syncedBlockHeight": 100, "sleepInterval": 30, "offset": 5000}
        )
        assert checkpoint.synced_block_height == 100
        assert checkpoint.sleep_interval == 30
        assert checkpoint.offset == 5000

    def test_checkpoint_dumps_document_keys(self):
        """Test serialization uses the document key names."""
        checkpoint = Checkpoint(synced_block_height=7, sleep_interval=1, offset=10)
        assert checkpoint.model_dump(by_alias=True) == {
            "syncedBlockHeight": 7,
            "sleepInterval": 1,
            "offset": 10,
        }

    @pytest.mark.parametrize(
        "data",
        [
            {"syncedBlockHeight": -1, "sleepInterval": 30, "offset": 100},
            {"syncedBlockHeight": 0, "sleepInterval": 0, "offset": 100},
            {"syncedBlockHeight": 0, "sleepInterval": 30, "offset": 0},
            {"syncedBlockHeight": "abc", "sleepInterval": 30, "offset": 100},
            {"sleepInterval": 30, "offset": 100},
        ],
    )
    def test_invalid_checkpoint_rejected(self, data):
        """Test out-of-range or missing fields are rejected."""
        with pytest.raises(ValueError):
            Checkpoint.model_validate(data)


class TestCheckpointStore:
    """Tests for CheckpointStore."""

    @pytest.mark.asyncio
    async def test_load(self, checkpoint_file):
        """Test loading checkpoint from file."""
        store = CheckpointStore(checkpoint_file(synced=12345, offset=500))

        checkpoint = await store.load()

        assert checkpoint.synced_block_height == 12345
        assert checkpoint.offset == 500

    @pytest.mark.asyncio
    async def test_load_missing_file(self, tmp_path):
        """Test missing document is a configuration error."""
        store = CheckpointStore(tmp_path / "nonexistent.json")

        with pytest.raises(ConfigUnavailable):
            await store.load()

    @pytest.mark.asyncio
    async def test_load_corrupt_file(self, tmp_path):
        """Test unparsable document is a configuration error."""
        path = tmp_path / "conf.json"
        path.write_text("{not json")

        with pytest.raises(ConfigUnavailable):
            await CheckpointStore(path).load()

    @pytest.mark.asyncio
    async def test_load_invalid_values(self, checkpoint_file):
        """Test invalid values are a configuration error."""
        store = CheckpointStore(checkpoint_file(offset=0))

        with pytest.raises(ConfigUnavailable):
            await store.load()

    @pytest.mark.asyncio
    async def test_save_overwrites_document(self, checkpoint_file):
        """Test saving replaces the whole document."""
        path = checkpoint_file(synced=100)
        store = CheckpointStore(path)
        checkpoint = await store.load()

        await store.save(checkpoint.model_copy(update={"synced_block_height": 250}))

        assert json.loads(path.read_text())["syncedBlockHeight"] == 250
        assert list(path.parent.iterdir()) == [path]

    @pytest.mark.asyncio
    async def test_save_keeps_unknown_keys(self, checkpoint_file):
        """Test keys not modelled by Checkpoint survive a save."""
        path = checkpoint_file(synced=100, network="bsc")
        store = CheckpointStore(path)

        await store.save(await store.load())

        assert json.loads(path.read_text())["network"] == "bsc"

    @pytest.mark.asyncio
    async def test_save_failure(self, tmp_path):
        """Test write errors raise PersistFailure."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = CheckpointStore(blocker / "conf.json")

        with pytest.raises(PersistFailure):
            await store.save(
                Checkpoint(synced_block_height=1, sleep_interval=1, offset=1)
            )

    @pytest.mark.asyncio
    async def test_update_height(self, checkpoint_file):
        """Test update_height persists and returns a new checkpoint."""
        path = checkpoint_file(synced=100)
        store = CheckpointStore(path)
        original = await store.load()

        updated = await store.update_height(original, 200)

        assert updated.synced_block_height == 200
        assert original.synced_block_height == 100
        assert (await store.load()).synced_block_height == 200
