# tests/test_snapshot_store.py

"""Tests for the SnapshotStore adapter."""

import tempfile
import unittest
from pathlib import Path

from src.models.package_snapshot import CardSnapshot, PackageSnapshot
from src.storage.kv_store import JsonFileStore
from src.storage.snapshot_store import SnapshotStore


def _snapshots() -> list[PackageSnapshot]:
    return [
        PackageSnapshot(
            seller_name="alice",
            total_text="$25.00",
            efficiency_text="85% of $29.41",
            efficiency_percentage="85",
            cards=(
                CardSnapshot("Counterspell", "LP", "$15.00", "2"),
                CardSnapshot("Lightning Bolt", "NM", "$10.00", "1"),
            ),
        ),
        PackageSnapshot(seller_name="bob"),
    ]


class TestSnapshotStore(unittest.IsolatedAsyncioTestCase):
    """Load/save/clear over a JSON file store."""

    def setUp(self) -> None:
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.kv = JsonFileStore(self.tmp_dir / "storage.json")
        self.store = SnapshotStore(self.kv)

    async def test_load_absent_is_empty(self) -> None:
        """First run: nothing stored reads as an empty list."""
        self.assertEqual(await self.store.load(), [])

    async def test_save_then_load(self) -> None:
        """Saved snapshots load back field-wise equal and in order."""
        await self.store.save(_snapshots())
        self.assertEqual(await self.store.load(), _snapshots())

    async def test_save_replaces_whole_set(self) -> None:
        """Each save overwrites the previous set entirely."""
        await self.store.save(_snapshots())
        await self.store.save([PackageSnapshot(seller_name="carol")])
        loaded = await self.store.load()
        self.assertEqual([s.seller_name for s in loaded], ["carol"])

    async def test_uses_package_data_key(self) -> None:
        """Snapshots live under the 'packageData' key."""
        await self.store.save(_snapshots())
        raw = await self.kv.get_all()
        self.assertEqual(list(raw), ["packageData"])

    async def test_non_list_payload_is_empty(self) -> None:
        """A stored value that is not a list is treated as empty."""
        await self.kv.set({"packageData": {"oops": True}})
        self.assertEqual(await self.store.load(), [])

    async def test_clear(self) -> None:
        """clear() drops the stored set."""
        await self.store.save(_snapshots())
        await self.store.clear()
        self.assertEqual(await self.store.load(), [])

    async def test_dump_returns_raw_contents(self) -> None:
        """dump() exposes the raw stored blob for inspection."""
        await self.store.save(_snapshots())
        data = await self.store.dump()
        self.assertEqual(
            data["packageData"][0]["seller_name"], "alice"
        )


if __name__ == "__main__":
    unittest.main()
