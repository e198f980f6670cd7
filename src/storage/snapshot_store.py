# src/storage/snapshot_store.py

"""Loads and saves the full previously-seen package snapshot set."""

import logging
from typing import Any

from src.config.settings import Settings
from src.models.package_snapshot import PackageSnapshot
from src.storage.kv_store import KeyValueStore

logger = logging.getLogger("package_tracker.snapshot_store")


class SnapshotStore:
    """Thin adapter between snapshot models and a key-value store.

    The whole set lives under one key and is always replaced in full;
    there are no partial or merge writes.
    """

    def __init__(
        self, store: KeyValueStore, key: str | None = None,
    ) -> None:
        self.store = store
        self.key: str = key or Settings.STORAGE_KEY

    async def load(self) -> list[PackageSnapshot]:
        """Return the stored snapshots (empty when nothing is stored)."""
        result = await self.store.get([self.key])
        raw: Any = result.get(self.key) or []
        if not isinstance(raw, list):
            logger.warning(
                "Stored '%s' is not a list (%s), treating as empty",
                self.key,
                type(raw).__name__,
            )
            return []
        snapshots = [
            PackageSnapshot.from_dict(item)
            for item in raw
            if isinstance(item, dict)
        ]
        logger.info("Loaded previous packages: %d", len(snapshots))
        return snapshots

    async def save(self, snapshots: list[PackageSnapshot]) -> None:
        """Replace the stored set with *snapshots*."""
        await self.store.set(
            {self.key: [s.to_dict() for s in snapshots]}
        )
        logger.info("Saved %d packages", len(snapshots))

    async def clear(self) -> None:
        """Drop every stored snapshot."""
        await self.store.clear()

    async def dump(self) -> dict[str, Any]:
        """Raw store contents, for inspecting persisted state."""
        return await self.store.get_all()

    def close(self) -> None:
        self.store.close()
