# tests/test_app.py

"""Smoke tests for the TUI application using Textual's Pilot."""

import shutil
import sqlite3
import tempfile
import unittest
from pathlib import Path
from typing import cast

from textual.widgets import Button, DataTable, Static

from src.models.classification import Classification
from src.storage.kv_store import JsonFileStore, SqliteStore
from src.storage.snapshot_store import SnapshotStore
from src.ui.app import PackageTrackerApp

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestPackageTrackerApp(unittest.IsolatedAsyncioTestCase):
    """Smoke tests for the Textual TUI."""

    def setUp(self) -> None:
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.page = self.tmp_dir / "packages.html"
        shutil.copy(FIXTURES_DIR / "packages_before.html", self.page)
        self.store = SnapshotStore(
            JsonFileStore(self.tmp_dir / "storage.json")
        )

    def _app(self) -> PackageTrackerApp:
        return PackageTrackerApp(str(self.page), store=self.store)

    async def test_app_composes_without_crash(self) -> None:
        """Verify the app starts and renders all widgets."""
        app = self._app()
        async with app.run_test() as pilot:
            app.query_one("#reset_btn", Button)
            app.query_one("#storage_btn", Button)
            app.query_one("#results_table", DataTable)
            app.query_one("#legend", Static)
            app.query_one("#status", Static)
            await pilot.pause()

    async def test_tracking_populates_table(self) -> None:
        """The first cycle fills one row per package."""
        app = self._app()
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            assert app.session is not None
            self.assertTrue(app.session.controller.done)
            table = cast(
                DataTable[str],
                app.query_one("#results_table", DataTable),
            )
            self.assertEqual(table.row_count, 3)
        self.assertEqual(len(await self.store.load()), 3)

    async def test_reset_reclassifies_all_new(self) -> None:
        """Reset clears storage and reruns the cycle on the page."""
        app = self._app()
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await app.action_reset()
            await app.workers.wait_for_complete()
            await pilot.pause()
            assert app.session is not None
            self.assertEqual(
                [r.classification for r in app.session.controller.results],
                [Classification.NEW] * 3,
            )

    async def test_toggle_storage_view(self) -> None:
        """The storage view opens and closes."""
        app = self._app()
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            view = app.query_one("#storage_view", Static)
            await app.action_toggle_storage()
            await pilot.pause()
            self.assertTrue(view.has_class("visible"))
            await app.action_toggle_storage()
            await pilot.pause()
            self.assertFalse(view.has_class("visible"))

    async def test_track_before_mount_raises(self) -> None:
        """Tracking needs the session created on mount."""
        with self.assertRaises(RuntimeError):
            await self._app()._track()

    async def test_unmount_closes_owned_store(self) -> None:
        """A store the app opened itself is closed on exit."""
        app = PackageTrackerApp(str(self.page), store_backend="sqlite")
        async with app.run_test():
            await app.workers.wait_for_complete()
        backend = app.store.store
        assert isinstance(backend, SqliteStore)
        with self.assertRaises(sqlite3.ProgrammingError):
            backend._conn.execute("SELECT 1")

    async def test_unmount_leaves_given_store_open(self) -> None:
        """A store handed in by the caller stays usable after exit."""
        backend = SqliteStore(self.tmp_dir / "storage.db")
        self.addCleanup(backend.close)
        store = SnapshotStore(backend)
        app = PackageTrackerApp(str(self.page), store=store)
        async with app.run_test():
            await app.workers.wait_for_complete()
        self.assertEqual(len(await store.load()), 3)


if __name__ == "__main__":
    unittest.main()
