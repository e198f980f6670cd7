# src/ui/app.py

"""Terminal viewer for the package tracker."""

import json
import logging
from pathlib import Path
from typing import cast

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Static,
)

from src.models.classification import Classification, ClassifiedResult
from src.render.annotator import LEGEND_ENTRIES
from src.services.markup_source import FileMarkupSource
from src.services.tracker_session import TrackerSession
from src.storage.kv_store import create_store
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("package_tracker.ui")

_STATUS_TEXT: dict[Classification, Text] = {
    Classification.NEW: Text("NEW", style="bold green"),
    Classification.OFFER_CHANGED: Text("OFFER", style="bold blue"),
    Classification.PRICE_CHANGED: Text("PRICE", style="bold yellow"),
    Classification.UNCHANGED: Text("—", style="dim"),
}


class PackageTrackerApp(App[object]):
    """Shows the classified packages of one page with reset/inspect controls."""

    CSS = """
    #controls { height: auto; }
    #storage_view { display: none; height: auto; max-height: 20; }
    #storage_view.visible { display: block; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "reset", "Reset"),
        Binding("v", "toggle_storage", "View Storage"),
    ]

    def __init__(
        self,
        page_path: str,
        store_backend: str | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        super().__init__()
        self.page_path = Path(page_path)
        self._owns_store = store is None
        self.store = store or SnapshotStore(create_store(store_backend))
        self.session: TrackerSession | None = None

    def compose(self) -> ComposeResult:
        """Build the widget tree for the TUI."""
        yield Header()
        yield Container(
            Static(f"📦 Package Tracker — {self.page_path.name}", id="title"),
            Horizontal(
                Button(
                    "Reset Package Tracker", variant="error", id="reset_btn"
                ),
                Button("View Storage Data", id="storage_btn"),
                id="controls",
            ),
            Static("", id="legend"),
            Static("Waiting for packages...", id="status"),
            cast(
                DataTable[str | Text],
                DataTable(
                    id="results_table",
                    zebra_stripes=True,
                    cursor_type="row",
                ),
            ),
            Static("", id="storage_view"),
            id="main_container",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Configure the table and start tracking the page."""
        table = cast(
            DataTable[str | Text],
            self.query_one("#results_table", DataTable),
        )
        table.add_columns(
            "Seller", "Status", "Total", "Efficiency", "Previous", "Cards"
        )
        self.session = TrackerSession(
            FileMarkupSource(self.page_path), self.store
        )
        self.run_worker(self._track(), exclusive=True)

    async def _track(self) -> None:
        """Run triggers until the page has been compared once."""
        if self.session is None:
            raise RuntimeError("Tracking started before the app was mounted")
        status = self.query_one("#status", Static)
        try:
            completed = await self.session.run_until_done()
        except Exception as exc:
            logger.error("Tracking failed", exc_info=True)
            status.update(Text(f"❌ Tracking failed: {exc}"))
            self.notify(f"Tracking failed: {exc}", severity="error")
            return
        if completed:
            self.populate_table(self.session.controller.results)
            status.update(
                f"✅ Compared {len(self.session.controller.results)} packages"
            )

    def on_unmount(self) -> None:
        """Stop background triggers and close a store this app opened."""
        if self.session is not None:
            self.session.stop()
        if self._owns_store:
            self.store.close()

    def _render_legend(self) -> None:
        counts = (
            self.session.controller.counts if self.session else {}
        )
        parts = [
            f"{label}: {counts.get(classification, 0)}"
            for classification, _swatch, label in LEGEND_ENTRIES
        ]
        self.query_one("#legend", Static).update("   ".join(parts))

    def populate_table(self, results: list[ClassifiedResult]) -> None:
        """Fill the DataTable with classified packages."""
        table = cast(
            DataTable[str | Text],
            self.query_one("#results_table", DataTable),
        )
        table.clear()
        for r in results:
            previous = (
                f"{r.previous_total_text} {r.previous_efficiency_text or ''}"
                if r.has_previous_values
                else ""
            )
            cards = ", ".join(
                f"{c.card_key} (was {c.previous_price_text})"
                for c in r.card_changes
            )
            table.add_row(
                r.snapshot.seller_name,
                _STATUS_TEXT[r.classification],
                r.snapshot.total_text,
                r.snapshot.efficiency_text,
                previous,
                cards,
            )
        self._render_legend()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button click events."""
        if event.button.id == "reset_btn":
            await self.action_reset()
        elif event.button.id == "storage_btn":
            await self.action_toggle_storage()

    async def action_reset(self) -> None:
        """Clear stored snapshots, reload the page and compare again."""
        if self.session is None:
            return
        try:
            await self.session.reset()
        except Exception as e:
            logger.error("Reset failed", exc_info=True)
            self.notify(f"Reset failed: {e}", severity="error")
            return
        self.populate_table([])
        self.query_one("#status", Static).update("Storage cleared, reloading...")
        self.notify("Package tracker reset")
        self.run_worker(self._track(), exclusive=True)

    async def action_toggle_storage(self) -> None:
        """Show or hide the raw persisted snapshot data."""
        view = self.query_one("#storage_view", Static)
        if view.has_class("visible"):
            view.remove_class("visible")
            return
        try:
            data = await self.store.dump()
        except Exception as e:
            logger.error("Failed to read storage", exc_info=True)
            self.notify(f"Storage read failed: {e}", severity="error")
            return
        view.update(Text(json.dumps(data, ensure_ascii=False, indent=2)))
        view.add_class("visible")
