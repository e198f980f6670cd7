# src/cli/runner.py

"""Headless CLI runner — one tracking cycle over an HTML page."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.classification import Classification, ClassifiedResult
from src.services.markup_source import FileMarkupSource
from src.services.tracker_session import TrackerSession
from src.storage.file_manager import FileManager, result_to_dict
from src.storage.kv_store import create_store
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("package_tracker.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

_STATUS_STYLES: dict[Classification, str] = {
    Classification.NEW: "[green]NEW[/green]",
    Classification.OFFER_CHANGED: "[blue]OFFER[/blue]",
    Classification.PRICE_CHANGED: "[yellow]PRICE[/yellow]",
    Classification.UNCHANGED: "[dim]—[/dim]",
}


def open_snapshot_store(backend: str | None) -> SnapshotStore:
    """Build the snapshot store, exiting on an unknown backend."""
    try:
        return SnapshotStore(create_store(backend))
    except ValueError as exc:
        _err.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc


def _print_table(results: list[ClassifiedResult]) -> None:
    """Render a Rich table of classified packages to stdout."""
    table = Table(
        title="Package Changes",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Seller", style="magenta")
    table.add_column("Status", justify="center")
    table.add_column("Total", justify="right", style="green")
    table.add_column("Efficiency")
    table.add_column("Previous", style="dim")
    table.add_column("Card price changes", overflow="fold", style="dim")

    for idx, r in enumerate(results, 1):
        previous = (
            f"{r.previous_total_text} {r.previous_efficiency_text or ''}"
            if r.has_previous_values
            else "—"
        )
        card_changes = "\n".join(
            f"{c.card_key}: was {c.previous_price_text}"
            for c in r.card_changes
        )
        table.add_row(
            str(idx),
            r.snapshot.seller_name,
            _STATUS_STYLES[r.classification],
            r.snapshot.total_text,
            r.snapshot.efficiency_text,
            previous,
            card_changes,
        )

    Console().print(table)


def _summary_line(session: TrackerSession) -> str:
    counts = session.controller.counts
    return (
        f"{len(session.controller.results)} packages: "
        f"{counts[Classification.NEW]} new, "
        f"{counts[Classification.OFFER_CHANGED]} offer changed, "
        f"{counts[Classification.PRICE_CHANGED]} price changed, "
        f"{counts[Classification.UNCHANGED]} unchanged"
    )


async def track_page(
    page_path: str,
    store_backend: str | None,
    watch: bool,
    output_format: str,
    output_dir: str | None,
) -> int:
    """Track one page and return an exit code (0=ok, 1=fail)."""
    path = Path(page_path)
    if not path.is_file():
        _err.print(f"[red]Page not found: {path}[/red]")
        return 1

    store = open_snapshot_store(store_backend)
    try:
        return await _track_with_store(
            path, store, watch, output_format, output_dir
        )
    finally:
        store.close()


async def _track_with_store(
    path: Path,
    store: SnapshotStore,
    watch: bool,
    output_format: str,
    output_dir: str | None,
) -> int:
    session = TrackerSession(FileMarkupSource(path), store)
    _err.print(f"[bold]Tracking:[/bold] {path}")

    try:
        if watch:
            _err.print(
                f"[dim]Watching for up to {Settings.WATCH_TIMEOUT:.0f}s...[/dim]"
            )
            completed = await session.run_until_done(
                timeout=Settings.WATCH_TIMEOUT
            )
        else:
            completed = await session.controller.trigger()
    except Exception as exc:
        logger.error("Tracking failed for %s: %s", path, exc, exc_info=True)
        _err.print(f"[red]Tracking failed: {exc}[/red]")
        return 1

    if not completed:
        _err.print("[yellow]No packages found on the page.[/yellow]")
        return 1

    results = session.controller.results
    _err.print(f"[green]✓ {_summary_line(session)}[/green]")

    try:
        file_manager = FileManager(
            Path(output_dir) if output_dir is not None else None
        )
        annotated = file_manager.save_annotated_page(
            path.stem, session.source.render()
        )
        _err.print(f"[dim]Annotated page → {annotated}[/dim]")
        summary = file_manager.save_summary(path.stem, results)
        _err.print(f"[dim]Summary → {summary}[/dim]")
    except OSError as exc:
        logger.error("Save failed: %s", exc, exc_info=True)
        _err.print(f"[red]Save failed: {exc}[/red]")

    if output_format == "table":
        _print_table(results)
    elif output_format == "tsv":
        sys.stdout.write(FileManager.format_tsv(results) + "\n")
    else:
        json.dump(
            [result_to_dict(r) for r in results],
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0


async def dump_store(store_backend: str | None) -> int:
    """Print the raw persisted state as JSON."""
    store = open_snapshot_store(store_backend)
    try:
        data = await store.dump()
    finally:
        store.close()
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


async def reset_store(store_backend: str | None) -> int:
    """Clear every stored snapshot."""
    store = open_snapshot_store(store_backend)
    try:
        await store.clear()
    finally:
        store.close()
    _err.print("[green]✓ Package tracker storage cleared[/green]")
    return 0
