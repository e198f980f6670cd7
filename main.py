# main.py

"""Entry point for the package tracker (headless CLI or TUI)."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("package_tracker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="package_tracker",
        description=(
            "Compare a listing page against its previous snapshot and "
            "mark new, offer-changed and price-changed packages."
        ),
        epilog=f"Store backends: {', '.join(Settings.AVAILABLE_BACKENDS)}",
    )
    parser.add_argument(
        "page",
        nargs="?",
        default=None,
        help="HTML file of the listing page.",
    )
    parser.add_argument(
        "-w",
        "--watch",
        action="store_true",
        default=False,
        help="Keep polling the page until listings appear.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table", "tsv"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_dir",
        help="Directory for annotated pages (default: results/).",
    )
    parser.add_argument(
        "--store",
        choices=Settings.AVAILABLE_BACKENDS,
        default=None,
        help=f"Snapshot store backend (default: {Settings.STORE_BACKEND}).",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        default=False,
        help="Print the stored snapshot data and exit.",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        default=False,
        help="Clear the stored snapshot data and exit.",
    )
    parser.add_argument(
        "--tui",
        action="store_true",
        default=False,
        help="Open the page in the interactive viewer.",
    )
    return parser


def _run_tui(args: argparse.Namespace) -> None:
    """Launch the interactive Textual viewer."""
    from src.ui.app import PackageTrackerApp

    try:
        app = PackageTrackerApp(args.page, store_backend=args.store)
        app.run()
    except Exception:
        logger.critical("Fatal error during TUI run", exc_info=True)
        raise
    finally:
        logger.info("package_tracker TUI shutting down")


def _run_cli(args: argparse.Namespace) -> None:
    """Run one headless tracking cycle and exit."""
    from src.cli.runner import track_page

    exit_code = asyncio.run(
        track_page(
            page_path=args.page,
            store_backend=args.store,
            watch=args.watch,
            output_format=args.output_format,
            output_dir=args.output_dir,
        )
    )
    sys.exit(exit_code)


def _run_store_command(args: argparse.Namespace) -> None:
    """Dump or clear the persisted snapshot data."""
    from src.cli.runner import dump_store, reset_store

    command = reset_store if args.reset else dump_store
    exit_code = asyncio.run(command(args.store))
    sys.exit(exit_code)


def main() -> None:
    """Route to the store commands, the TUI or the headless CLI."""
    log_file = setup_logging()
    logger.info("package_tracker starting — log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.dump or args.reset:
        _run_store_command(args)
    elif args.page is None:
        parser.error("a page file is required")
    elif args.tui:
        _run_tui(args)
    else:
        _run_cli(args)


if __name__ == "__main__":
    main()
