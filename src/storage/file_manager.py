# src/storage/file_manager.py

"""Handles writing annotated pages and run summaries to disk."""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.classification import ClassifiedResult

logger = logging.getLogger("package_tracker.storage")

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def result_to_dict(result: ClassifiedResult) -> dict[str, Any]:
    """Serialise one classification for JSON output."""
    return {
        "seller_name": result.snapshot.seller_name,
        "classification": result.classification.value,
        "total_text": result.snapshot.total_text,
        "efficiency_text": result.snapshot.efficiency_text,
        "previous_total_text": result.previous_total_text,
        "previous_efficiency_text": result.previous_efficiency_text,
        "card_changes": [
            {
                "card": c.card_key,
                "previous_price_text": c.previous_price_text,
            }
            for c in result.card_changes
        ],
    }


class FileManager:
    """Handles writing annotated pages and run summaries to disk."""

    def __init__(self, results_dir: Path | None = None) -> None:
        self.results_dir: Path = results_dir or Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised — results_dir=%s", self.results_dir)

    @staticmethod
    def _safe_name(page_name: str) -> str:
        return _UNSAFE_CHARS_RE.sub("_", page_name).strip("_") or "page"

    def save_annotated_page(self, page_name: str, html: str) -> Path:
        """Write the annotated page to a timestamped HTML file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"annotated_{self._safe_name(page_name)}_{timestamp}.html"
        filepath = self.results_dir / filename
        filepath.write_text(html, encoding="utf-8")
        logger.info("Saved annotated page to %s", filepath)
        return filepath

    def save_summary(
        self, page_name: str, results: list[ClassifiedResult],
    ) -> Path:
        """Write the classifications of one run to a timestamped JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"summary_{self._safe_name(page_name)}_{timestamp}.json"
        filepath = self.results_dir / filename

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(
                [result_to_dict(r) for r in results],
                f,
                ensure_ascii=False,
                indent=2,
            )

        logger.info(
            "Saved %d classifications for '%s' to %s",
            len(results),
            page_name,
            filepath,
        )
        return filepath

    @staticmethod
    def format_tsv(results: list[ClassifiedResult]) -> str:
        """Format classifications as tab-separated text."""
        lines: list[str] = [
            "Seller\tStatus\tTotal\tEfficiency\tPrevious Total",
        ]
        for r in results:
            lines.append(
                f"{r.snapshot.seller_name}\t{r.classification.value}"
                f"\t{r.snapshot.total_text}\t{r.snapshot.efficiency_text}"
                f"\t{r.previous_total_text or ''}"
            )
        return "\n".join(lines)
