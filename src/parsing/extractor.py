# src/parsing/extractor.py

"""Turns listing markup into canonical package snapshots."""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup, Tag

from src.config.settings import Settings
from src.models.package_snapshot import (
    CardSnapshot,
    PackageSnapshot,
    card_sort_key,
)

logger = logging.getLogger("package_tracker.extractor")

_PERCENTAGE_RE = re.compile(r"(\d+)%", re.ASCII)
_QUANTITY_RE = re.compile(r"(\d+)x", re.ASCII)


@dataclass
class ExtractedCard:
    """A card snapshot paired with the ``<li>`` it was read from.

    The element reference is borrowed for the render phase only.
    """

    snapshot: CardSnapshot
    element: Tag


@dataclass
class ExtractedPackage:
    """A package snapshot paired with its source element and card items."""

    snapshot: PackageSnapshot
    element: Tag
    cards: list[ExtractedCard] = field(
        default_factory=lambda: list[ExtractedCard]()
    )


def load_selectors(path: Path | None = None) -> dict[str, dict[str, str]]:
    """Load the listing CSS selectors from ``selectors.json``."""
    with open(path or Settings.SELECTORS_PATH, encoding="utf-8") as f:
        data: dict[str, dict[str, str]] = json.load(f)
    return data


class PackageExtractor:
    """Reads package blocks out of a parsed listing page.

    Every lookup tolerates missing sub-elements by returning ``""``;
    the source element is never modified.
    """

    def __init__(
        self, selectors: dict[str, dict[str, str]] | None = None,
    ) -> None:
        all_selectors = selectors or load_selectors()
        self.page_sel: dict[str, str] = all_selectors.get("page", {})
        self.package_sel: dict[str, str] = all_selectors.get("package", {})
        self.card_sel: dict[str, str] = all_selectors.get("card", {})

    # ── Helpers ──────────────────────────────────────────

    @staticmethod
    def _select_one(root: Tag | None, selector: str | None) -> Tag | None:
        if root is None or not selector:
            return None
        return root.select_one(selector)

    @classmethod
    def _text_of(cls, root: Tag | None, selector: str | None) -> str:
        """Text of the first match of *selector* under *root*, or ``""``."""
        found = cls._select_one(root, selector)
        if found is None:
            return ""
        return found.get_text()

    @staticmethod
    def _first_group(pattern: re.Pattern[str], text: str, default: str) -> str:
        match = pattern.search(text)
        return match.group(1) if match else default

    def _card_items(self, element: Tag) -> list[Tag]:
        """Return the body's item elements, skipping "show more" rows."""
        body = self._select_one(element, self.package_sel.get("body"))
        if body is None:
            return []
        more_class = self.package_sel.get("more_class", "more")
        items: list[Tag] = []
        for li in body.select(self.package_sel.get("item", "li")):
            classes: Any = li.get("class") or []
            if more_class in classes:
                continue
            items.append(li)
        return items

    def _extract_card(self, li: Tag) -> CardSnapshot:
        return CardSnapshot(
            name=self._text_of(li, self.card_sel.get("name")),
            condition=self._text_of(li, self.card_sel.get("condition")),
            price_text=self._text_of(li, self.card_sel.get("price")),
            quantity=self._first_group(_QUANTITY_RE, li.get_text(), "1"),
        )

    # ── Public API ───────────────────────────────────────

    def find_listings(self, soup: BeautifulSoup | Tag) -> list[Tag]:
        """Return every package block on the page, in document order."""
        return list(soup.select(self.page_sel.get("listing", ".cs-package")))

    def extract_with_elements(self, element: Tag) -> ExtractedPackage:
        """Extract a package and keep references to its elements."""
        heading = self._select_one(
            element, self.package_sel.get("heading")
        )
        efficiency_text = self._text_of(
            heading, self.package_sel.get("efficiency")
        )

        cards = [
            ExtractedCard(snapshot=self._extract_card(li), element=li)
            for li in self._card_items(element)
        ]
        cards.sort(key=lambda c: card_sort_key(c.snapshot))

        snapshot = PackageSnapshot(
            seller_name=self._text_of(
                heading, self.package_sel.get("seller")
            ),
            total_text=self._text_of(
                heading, self.package_sel.get("total")
            ),
            efficiency_text=efficiency_text,
            efficiency_percentage=self._first_group(
                _PERCENTAGE_RE, efficiency_text, ""
            ),
            cards=tuple(c.snapshot for c in cards),
        )
        return ExtractedPackage(
            snapshot=snapshot, element=element, cards=cards,
        )

    def extract(self, element: Tag) -> PackageSnapshot:
        """Extract the canonical snapshot of one listing element."""
        return self.extract_with_elements(element).snapshot

    def extract_page(
        self, soup: BeautifulSoup | Tag,
    ) -> list[ExtractedPackage]:
        """Extract every package on the page."""
        packages = [
            self.extract_with_elements(el)
            for el in self.find_listings(soup)
        ]
        logger.debug("Extracted %d packages", len(packages))
        return packages
