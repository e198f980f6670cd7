# src/render/annotator.py

"""Marks classified packages on the page and renders the legend."""

import logging
from collections.abc import Mapping

from bs4 import BeautifulSoup, Tag

from src.config.settings import Settings
from src.core.keys import card_signature
from src.models.classification import Classification, ClassifiedResult
from src.parsing.extractor import ExtractedPackage

logger = logging.getLogger("package_tracker.annotator")

STYLE_ID = "package-tracker-style"
LEGEND_ID = "package-tracker-legend"

_STYLESHEET = """
  .packages .cs-package.package-new {
    background-color: rgba(144, 238, 144, 0.15) !important;
    border-left: 4px solid #4CAF50 !important;
  }
  .packages .cs-package.package-offer-changed {
    background-color: rgba(173, 216, 230, 0.15) !important;
    border-left: 4px solid #2196F3 !important;
  }
  .packages .cs-package.package-price-changed {
    background-color: rgba(255, 255, 0, 0.15) !important;
    border-left: 4px solid #ff9800 !important;
  }
  .package-tracker-legend {
    margin: 10px 0; padding: 10px; font-size: 12px;
    background-color: #f8f8f8; border-radius: 4px;
  }
  .legend-item { display: inline-block; margin-right: 15px; }
  .legend-color {
    display: inline-block; width: 15px; height: 15px;
    margin-right: 5px; vertical-align: middle;
  }
  .color-new { background-color: rgba(144, 238, 144, 0.7); border: 1px solid #4CAF50; }
  .color-offer { background-color: rgba(173, 216, 230, 0.7); border: 1px solid #2196F3; }
  .color-price { background-color: rgba(255, 255, 0, 0.7); border: 1px solid #ff9800; }
  .old-price-info, .old-package-total {
    font-size: 12px; color: #999; font-style: italic;
    text-decoration: line-through; margin-top: 2px;
  }
  .old-package-total { margin-top: 5px; display: block; }
  .old-total-label { text-decoration: none; font-weight: bold; }
"""

# (classification, swatch class, label) in legend order
LEGEND_ENTRIES: list[tuple[Classification, str, str]] = [
    (Classification.NEW, "color-new", "New Listings"),
    (Classification.OFFER_CHANGED, "color-offer", "Cards/Offer % Changed"),
    (Classification.PRICE_CHANGED, "color-price", "Price Only Changed"),
]

CSS_CLASSES: dict[Classification, str] = {
    Classification.NEW: Settings.CLASS_NEW,
    Classification.OFFER_CHANGED: Settings.CLASS_OFFER_CHANGED,
    Classification.PRICE_CHANGED: Settings.CLASS_PRICE_CHANGED,
}


class PageAnnotator:
    """Applies classification results to the page document."""

    def __init__(
        self,
        document: BeautifulSoup,
        heading_selector: str = ".package-heading",
        container_selector: str = ".packages",
    ) -> None:
        self.document = document
        self.heading_selector = heading_selector
        self.container_selector = container_selector

    def _span(self, css_class: str, text: str) -> Tag:
        span = self.document.new_tag("span", attrs={"class": css_class})
        span.string = text
        return span

    def _add_class(self, element: Tag, css_class: str) -> None:
        classes = list(element.get("class") or [])
        if css_class not in classes:
            classes.append(css_class)
        element["class"] = classes

    def _old_total_marker(
        self, previous_total: str, previous_efficiency: str,
    ) -> Tag:
        marker = self.document.new_tag(
            "div", attrs={"class": "old-package-total"}
        )
        marker.append(self._span("old-total-label", "Previous: "))
        marker.append(self._span("old-total", previous_total))
        marker.append(" ")
        marker.append(self._span("old-efficiency", previous_efficiency))
        return marker

    def _old_price_marker(self, previous_price: str) -> Tag:
        marker = self.document.new_tag(
            "div", attrs={"class": "old-price-info"}
        )
        marker.append(self._span("old-price", previous_price))
        return marker

    def annotate(
        self, package: ExtractedPackage, result: ClassifiedResult,
    ) -> None:
        """Mark one package according to its classification."""
        css_class = CSS_CLASSES.get(result.classification)
        if css_class is None:
            return
        self._add_class(package.element, css_class)

        if result.has_previous_values:
            heading = package.element.select_one(self.heading_selector)
            if heading is not None:
                heading.append(
                    self._old_total_marker(
                        result.previous_total_text or "",
                        result.previous_efficiency_text or "",
                    )
                )

        if not result.card_changes:
            return
        previous_prices = {
            c.card_key: c.previous_price_text for c in result.card_changes
        }
        for card in package.cards:
            previous = previous_prices.get(card_signature(card.snapshot))
            if previous is not None:
                card.element.append(self._old_price_marker(previous))

    def install_stylesheet(self) -> None:
        """Add the tracker stylesheet to ``<head>`` once."""
        if self.document.find(id=STYLE_ID) is not None:
            return
        head = self.document.head
        if head is None:
            head = self.document.new_tag("head")
            if self.document.html is not None:
                self.document.html.insert(0, head)
            else:
                self.document.insert(0, head)
        style = self.document.new_tag("style", attrs={"id": STYLE_ID})
        style.string = _STYLESHEET
        head.append(style)

    def render_legend(self, counts: Mapping[Classification, int]) -> None:
        """Insert (or refresh) the legend with running counts."""
        existing = self.document.find(id=LEGEND_ID)
        if existing is not None:
            existing.decompose()
        container = self.document.select_one(self.container_selector)
        if container is None:
            logger.debug("No listing container, legend skipped")
            return

        legend = self.document.new_tag(
            "div",
            attrs={"id": LEGEND_ID, "class": "package-tracker-legend"},
        )
        for classification, swatch, label in LEGEND_ENTRIES:
            item = self.document.new_tag(
                "div", attrs={"class": "legend-item"}
            )
            item.append(self._span(f"legend-color {swatch}", ""))
            item.append(f" {label} ({counts.get(classification, 0)})")
            legend.append(item)
        container.insert(0, legend)

    def annotate_page(
        self,
        packages: list[ExtractedPackage],
        results: list[ClassifiedResult],
        counts: Mapping[Classification, int],
    ) -> None:
        """Annotate every package and refresh the page chrome."""
        self.install_stylesheet()
        for package, result in zip(packages, results):
            self.annotate(package, result)
        self.render_legend(counts)
