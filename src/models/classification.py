# src/models/classification.py

"""Classification results handed from the diff engine to the annotator."""

from dataclasses import dataclass, field
from enum import Enum

from src.models.package_snapshot import PackageSnapshot


class Classification(str, Enum):
    """How a visible package relates to the previously stored set."""

    NEW = "new"
    OFFER_CHANGED = "offer_changed"
    PRICE_CHANGED = "price_changed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class CardPriceChange:
    """Previous price of a card whose price moved since the last cycle."""

    card_key: str
    previous_price_text: str


@dataclass
class ClassifiedResult:
    """Classification of one current package plus its previous values."""

    snapshot: PackageSnapshot
    classification: Classification
    previous_total_text: str | None = None
    previous_efficiency_text: str | None = None
    card_changes: list[CardPriceChange] = field(
        default_factory=lambda: list[CardPriceChange]()
    )

    @property
    def has_previous_values(self) -> bool:
        """True when a package-level "previous value" marker applies."""
        return self.previous_total_text is not None
