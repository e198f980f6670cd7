# src/models/package_snapshot.py

"""Canonical package/card snapshot models — the only records that are
ever compared or persisted."""

from dataclasses import dataclass, field
from typing import Any


def _text(raw: dict[str, Any], key: str, default: str = "") -> str:
    """Read a string field from a stored dict, tolerating junk values."""
    value = raw.get(key, default)
    if value is None:
        return default
    return str(value)


@dataclass(frozen=True)
class CardSnapshot:
    """One priced item within a package."""

    name: str = ""
    condition: str = ""
    price_text: str = ""
    quantity: str = "1"

    def to_dict(self) -> dict[str, str]:
        """Serialise to a plain dict for the key-value store."""
        return {
            "name": self.name,
            "condition": self.condition,
            "price_text": self.price_text,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "CardSnapshot":
        """Rebuild a card from its stored dict."""
        return cls(
            name=_text(raw, "name"),
            condition=_text(raw, "condition"),
            price_text=_text(raw, "price_text"),
            quantity=_text(raw, "quantity", "1") or "1",
        )


def card_sort_key(card: CardSnapshot) -> tuple[str, str, str, str]:
    """Canonical ordering key: name first, other fields break ties.

    Ties must be broken so the result never depends on the order the
    markup listed the cards in.
    """
    return (card.name, card.condition, card.quantity, card.price_text)


def sort_cards(cards: list[CardSnapshot]) -> tuple[CardSnapshot, ...]:
    """Return cards in canonical order."""
    return tuple(sorted(cards, key=card_sort_key))


@dataclass(frozen=True)
class PackageSnapshot:
    """One listing's canonical state at extraction time."""

    seller_name: str = ""
    total_text: str = ""
    efficiency_text: str = ""
    efficiency_percentage: str = ""
    cards: tuple[CardSnapshot, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict for the key-value store."""
        return {
            "seller_name": self.seller_name,
            "total_text": self.total_text,
            "efficiency_text": self.efficiency_text,
            "efficiency_percentage": self.efficiency_percentage,
            "cards": [c.to_dict() for c in self.cards],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "PackageSnapshot":
        """Rebuild a package from its stored dict.

        Missing fields fall back to empty strings; card entries that are
        not dicts are skipped.  Stored cards are re-sorted so that a
        hand-edited blob still yields canonical ordering.
        """
        raw_cards: Any = raw.get("cards") or []
        if not isinstance(raw_cards, list):
            raw_cards = []
        cards = [
            CardSnapshot.from_dict(c)
            for c in raw_cards
            if isinstance(c, dict)
        ]
        return cls(
            seller_name=_text(raw, "seller_name"),
            total_text=_text(raw, "total_text"),
            efficiency_text=_text(raw, "efficiency_text"),
            efficiency_percentage=_text(raw, "efficiency_percentage"),
            cards=sort_cards(cards),
        )
