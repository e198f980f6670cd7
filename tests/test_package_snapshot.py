# tests/test_package_snapshot.py

"""Tests for the package/card snapshot value objects."""

import dataclasses
import unittest

from src.models.package_snapshot import (
    CardSnapshot,
    PackageSnapshot,
    sort_cards,
)


class TestCardSnapshot(unittest.TestCase):
    """CardSnapshot defaults and storage conversion."""

    def test_quantity_defaults_to_one(self) -> None:
        """A card built without a quantity counts as one copy."""
        self.assertEqual(CardSnapshot(name="Opt").quantity, "1")

    def test_is_immutable(self) -> None:
        """Cards cannot be changed after creation."""
        card = CardSnapshot(name="Opt")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            card.name = "Ponder"  # type: ignore[misc]

    def test_from_dict_missing_fields(self) -> None:
        """Missing stored fields fall back to empty / default values."""
        card = CardSnapshot.from_dict({"name": "Opt"})
        self.assertEqual(card.condition, "")
        self.assertEqual(card.price_text, "")
        self.assertEqual(card.quantity, "1")

    def test_from_dict_none_values(self) -> None:
        """Explicit nulls in a stored blob become empty strings."""
        card = CardSnapshot.from_dict(
            {"name": None, "condition": None, "quantity": None}
        )
        self.assertEqual(card.name, "")
        self.assertEqual(card.quantity, "1")


class TestSortCards(unittest.TestCase):
    """Canonical card ordering."""

    def test_sorted_by_name(self) -> None:
        """Cards come out in ascending name order."""
        cards = [
            CardSnapshot(name="Ponder"),
            CardSnapshot(name="Brainstorm"),
            CardSnapshot(name="Opt"),
        ]
        names = [c.name for c in sort_cards(cards)]
        self.assertEqual(names, ["Brainstorm", "Opt", "Ponder"])

    def test_same_name_order_is_input_independent(self) -> None:
        """Same-named cards in different conditions sort identically."""
        nm = CardSnapshot(name="Opt", condition="NM", price_text="$1")
        lp = CardSnapshot(name="Opt", condition="LP", price_text="$0.80")
        self.assertEqual(sort_cards([nm, lp]), sort_cards([lp, nm]))


class TestPackageSnapshot(unittest.TestCase):
    """PackageSnapshot storage conversion."""

    def test_to_dict_shape(self) -> None:
        """Serialised packages carry every field and nested cards."""
        snap = PackageSnapshot(
            seller_name="alice",
            total_text="$10",
            efficiency_text="85% of $11.76",
            efficiency_percentage="85",
            cards=(CardSnapshot(name="Opt", price_text="$10"),),
        )
        data = snap.to_dict()
        self.assertEqual(data["seller_name"], "alice")
        self.assertEqual(data["efficiency_percentage"], "85")
        self.assertEqual(data["cards"][0]["price_text"], "$10")

    def test_from_dict_restores_equal_snapshot(self) -> None:
        """A stored package reads back field-wise equal."""
        snap = PackageSnapshot(
            seller_name="alice",
            total_text="$25",
            efficiency_text="85% of $29.41",
            efficiency_percentage="85",
            cards=sort_cards([
                CardSnapshot("Lightning Bolt", "NM", "$10", "1"),
                CardSnapshot("Counterspell", "LP", "$15", "2"),
            ]),
        )
        self.assertEqual(PackageSnapshot.from_dict(snap.to_dict()), snap)

    def test_from_dict_tolerates_garbage_cards(self) -> None:
        """Non-list card payloads and non-dict entries are dropped."""
        self.assertEqual(
            PackageSnapshot.from_dict({"cards": "oops"}).cards, ()
        )
        snap = PackageSnapshot.from_dict(
            {"cards": [42, {"name": "Opt"}]}
        )
        self.assertEqual([c.name for c in snap.cards], ["Opt"])

    def test_from_dict_resorts_cards(self) -> None:
        """Hand-edited stored card lists are put back in canonical order."""
        snap = PackageSnapshot.from_dict(
            {"cards": [{"name": "Ponder"}, {"name": "Brainstorm"}]}
        )
        self.assertEqual(
            [c.name for c in snap.cards], ["Brainstorm", "Ponder"]
        )


if __name__ == "__main__":
    unittest.main()
