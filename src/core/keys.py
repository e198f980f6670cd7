# src/core/keys.py

"""Identity keys for package snapshots.

Three progressively finer keys decide how a package relates to its
previous snapshot:

* **base key** — seller + card list (quantity, name, condition).
  "Materially the same listing"; ignores price and offer quality.
* **percentage key** — base key + efficiency percentage.
  "Same listing with the same stated offer quality."
* **full key** — seller, total, percentage and every card including its
  price.  "Byte-identical snapshot."

Keys are plain string concatenations, never hashes, so distinct
components can never collide.
"""

from src.models.package_snapshot import CardSnapshot, PackageSnapshot

FIELD_SEPARATOR = "-"
CARD_SEPARATOR = "|"


def card_signature(card: CardSnapshot) -> str:
    """Price-independent identity of a card inside its package."""
    return f"{card.quantity}x {card.name} {card.condition}"


def card_signature_with_price(card: CardSnapshot) -> str:
    return f"{card_signature(card)} {card.price_text}"


def base_key(snapshot: PackageSnapshot) -> str:
    signatures = CARD_SEPARATOR.join(
        card_signature(c) for c in snapshot.cards
    )
    return f"{snapshot.seller_name}{FIELD_SEPARATOR}{signatures}"


def percentage_key(snapshot: PackageSnapshot) -> str:
    return (
        f"{base_key(snapshot)}{FIELD_SEPARATOR}"
        f"{snapshot.efficiency_percentage}"
    )


def full_key(snapshot: PackageSnapshot) -> str:
    signatures = CARD_SEPARATOR.join(
        card_signature_with_price(c) for c in snapshot.cards
    )
    return FIELD_SEPARATOR.join(
        [
            snapshot.seller_name,
            snapshot.total_text,
            snapshot.efficiency_percentage,
            signatures,
        ]
    )
