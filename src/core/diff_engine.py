# src/core/diff_engine.py

"""Classifies current packages against the previously stored snapshot set."""

import logging
from dataclasses import dataclass

from src.core.keys import base_key, card_signature, full_key, percentage_key
from src.models.classification import (
    CardPriceChange,
    Classification,
    ClassifiedResult,
)
from src.models.package_snapshot import CardSnapshot, PackageSnapshot

logger = logging.getLogger("package_tracker.diff")


@dataclass(frozen=True)
class BaseKeyEntry:
    """What a previous snapshot looks like under its finer keys."""

    percentage_key: str
    full_key: str
    snapshot: PackageSnapshot


@dataclass(frozen=True)
class PercentageKeyEntry:
    full_key: str
    snapshot: PackageSnapshot


@dataclass
class PreviousLookups:
    """Lookup tables built once from the stored snapshot set."""

    by_base_key: dict[str, BaseKeyEntry]
    by_percentage_key: dict[str, PercentageKeyEntry]


class SnapshotDiffer:
    """Pure three-tier comparison of package snapshots.

    Nothing here touches markup or storage; the caller applies the
    returned classifications.
    """

    @staticmethod
    def build_lookups(
        previous: list[PackageSnapshot],
    ) -> PreviousLookups:
        """Index the previous snapshots by base key and percentage key.

        When two previous snapshots share a key the later one wins.
        """
        by_base: dict[str, BaseKeyEntry] = {}
        by_pct: dict[str, PercentageKeyEntry] = {}
        for snap in previous:
            pct = percentage_key(snap)
            full = full_key(snap)
            by_base[base_key(snap)] = BaseKeyEntry(
                percentage_key=pct, full_key=full, snapshot=snap,
            )
            by_pct[pct] = PercentageKeyEntry(full_key=full, snapshot=snap)
        return PreviousLookups(
            by_base_key=by_base, by_percentage_key=by_pct,
        )

    @staticmethod
    def card_price_changes(
        current_cards: tuple[CardSnapshot, ...],
        prior_cards: tuple[CardSnapshot, ...],
    ) -> list[CardPriceChange]:
        """Previous prices of the current cards whose price text moved.

        Cards are matched by signature (quantity, name, condition);
        cards with no prior counterpart or an unchanged price get nothing.
        """
        prior_by_sig: dict[str, CardSnapshot] = {
            card_signature(c): c for c in prior_cards
        }
        changes: list[CardPriceChange] = []
        for card in current_cards:
            sig = card_signature(card)
            prior = prior_by_sig.get(sig)
            if prior is not None and prior.price_text != card.price_text:
                changes.append(
                    CardPriceChange(
                        card_key=sig,
                        previous_price_text=prior.price_text,
                    )
                )
        return changes

    @staticmethod
    def classify_one(
        snapshot: PackageSnapshot,
        lookups: PreviousLookups,
    ) -> ClassifiedResult:
        """Classify a single current snapshot."""
        entry = lookups.by_base_key.get(base_key(snapshot))
        if entry is None:
            logger.info("New package: %s", snapshot.seller_name)
            return ClassifiedResult(
                snapshot=snapshot, classification=Classification.NEW,
            )

        prior = entry.snapshot
        # Offer movement outranks price movement: a re-evaluated offer
        # usually changes the displayed price as well.
        if entry.percentage_key != percentage_key(snapshot):
            logger.info(
                "Offer changed: %s from %s%% to %s%%",
                snapshot.seller_name,
                prior.efficiency_percentage,
                snapshot.efficiency_percentage,
            )
            return ClassifiedResult(
                snapshot=snapshot,
                classification=Classification.OFFER_CHANGED,
                previous_total_text=prior.total_text,
                previous_efficiency_text=prior.efficiency_text,
            )

        if entry.full_key != full_key(snapshot):
            logger.info("Price changed: %s", snapshot.seller_name)
            return ClassifiedResult(
                snapshot=snapshot,
                classification=Classification.PRICE_CHANGED,
                previous_total_text=prior.total_text,
                previous_efficiency_text=prior.efficiency_text,
                card_changes=SnapshotDiffer.card_price_changes(
                    snapshot.cards, prior.cards
                ),
            )

        return ClassifiedResult(
            snapshot=snapshot, classification=Classification.UNCHANGED,
        )

    @staticmethod
    def classify(
        current: list[PackageSnapshot],
        previous: list[PackageSnapshot],
    ) -> list[ClassifiedResult]:
        """Classify every current snapshot, preserving input order."""
        lookups = SnapshotDiffer.build_lookups(previous)
        results = [
            SnapshotDiffer.classify_one(snap, lookups) for snap in current
        ]
        logger.debug(
            "Classified %d packages against %d previous",
            len(results),
            len(previous),
        )
        return results
