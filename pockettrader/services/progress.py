"""
Collection progress.

Per-pack and overall completion for the collection view.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pockettrader.models.card import Card

ALL_PACKS = "All Packs"


@dataclass(frozen=True)
class PackProgress:
    """Completion of one pack (or of the whole catalog)."""

    pack: str
    owned: int
    total: int
    percentage: int

    @property
    def is_complete(self) -> bool:
        return self.owned == self.total


def completion_percentage(owned: int, total: int) -> int:
    """
    Whole-number completion percentage, rounded down.

    A complete set is always exactly 100, never 99 from rounding.
    """
    if owned >= total:
        return 100
    return (100 * owned) // total


def calculate_pack_progress(
    catalog: Sequence[Card], my_missing: Iterable[str]
) -> list[PackProgress]:
    """
    Calculate completion per pack plus an "All Packs" row.

    Args:
        catalog: Every known card
        my_missing: Card ids the user lacks

    Returns:
        One row per non-empty pack and one overall row, sorted by
        percentage descending (ties keep pack order of first appearance,
        overall row first)
    """
    missing = set(my_missing)
    totals: dict[str, list[int]] = {}
    for card in catalog:
        counts = totals.setdefault(card.pack, [0, 0])
        counts[1] += 1
        if card.id not in missing:
            counts[0] += 1

    rows: list[PackProgress] = []
    if catalog:
        owned_all = sum(owned for owned, _ in totals.values())
        rows.append(
            PackProgress(
                pack=ALL_PACKS,
                owned=owned_all,
                total=len(catalog),
                percentage=completion_percentage(owned_all, len(catalog)),
            )
        )

    for pack, (owned, total) in totals.items():
        if total == 0:
            continue
        rows.append(
            PackProgress(
                pack=pack,
                owned=owned,
                total=total,
                percentage=completion_percentage(owned, total),
            )
        )

    return sorted(rows, key=lambda row: row.percentage, reverse=True)
