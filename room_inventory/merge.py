"""Merging of object lists from repeated AI analysis passes."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from typing import TypedDict

from .models import Inventory, ObjectEntry
from .normalize import normalize_key


class FoldedDuplicate(TypedDict):
    """A key that received more than one contribution during a merge."""

    key: str
    name: str
    entry_count: int
    merged_count: int


def merge_inventory(existing: Iterable[ObjectEntry], incoming: Iterable[ObjectEntry]) -> Inventory:
    """Merge a fresh analysis pass into a canonical inventory.

    Counts for entries sharing a normalized key are added together, the first
    display name seen for a key wins (``existing`` before ``incoming``), and
    the result is ordered by normalized key.
    """

    names: dict[str, str] = {}
    totals: defaultdict[str, int] = defaultdict(int)

    for entry in (*existing, *incoming):
        key = normalize_key(entry.name)
        names.setdefault(key, entry.name)
        totals[key] += entry.count

    return [ObjectEntry(name=names[key], count=totals[key]) for key in sorted(totals)]


def build_inventory(entries: Iterable[ObjectEntry]) -> Inventory:
    """Fold a raw observation list into an inventory with unique keys."""

    return merge_inventory([], entries)


def detect_folded_duplicates(
    existing: Iterable[ObjectEntry],
    incoming: Iterable[ObjectEntry],
) -> list[FoldedDuplicate]:
    """Return keys that a merge of the same inputs combines by addition.

    This exposes where name collisions (across passes or inside one pass) were
    folded into a single entry.
    """

    names: dict[str, str] = {}
    entry_counts: defaultdict[str, int] = defaultdict(int)
    merged_counts: defaultdict[str, int] = defaultdict(int)

    for entry in (*existing, *incoming):
        key = normalize_key(entry.name)
        names.setdefault(key, entry.name)
        entry_counts[key] += 1
        merged_counts[key] += entry.count

    duplicates: list[FoldedDuplicate] = []
    for key in sorted(entry_counts):
        if entry_counts[key] <= 1:
            continue
        duplicates.append(
            {
                "key": key,
                "name": names[key],
                "entry_count": entry_counts[key],
                "merged_count": merged_counts[key],
            }
        )
    return duplicates
