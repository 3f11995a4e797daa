"""Small-scale unit tests for merging AI analysis passes.

These tests use handcrafted entries so each merge rule can be verified in
isolation.
"""

from __future__ import annotations

from collections import Counter

from room_inventory.merge import build_inventory, detect_folded_duplicates, merge_inventory
from room_inventory.models import ObjectEntry


def _totals(inventory: list[ObjectEntry]) -> dict[str, int]:
    return {entry.key: entry.count for entry in inventory}


def test_merge_folds_name_collisions_and_keeps_original_casing() -> None:
    """Case variants fold into the existing entry and counts are summed."""
    existing = [ObjectEntry("Red Chair", 1)]
    incoming = [ObjectEntry("red chair", 2), ObjectEntry("RED CHAIR", 1)]

    assert merge_inventory(existing, incoming) == [ObjectEntry("Red Chair", 4)]


def test_merge_carries_single_side_entries_and_sorts_by_key() -> None:
    """Entries only present on one side carry through; output is key-ordered."""
    existing = [ObjectEntry("Sofa", 1), ObjectEntry("lamp", 2)]
    incoming = [ObjectEntry("Bookshelf", 1), ObjectEntry("Lamp", 1)]

    assert merge_inventory(existing, incoming) == [
        ObjectEntry("Bookshelf", 1),
        ObjectEntry("lamp", 3),
        ObjectEntry("Sofa", 1),
    ]


def test_merge_uses_first_seen_incoming_name_for_new_keys() -> None:
    """A key new to the inventory takes the first incoming spelling."""
    merged = merge_inventory([], [ObjectEntry(" Blue Mug", 1), ObjectEntry("blue mug", 2)])
    assert merged == [ObjectEntry(" Blue Mug", 3)]


def test_merge_is_idempotent_when_re_merged_with_nothing() -> None:
    """Merging a merge result with an empty pass changes nothing."""
    once = merge_inventory(
        [ObjectEntry("TV", 1), ObjectEntry("Armchair", 2)],
        [ObjectEntry("tv", 1), ObjectEntry("Plant", 3)],
    )
    assert merge_inventory(once, []) == once


def test_merge_counts_are_order_independent_across_batches() -> None:
    """Per-key totals equal the sum across all inputs whichever batch goes first."""
    base = [ObjectEntry("Chair", 2), ObjectEntry("Lamp", 1)]
    batch_1 = [ObjectEntry("chair", 1), ObjectEntry("Rug", 1)]
    batch_2 = [ObjectEntry("CHAIR", 3), ObjectEntry("lamp", 2), ObjectEntry("Vase", 1)]

    first_then_second = merge_inventory(merge_inventory(base, batch_1), batch_2)
    second_then_first = merge_inventory(merge_inventory(base, batch_2), batch_1)

    expected: Counter[str] = Counter()
    for entry in (*base, *batch_1, *batch_2):
        expected[entry.key] += entry.count

    assert _totals(first_then_second) == dict(expected)
    assert _totals(second_then_first) == dict(expected)


def test_merge_display_name_depends_on_batch_order() -> None:
    """The first batch to introduce a key decides its display name."""
    batch_1 = [ObjectEntry("Rug", 1)]
    batch_2 = [ObjectEntry("RUG", 1)]

    assert merge_inventory(merge_inventory([], batch_1), batch_2) == [ObjectEntry("Rug", 2)]
    assert merge_inventory(merge_inventory([], batch_2), batch_1) == [ObjectEntry("RUG", 2)]


def test_merge_does_not_mutate_inputs() -> None:
    """Merging returns a new list and leaves both inputs untouched."""
    existing = [ObjectEntry("Desk", 1)]
    incoming = [ObjectEntry("desk", 1)]

    merge_inventory(existing, incoming)
    assert existing == [ObjectEntry("Desk", 1)]
    assert incoming == [ObjectEntry("desk", 1)]


def test_build_inventory_folds_a_raw_observation() -> None:
    """A raw list with duplicates becomes a key-unique inventory."""
    assert build_inventory([ObjectEntry("Pillow", 2), ObjectEntry("pillow ", 1)]) == [ObjectEntry("Pillow", 3)]
    assert build_inventory([]) == []


def test_detect_folded_duplicates_reports_keys_merged_by_addition() -> None:
    """Keys receiving several contributions are surfaced with their merged totals."""
    duplicates = detect_folded_duplicates(
        [ObjectEntry("Red Chair", 1), ObjectEntry("Lamp", 1)],
        [ObjectEntry("red chair", 2), ObjectEntry("RED CHAIR", 1), ObjectEntry("Sofa", 1)],
    )

    assert duplicates == [
        {
            "key": "red chair",
            "name": "Red Chair",
            "entry_count": 3,
            "merged_count": 4,
        }
    ]
