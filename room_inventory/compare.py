"""Comparison of an owner's expected inventory against a tenant observation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .merge import build_inventory
from .models import DiscrepancyEntry, DiscrepancyReport, ObjectEntry
from .normalize import normalize_key

MISSING_NOTE = "Completely missing"


def shortfall_note(expected_count: int, actual_count: int) -> str:
    """Return the short classification stored with a discrepancy."""

    if actual_count == 0:
        return MISSING_NOTE
    return f"{actual_count} of {expected_count} found"


def select_highlight(discrepancies: Sequence[DiscrepancyEntry]) -> DiscrepancyEntry | None:
    """Pick the single discrepancy worth surfacing to the tenant.

    Missing items beat partial shortfalls, then the larger shortfall wins,
    then the earlier entry.
    """

    if not discrepancies:
        return None
    _, chosen = min(
        enumerate(discrepancies),
        key=lambda pair: (not pair[1].is_missing, -pair[1].shortfall, pair[0]),
    )
    return chosen


def format_highlight(entry: DiscrepancyEntry) -> str:
    """Render a discrepancy as one polite request to re-check that item."""

    if entry.is_missing:
        return (
            f"The '{entry.name}' seems to be missing. "
            "Could you please take another picture focusing on where it should be?"
        )
    return (
        f"Only {entry.actual_count} of {entry.expected_count} '{entry.name}' were found. "
        "Could you please take another picture showing all of them?"
    )


def compare_inventories(expected: Iterable[ObjectEntry], observed: Iterable[ObjectEntry]) -> DiscrepancyReport:
    """Report expected items that are missing or under-counted in ``observed``.

    Only shortfalls are reported; surplus and observed-only items are ignored.
    Discrepancies keep the order of ``expected``.
    """

    actual_by_key = {entry.key: entry.count for entry in build_inventory(observed)}

    discrepancies: list[DiscrepancyEntry] = []
    for entry in expected:
        actual_count = actual_by_key.get(normalize_key(entry.name), 0)
        if actual_count >= entry.count:
            continue
        discrepancies.append(
            DiscrepancyEntry(
                name=entry.name,
                expected_count=entry.count,
                actual_count=actual_count,
                note=shortfall_note(entry.count, actual_count),
            )
        )

    highlight = select_highlight(discrepancies)
    return DiscrepancyReport(
        discrepancies=tuple(discrepancies),
        highlight_suggestion="" if highlight is None else format_highlight(highlight),
    )
