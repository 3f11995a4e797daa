"""Core typed models shared by ingestion, merging and inspection modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TypeAlias

STATUS_WITH_DISCREPANCIES = "Completed with discrepancies"
STATUS_ALL_CLEAR = "Completed - All Clear"


@dataclass(frozen=True, slots=True)
class DataIssue:
    """Structured data-quality issue emitted while validating AI output."""

    code: str
    message: str
    field: str | None = None
    index: int | None = None


@dataclass(frozen=True, slots=True)
class ObjectEntry:
    """One distinct recognized object type and how many instances were seen."""

    name: str
    count: int

    @property
    def key(self) -> str:
        """Return the case/whitespace-insensitive identity of this entry."""

        return self.name.strip().casefold()


Inventory: TypeAlias = list[ObjectEntry]


@dataclass(frozen=True, slots=True)
class DiscrepancyEntry:
    """An expected item that is missing or under-counted in the observed inventory."""

    name: str
    expected_count: int
    actual_count: int
    note: str

    @property
    def shortfall(self) -> int:
        return self.expected_count - self.actual_count

    @property
    def is_missing(self) -> bool:
        return self.actual_count == 0


@dataclass(frozen=True, slots=True)
class DiscrepancyReport:
    """Comparison outcome for one room; immutable once produced."""

    discrepancies: tuple[DiscrepancyEntry, ...] = ()
    highlight_suggestion: str = ""

    @property
    def has_discrepancies(self) -> bool:
        return bool(self.discrepancies)


class AnalysisStatus(str, Enum):
    """Analysis lifecycle of a room's canonical inventory."""

    IDLE = "idle"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(slots=True)
class RoomRecord:
    """Per-room document persisted by the surrounding application."""

    room_id: str
    name: str
    objects: Inventory = field(default_factory=list)
    status: AnalysisStatus = AnalysisStatus.IDLE
    last_analyzed_at: datetime | None = None
    last_error: str | None = None


@dataclass(slots=True)
class RoomInspectionResult:
    """Completed comparison for one room of a tenant inspection."""

    room_id: str
    room_name: str
    expected: Inventory
    observed: Inventory
    report: DiscrepancyReport
    retake_count: int = 0
    notes: str = ""


@dataclass(slots=True)
class InspectionReport:
    """Aggregate inspection record persisted once the walkthrough is submitted."""

    home_id: str
    home_name: str
    inspected_by: str
    rooms: list[RoomInspectionResult]
    inspected_at: datetime

    @property
    def overall_status(self) -> str:
        """Return the owner-facing status line for the whole inspection."""

        if any(room.report.has_discrepancies for room in self.rooms):
            return STATUS_WITH_DISCREPANCIES
        return STATUS_ALL_CLEAR

    @property
    def discrepancy_count(self) -> int:
        return sum(len(room.report.discrepancies) for room in self.rooms)
