"""Sequencing of a tenant inspection across the rooms of one home.

The walkthrough moves through ``NOT_STARTED -> INSPECTING_ROOM(i) ->
ALL_ROOMS_COMPLETE -> SUBMITTED``. A room only advances once a comparison
report exists for it; a failed observation leaves the current room in place
so the tenant can retry without touching rooms already completed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone
from enum import Enum

from .compare import compare_inventories
from .merge import build_inventory
from .models import InspectionReport, ObjectEntry, RoomInspectionResult, RoomRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETAKES = 3


class WalkthroughError(RuntimeError):
    """Raised for transitions the walkthrough does not allow from its current state."""


class WalkthroughState(str, Enum):
    NOT_STARTED = "not_started"
    INSPECTING_ROOM = "inspecting_room"
    ALL_ROOMS_COMPLETE = "all_rooms_complete"
    SUBMITTED = "submitted"


class InspectionWalkthrough:
    """Drive one inspection of a home, room by room."""

    def __init__(
        self,
        *,
        home_id: str,
        home_name: str,
        rooms: Sequence[RoomRecord],
        max_retakes: int = DEFAULT_MAX_RETAKES,
    ) -> None:
        if max_retakes < 0:
            raise ValueError("max_retakes must not be negative")
        self.home_id = home_id
        self.home_name = home_name
        room_ids = [room.room_id for room in rooms]
        duplicates = sorted({room_id for room_id in room_ids if room_ids.count(room_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate room ids: {', '.join(duplicates)}")
        self.rooms = list(rooms)
        self.max_retakes = max_retakes

        self.state = WalkthroughState.NOT_STARTED
        self.current_index = 0
        self.results: dict[str, RoomInspectionResult] = {}
        self.awaiting_retake = False
        self.last_error: str | None = None
        self.report_id: str | None = None
        self._retakes = 0

    @property
    def current_room(self) -> RoomRecord:
        self._require(WalkthroughState.INSPECTING_ROOM)
        return self.rooms[self.current_index]

    @property
    def completed_count(self) -> int:
        return len(self.results)

    def start(self) -> None:
        self._require(WalkthroughState.NOT_STARTED)
        if not self.rooms:
            raise WalkthroughError("This home has no rooms configured for inspection")
        self.state = WalkthroughState.INSPECTING_ROOM
        self.current_index = 0
        logger.info("Inspection of home %s started with %d rooms", self.home_id, len(self.rooms))

    def submit_room(self, observed: Iterable[ObjectEntry], *, notes: str = "") -> RoomInspectionResult:
        """Compare a tenant observation for the current room and record the result.

        When the comparison produces a highlight and the room still has retakes
        left, the room stays current and `awaiting_retake` is set. Otherwise
        the walkthrough advances.
        """

        room = self.current_room
        observed_inventory = build_inventory(observed)
        retake_count = self._retakes + 1 if self.awaiting_retake else self._retakes
        result = RoomInspectionResult(
            room_id=room.room_id,
            room_name=room.name,
            expected=list(room.objects),
            observed=observed_inventory,
            report=compare_inventories(room.objects, observed_inventory),
            retake_count=retake_count,
            notes=notes.strip(),
        )
        self.results[room.room_id] = result
        self.last_error = None
        self._retakes = retake_count

        if result.report.highlight_suggestion and retake_count < self.max_retakes:
            self.awaiting_retake = True
            logger.info(
                "Room %s has %d discrepancies, requesting retake %d of %d",
                room.room_id,
                len(result.report.discrepancies),
                retake_count + 1,
                self.max_retakes,
            )
            return result

        self._advance()
        return result

    def accept_room(self) -> None:
        """Advance past the current room keeping its latest result."""

        room = self.current_room
        if room.room_id not in self.results:
            raise WalkthroughError(f"Room {room.room_id} has no completed report yet")
        self._advance()

    def inspect_room(self, observe: Callable[[], Iterable[ObjectEntry]], *, notes: str = "") -> RoomInspectionResult:
        """Run an external observation for the current room and submit it.

        If ``observe`` raises, the failure is recorded and re-raised and the
        walkthrough stays on the current room.
        """

        room = self.current_room
        try:
            observed = list(observe())
        except Exception as exc:
            self.last_error = str(exc) or exc.__class__.__name__
            logger.warning("Observation for room %s failed: %s", room.room_id, self.last_error)
            raise
        return self.submit_room(observed, notes=notes)

    def submit(self, inspected_by: str, persist: Callable[[InspectionReport], str]) -> InspectionReport:
        """Build the aggregate report, persist it, and close the walkthrough."""

        if self.state is WalkthroughState.SUBMITTED:
            raise WalkthroughError("Inspection has already been submitted")
        self._require(WalkthroughState.ALL_ROOMS_COMPLETE)

        inspector = inspected_by.strip()
        if not inspector:
            raise WalkthroughError("Inspector name is required to submit the inspection")

        report = InspectionReport(
            home_id=self.home_id,
            home_name=self.home_name,
            inspected_by=inspector,
            rooms=[self.results[room.room_id] for room in self.rooms],
            inspected_at=datetime.now(timezone.utc),
        )
        self.report_id = persist(report)
        self.state = WalkthroughState.SUBMITTED
        logger.info("Inspection of home %s submitted as %s (%s)", self.home_id, self.report_id, report.overall_status)
        return report

    def _advance(self) -> None:
        self.awaiting_retake = False
        self._retakes = 0
        if self.current_index + 1 < len(self.rooms):
            self.current_index += 1
        else:
            self.state = WalkthroughState.ALL_ROOMS_COMPLETE

    def _require(self, state: WalkthroughState) -> None:
        if self.state is not state:
            raise WalkthroughError(f"Walkthrough is {self.state.value}, expected {state.value}")
