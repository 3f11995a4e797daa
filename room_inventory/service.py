"""Room analysis lifecycle on top of an injected document store and cache."""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any, Protocol

from .ingest import AnalysisParseResult, parse_analysis_payload, require_valid
from .merge import merge_inventory
from .models import AnalysisStatus, InspectionReport, RoomRecord
from .serialize import inspection_report_to_dict, room_record_from_dict, room_record_to_dict

logger = logging.getLogger(__name__)


class RoomNotFoundError(KeyError):
    """Raised when a room document does not exist in the store."""


class DocumentStore(Protocol):
    def get(self, key: str) -> dict[str, Any] | None: ...

    def set(self, key: str, value: dict[str, Any]) -> None: ...

    def delete(self, key: str) -> None: ...


class AnalysisCache(Protocol):
    def get(self, room_id: str) -> AnalysisParseResult | None: ...

    def set(self, room_id: str, result: AnalysisParseResult) -> None: ...

    def clear(self, room_id: str) -> None: ...


class InMemoryDocumentStore:
    """Dict-backed document store, used in tests and local runs.

    Documents are copied in and out so stored records only change through `set`.
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        document = self._documents.get(key)
        return None if document is None else copy.deepcopy(document)

    def set(self, key: str, value: dict[str, Any]) -> None:
        self._documents[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._documents.pop(key, None)


class InMemoryAnalysisCache:
    """Latest analysis pass per room, kept outside the persisted record."""

    def __init__(self) -> None:
        self._results: dict[str, AnalysisParseResult] = {}

    def get(self, room_id: str) -> AnalysisParseResult | None:
        return self._results.get(room_id)

    def set(self, room_id: str, result: AnalysisParseResult) -> None:
        self._results[room_id] = result

    def clear(self, room_id: str) -> None:
        self._results.pop(room_id, None)


def room_key(room_id: str) -> str:
    return f"rooms/{room_id}"


def inspection_key(report_id: str) -> str:
    return f"inspections/{report_id}"


class RoomAnalysisService:
    """Apply AI analysis passes to persisted room inventories.

    Merges for the same room are serialized with a per-room lock so that each
    pass is read, merged and written before the next one starts.
    """

    def __init__(self, store: DocumentStore, cache: AnalysisCache | None = None) -> None:
        self.store = store
        self.cache = cache if cache is not None else InMemoryAnalysisCache()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def create_room(self, room_id: str, name: str) -> RoomRecord:
        record = RoomRecord(room_id=room_id, name=name)
        self._save(record)
        return record

    def get_room(self, room_id: str) -> RoomRecord:
        document = self.store.get(room_key(room_id))
        if document is None:
            raise RoomNotFoundError(room_id)
        return room_record_from_dict(document)

    def get_rooms(self, room_ids: Iterable[str]) -> list[RoomRecord]:
        return [self.get_room(room_id) for room_id in room_ids]

    def begin_analysis(self, room_id: str) -> RoomRecord:
        with self._lock_for(room_id):
            record = self.get_room(room_id)
            record.status = AnalysisStatus.ANALYZING
            record.last_error = None
            self._save(record)
        return record

    def apply_analysis(self, room_id: str, payload: Any, *, strict: bool = False) -> RoomRecord:
        """Validate one AI pass and merge it into the room's canonical inventory."""

        try:
            result = payload if isinstance(payload, AnalysisParseResult) else parse_analysis_payload(payload)
            if strict:
                require_valid(result)
        except ValueError as exc:
            self.fail_analysis(room_id, exc)
            raise
        if result.rejected_count:
            logger.warning("Room %s: %d AI entries rejected at validation", room_id, result.rejected_count)

        with self._lock_for(room_id):
            record = self.get_room(room_id)
            record.objects = merge_inventory(record.objects, result.entries)
            record.status = AnalysisStatus.COMPLETE
            record.last_analyzed_at = datetime.now(timezone.utc)
            record.last_error = None
            self._save(record)
            self.cache.set(room_id, result)

        logger.info("Room %s merged %d entries into %d objects", room_id, len(result.entries), len(record.objects))
        return record

    def fail_analysis(self, room_id: str, error: BaseException | str) -> RoomRecord:
        message = str(error) or error.__class__.__name__
        with self._lock_for(room_id):
            record = self.get_room(room_id)
            record.status = AnalysisStatus.FAILED
            record.last_error = message
            self._save(record)
        logger.warning("Room %s analysis failed: %s", room_id, message)
        return record

    def clear_analysis(self, room_id: str) -> RoomRecord:
        """Explicitly drop the room's inventory; the only wholesale replacement."""

        with self._lock_for(room_id):
            record = self.get_room(room_id)
            record.objects = []
            record.status = AnalysisStatus.IDLE
            record.last_analyzed_at = None
            record.last_error = None
            self._save(record)
            self.cache.clear(room_id)
        return record

    def save_inspection_report(self, report: InspectionReport) -> str:
        """Persist an inspection report and return its generated id."""

        report_id = uuid.uuid4().hex
        self.store.set(inspection_key(report_id), inspection_report_to_dict(report))
        return report_id

    def get_inspection_report(self, report_id: str) -> dict[str, Any] | None:
        return self.store.get(inspection_key(report_id))

    def _save(self, record: RoomRecord) -> None:
        self.store.set(room_key(record.room_id), room_record_to_dict(record))

    def _lock_for(self, room_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(room_id)
            if lock is None:
                lock = self._locks[room_id] = threading.Lock()
            return lock
