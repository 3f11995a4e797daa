"""Conversion of engine models to and from JSON-ready documents."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from .models import (
    AnalysisStatus,
    DataIssue,
    DiscrepancyEntry,
    DiscrepancyReport,
    InspectionReport,
    Inventory,
    ObjectEntry,
    RoomInspectionResult,
    RoomRecord,
)


def issue_to_dict(issue: DataIssue) -> dict[str, Any]:
    """Serialize a `DataIssue` into a JSON-friendly dictionary."""

    return {
        "code": issue.code,
        "field": issue.field,
        "index": issue.index,
        "message": issue.message,
    }


def inventory_to_dicts(inventory: Iterable[ObjectEntry]) -> list[dict[str, Any]]:
    return [{"name": entry.name, "count": entry.count} for entry in inventory]


def inventory_from_dicts(items: Iterable[Mapping[str, Any]]) -> Inventory:
    """Rebuild a stored inventory. Stored documents are trusted, not re-validated."""

    return [ObjectEntry(name=str(item["name"]), count=int(item["count"])) for item in items]


def discrepancy_report_to_dict(report: DiscrepancyReport) -> dict[str, Any]:
    return {
        "discrepancies": [
            {
                "name": entry.name,
                "expected_count": entry.expected_count,
                "actual_count": entry.actual_count,
                "note": entry.note,
            }
            for entry in report.discrepancies
        ],
        "highlight_suggestion": report.highlight_suggestion,
    }


def discrepancy_report_from_dict(data: Mapping[str, Any]) -> DiscrepancyReport:
    return DiscrepancyReport(
        discrepancies=tuple(
            DiscrepancyEntry(
                name=item["name"],
                expected_count=int(item["expected_count"]),
                actual_count=int(item["actual_count"]),
                note=item["note"],
            )
            for item in data.get("discrepancies", [])
        ),
        highlight_suggestion=data.get("highlight_suggestion", ""),
    )


def _datetime_to_str(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _datetime_from_str(value: str | None) -> datetime | None:
    return None if value is None else datetime.fromisoformat(value)


def room_record_to_dict(record: RoomRecord) -> dict[str, Any]:
    return {
        "room_id": record.room_id,
        "name": record.name,
        "objects": inventory_to_dicts(record.objects),
        "status": record.status.value,
        "last_analyzed_at": _datetime_to_str(record.last_analyzed_at),
        "last_error": record.last_error,
    }


def room_record_from_dict(data: Mapping[str, Any]) -> RoomRecord:
    return RoomRecord(
        room_id=data["room_id"],
        name=data["name"],
        objects=inventory_from_dicts(data.get("objects", [])),
        status=AnalysisStatus(data.get("status", AnalysisStatus.IDLE.value)),
        last_analyzed_at=_datetime_from_str(data.get("last_analyzed_at")),
        last_error=data.get("last_error"),
    )


def room_result_to_dict(result: RoomInspectionResult) -> dict[str, Any]:
    return {
        "room_id": result.room_id,
        "room_name": result.room_name,
        "expected": inventory_to_dicts(result.expected),
        "observed": inventory_to_dicts(result.observed),
        "report": discrepancy_report_to_dict(result.report),
        "retake_count": result.retake_count,
        "notes": result.notes,
    }


def inspection_report_to_dict(report: InspectionReport) -> dict[str, Any]:
    return {
        "home_id": report.home_id,
        "home_name": report.home_name,
        "inspected_by": report.inspected_by,
        "inspected_at": _datetime_to_str(report.inspected_at),
        "overall_status": report.overall_status,
        "discrepancy_count": report.discrepancy_count,
        "rooms": [room_result_to_dict(room) for room in report.rooms],
        "pdf_filename": report_filename(report.home_name, report.inspected_at),
        "email_subject": report_subject(report.home_name, report.inspected_at),
    }


def report_filename(home_name: str, inspected_at: datetime) -> str:
    """Return the attachment name used for a rendered inspection report."""

    safe_name = re.sub(r"\s+", "_", home_name.strip())
    return f"Inspection_Report_{safe_name}_{inspected_at.date().isoformat()}.pdf"


def report_subject(home_name: str, inspected_at: datetime) -> str:
    """Return the owner email subject line for an inspection report."""

    formatted = f"{inspected_at:%B} {inspected_at.day}, {inspected_at.year}"
    return f"Inspection Report for {home_name} - {formatted}"
