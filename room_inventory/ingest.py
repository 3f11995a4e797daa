"""Shape-aware parser for AI vision analysis payloads."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import DataIssue, ObjectEntry
from .normalize import InvalidEntryError, validate_entry

_ENTRY_FIELDS = frozenset({"name", "count"})
_REJECTING_CODES = frozenset(
    {"missing_value", "invalid_count", "non_integral_count", "non_positive_count", "entry_not_object"}
)


@dataclass(slots=True)
class AnalysisParseResult:
    """Validated output of one AI analysis pass."""

    source: str | None
    entries: list[ObjectEntry]
    issues: list[DataIssue] = field(default_factory=list)
    rejected_count: int = 0

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


def detect_payload_shape(payload: Any) -> list[Any]:
    """Return the raw objects list from an AI payload.

    Accepts ``{"objects": [...]}`` or a bare list. A missing model output
    (``None``) is an empty analysis. Anything else fails fast rather than
    being guessed at.
    """

    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError(f"Unrecognized analysis payload type: {type(payload).__name__}")
    if "objects" not in payload:
        fields = ", ".join(sorted(str(key) for key in payload))
        raise ValueError(f"Analysis payload has no 'objects' field: {fields}")

    objects = payload["objects"]
    if objects is None:
        return []
    if not isinstance(objects, list):
        raise ValueError("Analysis payload 'objects' must be a list")
    return objects


def parse_analysis_payload(payload: Any, *, source: str | None = None) -> AnalysisParseResult:
    """Validate one AI analysis payload into object entries and issues."""

    if isinstance(payload, (str, bytes)):
        payload = json.loads(payload)

    raw_objects = detect_payload_shape(payload)
    entries: list[ObjectEntry] = []
    issues: list[DataIssue] = []
    rejected = 0

    for index, raw in enumerate(raw_objects):
        if not isinstance(raw, Mapping):
            issues.append(
                DataIssue(
                    code="entry_not_object",
                    message=f"Entry {index} is not an object and was skipped",
                    index=index,
                )
            )
            rejected += 1
            continue

        extra = sorted(str(key) for key in raw if key not in _ENTRY_FIELDS)
        if extra:
            issues.append(
                DataIssue(
                    code="unexpected_field",
                    message=f"Entry {index} has unexpected fields: {', '.join(extra)}",
                    index=index,
                )
            )

        entry, entry_issues = validate_entry(dict(raw), index=index)
        issues.extend(entry_issues)
        if entry is None:
            rejected += 1
            continue
        entries.append(entry)

    return AnalysisParseResult(source=source, entries=entries, issues=issues, rejected_count=rejected)


def parse_analysis_file(json_path: str | Path) -> AnalysisParseResult:
    """Read and validate an AI analysis payload stored as JSON."""

    path = Path(json_path)
    with path.open("r", encoding="utf-8-sig") as handle:
        payload = json.load(handle)
    return parse_analysis_payload(payload, source=str(path))


def require_valid(result: AnalysisParseResult) -> AnalysisParseResult:
    """Raise `InvalidEntryError` if any entry of the pass was rejected."""

    if result.rejected_count:
        rejecting = [issue for issue in result.issues if issue.code in _REJECTING_CODES]
        raise InvalidEntryError(rejecting)
    return result
