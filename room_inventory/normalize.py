"""Field-level normalization helpers used at the AI-output boundary."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from .models import DataIssue, ObjectEntry


class InvalidEntryError(ValueError):
    """Raised when strict ingestion meets an entry with an empty name or bad count."""

    def __init__(self, issues: list[DataIssue]) -> None:
        self.issues = issues
        details = "; ".join(issue.message for issue in issues)
        super().__init__(f"Invalid object entries: {details}")


def normalize_key(name: str) -> str:
    """Return the matching key for an object name.

    The name is trimmed and case-folded rather than only lowercased, so
    "Straße" and "STRASSE" share a key.
    """

    return name.strip().casefold()


def normalize_text(value: str | None, *, field: str) -> tuple[str | None, list[DataIssue]]:
    """Trim text, collapse empty values to None, and emit quality issues."""

    if value is None:
        return None, [DataIssue(code="missing_value", message=f"{field} is missing", field=field)]

    stripped = value.strip()
    issues: list[DataIssue] = []

    if stripped == "":
        issues.append(DataIssue(code="missing_value", message=f"{field} is empty", field=field))
        return None, issues

    if stripped != value:
        issues.append(
            DataIssue(
                code="whitespace_trimmed",
                message=f"{field} had leading/trailing whitespace",
                field=field,
            )
        )

    return stripped, issues


def parse_count(value: Any) -> tuple[int | None, list[DataIssue]]:
    """Parse an object count as a positive int and emit issues for anything else."""

    if value is None:
        return None, [DataIssue(code="missing_value", message="count is missing", field="count")]

    # bool is an int subclass; the model never means True as "1 chair".
    if isinstance(value, bool):
        return None, [DataIssue(code="invalid_count", message=f"Count is not numeric: {value}", field="count")]

    issues: list[DataIssue] = []
    if isinstance(value, int):
        count = value
    else:
        text = str(value).strip()
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None, [DataIssue(code="invalid_count", message=f"Count is not numeric: {value}", field="count")]

        if not parsed.is_finite() or parsed != parsed.to_integral_value():
            return None, [
                DataIssue(
                    code="non_integral_count",
                    message=f"Count is not an integer: {value}",
                    field="count",
                )
            ]

        if isinstance(value, float) or "." in text:
            issues.append(
                DataIssue(
                    code="decimal_count_format",
                    message=f"Count uses decimal formatting: {value}",
                    field="count",
                )
            )
        count = int(parsed)

    if count < 1:
        issues.append(
            DataIssue(
                code="non_positive_count",
                message=f"Count must be at least 1: {count}",
                field="count",
            )
        )
        return None, issues

    return count, issues


def validate_entry(raw: dict[str, Any], *, index: int | None = None) -> tuple[ObjectEntry | None, list[DataIssue]]:
    """Validate one raw AI object entry.

    Returns ``None`` for entries that must not reach the merger or comparator:
    empty names and missing, non-integer or non-positive counts.
    """

    raw_name = raw.get("name")
    if raw_name is not None and not isinstance(raw_name, str):
        raw_name = str(raw_name)

    name, name_issues = normalize_text(raw_name, field="name")
    count, count_issues = parse_count(raw.get("count"))

    issues = [
        DataIssue(code=issue.code, message=issue.message, field=issue.field, index=index)
        for issue in [*name_issues, *count_issues]
    ]

    if name is None or count is None:
        return None, issues
    return ObjectEntry(name=name, count=count), issues
