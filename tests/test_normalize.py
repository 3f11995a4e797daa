from __future__ import annotations

"""Unit tests for boundary normalization helpers.

Each case focuses on one rule applied to raw AI output before it may reach the
merger or comparator.
"""

from room_inventory.models import ObjectEntry
from room_inventory.normalize import normalize_key, normalize_text, parse_count, validate_entry


def _issue_codes(issues: list[object]) -> set[str]:
    return {issue.code for issue in issues}


def test_normalize_key_trims_and_lowercases() -> None:
    """Keys should ignore case and outer whitespace but keep inner spacing."""
    assert normalize_key("  Red Chair ") == "red chair"
    assert normalize_key("RED CHAIR") == normalize_key("red chair")
    assert normalize_key("red  chair") != normalize_key("red chair")


def test_normalize_text_trims_and_reports_whitespace() -> None:
    """Text values should be stripped and flagged when outer whitespace exists."""
    value, issues = normalize_text("  Floor Lamp  ", field="name")
    assert value == "Floor Lamp"
    assert _issue_codes(issues) == {"whitespace_trimmed"}


def test_normalize_text_empty_or_missing_values() -> None:
    """Missing and blank text should normalize to None and emit missing_value."""
    missing_value, missing_issues = normalize_text(None, field="name")
    empty_value, empty_issues = normalize_text("   ", field="name")

    assert missing_value is None
    assert _issue_codes(missing_issues) == {"missing_value"}
    assert empty_value is None
    assert _issue_codes(empty_issues) == {"missing_value"}


def test_parse_count_accepts_ints_and_integral_strings() -> None:
    """Plain integers pass cleanly; decimal-rendered integers are flagged."""
    assert parse_count(3) == (3, [])
    assert parse_count(" 4 ") == (4, [])

    parsed, issues = parse_count("2.0")
    assert parsed == 2
    assert _issue_codes(issues) == {"decimal_count_format"}

    parsed_float, float_issues = parse_count(5.0)
    assert parsed_float == 5
    assert _issue_codes(float_issues) == {"decimal_count_format"}


def test_parse_count_rejects_non_positive_counts() -> None:
    """Zero and negative counts are rejected at the boundary."""
    zero, zero_issues = parse_count(0)
    negative, negative_issues = parse_count("-2")

    assert zero is None
    assert _issue_codes(zero_issues) == {"non_positive_count"}
    assert negative is None
    assert _issue_codes(negative_issues) == {"non_positive_count"}


def test_parse_count_rejects_non_numeric_and_non_integral_values() -> None:
    """Non-numeric, fractional, boolean and missing counts all fail with clear codes."""
    assert _issue_codes(parse_count("two")[1]) == {"invalid_count"}
    assert _issue_codes(parse_count(1.5)[1]) == {"non_integral_count"}
    assert _issue_codes(parse_count("inf")[1]) == {"non_integral_count"}
    assert _issue_codes(parse_count(True)[1]) == {"invalid_count"}
    assert _issue_codes(parse_count(None)[1]) == {"missing_value"}
    assert parse_count("two")[0] is None


def test_validate_entry_builds_object_entry_with_indexed_issues() -> None:
    """Valid entries come back as ObjectEntry; issues carry the entry index."""
    entry, issues = validate_entry({"name": " Sofa ", "count": 1}, index=4)

    assert entry == ObjectEntry(name="Sofa", count=1)
    assert [(issue.code, issue.index) for issue in issues] == [("whitespace_trimmed", 4)]


def test_validate_entry_rejects_empty_name_or_bad_count() -> None:
    """Entries with an empty name or a non-positive count never become entries."""
    no_name, no_name_issues = validate_entry({"name": "", "count": 2}, index=0)
    bad_count, bad_count_issues = validate_entry({"name": "Lamp", "count": 0}, index=1)

    assert no_name is None
    assert _issue_codes(no_name_issues) == {"missing_value"}
    assert bad_count is None
    assert _issue_codes(bad_count_issues) == {"non_positive_count"}


def test_normalize_key_case_folds_beyond_lowercasing() -> None:
    """Case folding matches names that plain lowercasing would keep apart."""
    assert normalize_key("Straße") == normalize_key("STRASSE")
