"""Command-line runner for room inventory merging and inspection comparison.

``merge`` folds one or more AI analysis passes into an existing room
inventory; ``compare`` checks an observed inventory against the expected one.
Both write a structured JSON report under `output/` by default.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from room_inventory import build_inventory, compare_inventories, detect_folded_duplicates, merge_inventory
from room_inventory.ingest import AnalysisParseResult, parse_analysis_file, require_valid
from room_inventory.serialize import discrepancy_report_to_dict, inventory_to_dicts, issue_to_dict

DEFAULT_OUTPUT = Path("output/inventory_report.json")

logger = logging.getLogger(__name__)

MERGE_RULE = (
    "Entries whose names match after trimming and case-folding are merged by "
    "deterministic addition; the first-seen display name is kept."
)


def _load(path: Path, *, strict: bool) -> AnalysisParseResult:
    """Parse one JSON input, optionally failing on rejected entries."""

    result = parse_analysis_file(path)
    if strict:
        require_valid(result)
    return result


def _collect_issues(result: AnalysisParseResult, *, role: str) -> list[dict[str, Any]]:
    """Collect validation issues for one input file."""

    issues: list[dict[str, Any]] = []
    for issue in result.issues:
        item = issue_to_dict(issue)
        item["input"] = role
        item["source"] = result.source
        issues.append(item)
    return issues


def _metadata(command: str, **paths: Any) -> dict[str, Any]:
    return {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "command": command,
        **paths,
        "deterministic_merge_rule": MERGE_RULE,
    }


def build_merge_report(
    *,
    existing_path: Path,
    incoming_paths: list[Path],
    strict: bool = False,
) -> dict[str, Any]:
    """Merge each incoming pass, in order, into the existing inventory."""

    existing = _load(existing_path, strict=strict)
    inventory = build_inventory(existing.entries)
    issues = _collect_issues(existing, role="existing")
    folded: list[dict[str, Any]] = []
    rejected = existing.rejected_count

    for position, path in enumerate(incoming_paths):
        incoming = _load(path, strict=strict)
        role = f"incoming[{position}]"
        for duplicate in detect_folded_duplicates(inventory, incoming.entries):
            folded.append({"input": role, **duplicate})
        inventory = merge_inventory(inventory, incoming.entries)
        issues.extend(_collect_issues(incoming, role=role))
        rejected += incoming.rejected_count

    return {
        "metadata": _metadata(
            "merge",
            existing_path=str(existing_path),
            incoming_paths=[str(path) for path in incoming_paths],
        ),
        "summary": {
            "pass_count": len(incoming_paths),
            "object_type_count": len(inventory),
            "total_object_count": sum(entry.count for entry in inventory),
            "rejected_entry_count": rejected,
        },
        "objects": inventory_to_dicts(inventory),
        "data_quality_issues": {
            "entry_issues": issues,
            "keys_folded_by_addition": folded,
        },
    }


def build_compare_report(
    *,
    expected_path: Path,
    observed_path: Path,
    strict: bool = False,
) -> dict[str, Any]:
    """Compare an observed inventory against the expected one."""

    expected_result = _load(expected_path, strict=strict)
    observed_result = _load(observed_path, strict=strict)
    expected = build_inventory(expected_result.entries)
    observed = build_inventory(observed_result.entries)
    report = compare_inventories(expected, observed)

    return {
        "metadata": _metadata("compare", expected_path=str(expected_path), observed_path=str(observed_path)),
        "summary": {
            "expected_object_type_count": len(expected),
            "observed_object_type_count": len(observed),
            "discrepancy_count": len(report.discrepancies),
            "missing_count": sum(1 for entry in report.discrepancies if entry.is_missing),
        },
        "expected": inventory_to_dicts(expected),
        "observed": inventory_to_dicts(observed),
        "comparison": discrepancy_report_to_dict(report),
        "data_quality_issues": {
            "entry_issues": [
                *_collect_issues(expected_result, role="expected"),
                *_collect_issues(observed_result, role="observed"),
            ],
        },
    }


def write_report(report: dict[str, Any], *, output_path: Path) -> None:
    """Write report JSON to disk."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(report, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for report generation."""

    parser = argparse.ArgumentParser(description="Merge room inventories or compare them for an inspection.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    merge_parser = subparsers.add_parser("merge", help="Merge AI analysis passes into a room inventory")
    merge_parser.add_argument("--existing", type=Path, required=True, help="Path to the current inventory JSON")
    merge_parser.add_argument(
        "--incoming",
        type=Path,
        action="append",
        default=[],
        help="Path to an AI analysis JSON; repeat to merge several passes in order",
    )

    compare_parser = subparsers.add_parser("compare", help="Compare an observed inventory with the expected one")
    compare_parser.add_argument("--expected", type=Path, required=True, help="Path to the expected inventory JSON")
    compare_parser.add_argument("--observed", type=Path, required=True, help="Path to the observed inventory JSON")

    for sub in (merge_parser, compare_parser):
        sub.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Output JSON path")
        sub.add_argument("--strict", action="store_true", help="Fail on invalid entries instead of reporting them")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for command-line execution."""

    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "merge":
        report = build_merge_report(existing_path=args.existing, incoming_paths=args.incoming, strict=args.strict)
    else:
        report = build_compare_report(expected_path=args.expected, observed_path=args.observed, strict=args.strict)

    write_report(report, output_path=args.output)
    logger.debug("Report summary: %s", report["summary"])
    print(f"Wrote {args.command} report: {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
