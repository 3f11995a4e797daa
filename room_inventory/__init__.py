"""Public API exports for room inventory merging and inspection comparison."""

from .compare import compare_inventories, format_highlight, select_highlight
from .ingest import AnalysisParseResult, parse_analysis_file, parse_analysis_payload, require_valid
from .merge import FoldedDuplicate, build_inventory, detect_folded_duplicates, merge_inventory
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
from .normalize import InvalidEntryError, normalize_key
from .service import InMemoryAnalysisCache, InMemoryDocumentStore, RoomAnalysisService, RoomNotFoundError
from .walkthrough import InspectionWalkthrough, WalkthroughError, WalkthroughState

__all__ = [
    "AnalysisParseResult",
    "AnalysisStatus",
    "DataIssue",
    "DiscrepancyEntry",
    "DiscrepancyReport",
    "FoldedDuplicate",
    "InMemoryAnalysisCache",
    "InMemoryDocumentStore",
    "InspectionReport",
    "InspectionWalkthrough",
    "InvalidEntryError",
    "Inventory",
    "ObjectEntry",
    "RoomAnalysisService",
    "RoomInspectionResult",
    "RoomNotFoundError",
    "RoomRecord",
    "WalkthroughError",
    "WalkthroughState",
    "build_inventory",
    "compare_inventories",
    "detect_folded_duplicates",
    "format_highlight",
    "merge_inventory",
    "normalize_key",
    "parse_analysis_file",
    "parse_analysis_payload",
    "require_valid",
    "select_highlight",
]
