"""Diff engine: file-set diffs, incremental update plans, and schema change detection."""

from codekontext.diff.engine import (
    DiffEntry,
    DiffReport,
    DiffType,
    IncrementalUpdate,
    LineChange,
    LineChangeType,
    UpdateStats,
    compute_diff,
    compute_line_changes,
    format_diff_summary,
    get_incremental_update,
    merge_files,
)
from codekontext.diff.schema_changes import (
    AFFECTED_FILES,
    SchemaField,
    detect_schema_changes,
    get_affected_files,
)

__all__ = [
    "AFFECTED_FILES",
    "DiffEntry",
    "DiffReport",
    "DiffType",
    "IncrementalUpdate",
    "LineChange",
    "LineChangeType",
    "SchemaField",
    "UpdateStats",
    "compute_diff",
    "compute_line_changes",
    "detect_schema_changes",
    "format_diff_summary",
    "get_affected_files",
    "get_incremental_update",
    "merge_files",
]
