"""File-set diffing and incremental update planning.

Compares two file sets path by path, classifies each path, and derives the
minimal write/delete plan needed to turn the old set into the new one.

Line changes use a naive index-aligned comparison: line i of the old file is
compared with line i of the new file, with no realignment after an insert or
delete. A single inserted line near the top therefore reports every later
line as changed. This is a known limitation kept for output compatibility;
do not swap in an LCS/Myers diff without updating consumers that count
changed lines.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from codekontext.models import FileRecord, file_set

logger = logging.getLogger(__name__)

FileSetLike = Iterable[FileRecord] | Mapping[str, FileRecord]


class DiffType(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


class LineChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class LineChange:
    line_number: int  # 1-based index of the aligned line
    type: LineChangeType
    content: str

    def to_dict(self) -> dict:
        return {"lineNumber": self.line_number, "type": self.type.value, "content": self.content}


@dataclass
class DiffEntry:
    path: str
    type: DiffType
    language: str = "plaintext"
    old_content: str | None = None
    new_content: str | None = None
    changes: list[LineChange] | None = None  # only for MODIFIED

    @property
    def changed_line_count(self) -> int:
        if not self.changes:
            return 0
        return sum(1 for c in self.changes if c.type != LineChangeType.UNCHANGED)

    def to_dict(self) -> dict:
        data: dict = {"path": self.path, "type": self.type.value, "language": self.language}
        if self.old_content is not None:
            data["oldContent"] = self.old_content
        if self.new_content is not None:
            data["newContent"] = self.new_content
        if self.changes is not None:
            data["changes"] = [c.to_dict() for c in self.changes]
        return data


@dataclass
class DiffReport:
    diffs: list[DiffEntry] = field(default_factory=list)
    added: int = 0
    modified: int = 0
    deleted: int = 0
    unchanged: int = 0
    total_files: int = 0

    def entries(self, diff_type: DiffType) -> list[DiffEntry]:
        return [d for d in self.diffs if d.type == diff_type]

    def paths(self, diff_type: DiffType) -> list[str]:
        return [d.path for d in self.diffs if d.type == diff_type]

    def to_dict(self) -> dict:
        return {
            "diffs": [d.to_dict() for d in self.diffs],
            "added": self.added,
            "modified": self.modified,
            "deleted": self.deleted,
            "unchanged": self.unchanged,
            "totalFiles": self.total_files,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class UpdateStats:
    updated: int
    deleted: int
    unchanged: int
    total: int


@dataclass
class IncrementalUpdate:
    files_to_update: list[FileRecord]
    files_to_delete: list[str]
    unchanged_files: list[FileRecord]
    stats: UpdateStats

    def to_dict(self) -> dict:
        return {
            "filesToUpdate": [f.to_dict() for f in self.files_to_update],
            "filesToDelete": list(self.files_to_delete),
            "unchangedFiles": [f.to_dict() for f in self.unchanged_files],
            "stats": {
                "updated": self.stats.updated,
                "deleted": self.stats.deleted,
                "unchanged": self.stats.unchanged,
                "total": self.stats.total,
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def compute_line_changes(old_content: str, new_content: str) -> list[LineChange]:
    """Index-aligned line comparison (see module docstring for its limits)."""
    old_lines = old_content.split("\n")
    new_lines = new_content.split("\n")
    changes: list[LineChange] = []

    for i in range(max(len(old_lines), len(new_lines))):
        old_line = old_lines[i] if i < len(old_lines) else None
        new_line = new_lines[i] if i < len(new_lines) else None
        line_number = i + 1

        if old_line is not None and old_line == new_line:
            changes.append(LineChange(line_number, LineChangeType.UNCHANGED, old_line))
            continue
        if old_line is not None:
            changes.append(LineChange(line_number, LineChangeType.REMOVED, old_line))
        if new_line is not None:
            changes.append(LineChange(line_number, LineChangeType.ADDED, new_line))

    return changes


def compute_diff(old_files: FileSetLike, new_files: FileSetLike) -> DiffReport:
    """Classify every path in either file set.

    Entries come out in new-set order first, followed by paths that exist only
    in the old set (in old-set order).
    """
    old_map = file_set(old_files)
    new_map = file_set(new_files)
    report = DiffReport()

    for path, new_file in new_map.items():
        old_file = old_map.get(path)
        if old_file is None:
            report.diffs.append(
                DiffEntry(path, DiffType.ADDED, new_file.language, new_content=new_file.content)
            )
            report.added += 1
        elif old_file.content == new_file.content:
            report.diffs.append(
                DiffEntry(
                    path,
                    DiffType.UNCHANGED,
                    new_file.language,
                    old_content=old_file.content,
                    new_content=new_file.content,
                )
            )
            report.unchanged += 1
        else:
            report.diffs.append(
                DiffEntry(
                    path,
                    DiffType.MODIFIED,
                    new_file.language,
                    old_content=old_file.content,
                    new_content=new_file.content,
                    changes=compute_line_changes(old_file.content, new_file.content),
                )
            )
            report.modified += 1

    for path, old_file in old_map.items():
        if path not in new_map:
            report.diffs.append(
                DiffEntry(path, DiffType.DELETED, old_file.language, old_content=old_file.content)
            )
            report.deleted += 1

    report.total_files = len(report.diffs)
    logger.debug(
        f"Diff: +{report.added} ~{report.modified} -{report.deleted} "
        f"={report.unchanged} ({report.total_files} paths)"
    )
    return report


def get_incremental_update(old_files: FileSetLike, new_files: FileSetLike) -> IncrementalUpdate:
    """Plan the writes and deletes that turn old_files into new_files."""
    old_map = file_set(old_files)
    report = compute_diff(old_map, new_files)

    files_to_update: list[FileRecord] = []
    files_to_delete: list[str] = []
    unchanged_files: list[FileRecord] = []

    for entry in report.diffs:
        if entry.type in (DiffType.ADDED, DiffType.MODIFIED):
            files_to_update.append(FileRecord(entry.path, entry.new_content or "", entry.language))
        elif entry.type == DiffType.DELETED:
            files_to_delete.append(entry.path)
        else:
            unchanged_files.append(old_map[entry.path])

    stats = UpdateStats(
        updated=report.added + report.modified,
        deleted=report.deleted,
        unchanged=report.unchanged,
        total=report.added + report.modified + report.deleted + report.unchanged,
    )
    return IncrementalUpdate(files_to_update, files_to_delete, unchanged_files, stats)


def merge_files(existing_files: FileSetLike, update: IncrementalUpdate) -> list[FileRecord]:
    """Apply an incremental update to an existing file list.

    Existing files keep their order; deleted paths and paths being rewritten
    are dropped, then every updated file is appended in plan order.
    """
    existing = file_set(existing_files)
    deleted = set(update.files_to_delete)
    updated = {f.path for f in update.files_to_update}

    merged = [f for path, f in existing.items() if path not in deleted and path not in updated]
    merged.extend(file_set(update.files_to_update).values())
    return merged


def format_diff_summary(report: DiffReport) -> str:
    """Render a human-readable summary of a diff report."""
    lines = [
        "File Changes Summary",
        "-" * 25,
        f"  Added:     {report.added}",
        f"  Modified:  {report.modified}",
        f"  Deleted:   {report.deleted}",
        f"  Unchanged: {report.unchanged}",
        f"  Total:     {report.total_files}",
    ]

    added = report.entries(DiffType.ADDED)
    if added:
        lines.append("\nAdded Files:")
        lines.extend(f"  + {d.path}" for d in added)

    modified = report.entries(DiffType.MODIFIED)
    if modified:
        lines.append("\nModified Files:")
        lines.extend(f"  ~ {d.path} ({d.changed_line_count} changes)" for d in modified)

    deleted = report.entries(DiffType.DELETED)
    if deleted:
        lines.append("\nDeleted Files:")
        lines.extend(f"  - {d.path}" for d in deleted)

    unchanged = report.entries(DiffType.UNCHANGED)
    if unchanged:
        lines.append("\nUnchanged Files:")
        lines.extend(f"    {d.path}" for d in unchanged)

    return "\n".join(lines)
