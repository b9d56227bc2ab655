"""Load file sets, chat histories and schema documents from disk.

Only the CLI and MCP surfaces touch the filesystem; the pipelines themselves
work on in-memory records.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from codekontext.models import FileRecord, Message, language_for_path

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDES = frozenset({
    ".git",
    "node_modules",
    ".next",
    "dist",
    "build",
    "__pycache__",
    ".venv",
})


def load_directory(root: Path, exclude: frozenset[str] = DEFAULT_EXCLUDES) -> list[FileRecord]:
    """Read every UTF-8 text file under root as a FileRecord, sorted by path."""
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Directory not found: {root}")

    records: list[FileRecord] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in exclude)
        for name in filenames:
            full_path = Path(dirpath) / name
            rel = full_path.relative_to(root).as_posix()
            try:
                content = full_path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                logger.debug(f"Skipping non-text file {rel}")
                continue
            records.append(FileRecord(path=rel, content=content, language=language_for_path(rel)))

    records.sort(key=lambda r: r.path)
    return records


def load_files_json(path: Path) -> list[FileRecord]:
    """Load a JSON array of {path, content, language} objects."""
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("files", [])
    return [FileRecord.from_dict(item) for item in data]


def load_file_set(path: Path) -> list[FileRecord]:
    """Load a file set from either a project directory or a JSON export."""
    path = Path(path)
    if path.is_dir():
        return load_directory(path)
    return load_files_json(path)


def load_messages(path: Path) -> list[Message]:
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("messages", [])
    return [Message.from_dict(item) for item in data]


def load_schema(path: Path) -> dict:
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Schema document must be a JSON object: {path}")
    return data


def dump_json(data: object, path: Path) -> Path:
    path = Path(path)
    path.write_text(json.dumps(data, indent=2, default=str) + "\n")
    return path
