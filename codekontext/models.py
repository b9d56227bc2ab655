"""Core data models shared by the context, diff, and schema pipelines."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

DEFAULT_LANGUAGE = "plaintext"

LANGUAGE_BY_EXTENSION = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "json": "json",
    "css": "css",
    "scss": "scss",
    "html": "html",
    "md": "markdown",
    "py": "python",
    "go": "go",
    "rs": "rust",
    "java": "java",
}


@dataclass(frozen=True)
class FileRecord:
    path: str  # forward-slash separated, no leading slash
    content: str = ""
    language: str = DEFAULT_LANGUAGE

    @classmethod
    def from_dict(cls, data: Mapping) -> FileRecord:
        path = data["path"]
        if not isinstance(path, str) or not path:
            raise ValueError(f"File record has an invalid path: {path!r}")
        return cls(
            path=path,
            content=data.get("content") or "",
            language=data.get("language") or DEFAULT_LANGUAGE,
        )

    def to_dict(self) -> dict:
        return {"path": self.path, "content": self.content, "language": self.language}


@dataclass(frozen=True)
class Message:
    role: str  # "user" | "assistant" | "system"
    content: str

    @classmethod
    def from_dict(cls, data: Mapping) -> Message:
        return cls(role=data["role"], content=data.get("content") or "")

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


def file_set(records: Iterable[FileRecord] | Mapping[str, FileRecord]) -> dict[str, FileRecord]:
    """Index records by path, keeping input order.

    Accepts either a sequence of records or an existing path-keyed mapping.
    Duplicate paths are a caller bug and raise ValueError.
    """
    if isinstance(records, Mapping):
        return dict(records)

    indexed: dict[str, FileRecord] = {}
    for record in records:
        if record.path in indexed:
            raise ValueError(f"Duplicate path in file set: {record.path}")
        indexed[record.path] = record
    return indexed


def language_for_path(path: str) -> str:
    """Guess a language tag from the file extension."""
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return DEFAULT_LANGUAGE
    ext = name.rsplit(".", 1)[-1].lower()
    return LANGUAGE_BY_EXTENSION.get(ext, DEFAULT_LANGUAGE)
