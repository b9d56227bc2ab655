"""Relevance scoring for context packing.

Scores are additive integers used only to order files before the token
budget is applied. The weights live in ScoringWeights so they can be tuned
without touching the packing loop.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from codekontext.models import FileRecord, Message

# Matched against the file's base name
ENTRY_POINT_PATTERNS = (
    re.compile(r"^index\.[jt]sx?$"),
    re.compile(r"^main\.[jt]sx?$"),
    re.compile(r"^app\.[jt]sx?$"),
    re.compile(r"^page\.[jt]sx?$"),
    re.compile(r"^layout\.[jt]sx?$"),
    re.compile(r"package\.json$"),
    re.compile(r"tsconfig\.json$"),
    re.compile(r"next\.config\.[jm]?[st]?$"),
)

SOURCE_DIRS = ("src/", "app/", "components/", "lib/", "pages/", "hooks/")

CODE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".vue", ".svelte")

FILE_REFERENCE_PATTERNS = (
    re.compile(r"`([^`]+\.[a-z]+)`", re.IGNORECASE),
    re.compile(r"(?:in|from|file|path)\s+[\"']?([^\s\"']+\.[a-z]+)[\"']?", re.IGNORECASE),
    re.compile(r"(?:components?|pages?|lib|hooks?|utils?)/[^\s]+\.[a-z]+", re.IGNORECASE),
)


@dataclass(frozen=True)
class ScoringWeights:
    active_file: int = 100
    entry_point: int = 30
    mentioned_in_messages: int = 50
    source_directory: int = 10
    code_extension: int = 15
    recent_message_window: int = 5  # how many trailing messages count as "recent"


DEFAULT_WEIGHTS = ScoringWeights()


def base_name(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def is_entry_point(path: str) -> bool:
    name = base_name(path)
    return any(pattern.search(name) for pattern in ENTRY_POINT_PATTERNS)


def recent_message_text(messages: Sequence[Message], window: int) -> str:
    """Lower-cased, space-joined content of the last `window` messages."""
    if window <= 0:
        return ""
    return " ".join(m.content for m in messages[-window:]).lower()


def score_file(
    file: FileRecord,
    active_file_path: str | None,
    recent_text: str,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    prioritize_active_file: bool = True,
) -> int:
    """Compute the additive relevance score for one file.

    `recent_text` is the output of recent_message_text(); it is computed once
    per build rather than per file.
    """
    score = 0

    if prioritize_active_file and active_file_path is not None and file.path == active_file_path:
        score += weights.active_file

    if is_entry_point(file.path):
        score += weights.entry_point

    if recent_text and file.path.lower() in recent_text:
        score += weights.mentioned_in_messages

    if any(d in file.path for d in SOURCE_DIRS):
        score += weights.source_directory

    if file.path.endswith(CODE_EXTENSIONS):
        score += weights.code_extension

    return score


def extract_file_references(messages: Sequence[Message]) -> list[str]:
    """Pull file-looking references out of chat messages.

    Picks up backticked names, "in/from/file/path <name>" phrases, and bare
    paths under common source directories. Returns unique references in
    first-seen order.
    """
    seen: dict[str, None] = {}
    for message in messages:
        for pattern in FILE_REFERENCE_PATTERNS:
            for match in pattern.finditer(message.content):
                ref = match.group(1) if pattern.groups else match.group(0)
                if ref and " " not in ref:
                    seen.setdefault(ref, None)
    return list(seen)
