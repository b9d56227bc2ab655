"""Activity logging for CLI commands and MCP tool calls.

Logs every invocation to a JSONL file so humans can see what context,
diffs and migrations their AI pipeline asked for. Each line is a JSON object
with timestamp, tool name, arguments, result preview, and duration.
"""

from __future__ import annotations

import json
import logging
import os
from collections import deque
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from codekontext.config import DEFAULT_LOG_PATH

logger = logging.getLogger(__name__)

RESULT_PREVIEW_LIMIT = 500


def _resolve_log_path() -> Path:
    env_path = os.getenv("CODEKONTEXT_LOG_PATH")
    if env_path:
        return Path(env_path)
    return DEFAULT_LOG_PATH


def log_tool_call(
    tool_name: str,
    arguments: dict,
    result_text: str,
    error: str | None,
    duration_ms: int,
) -> None:
    """Append a call entry to the activity log. Never raises."""
    entry = {
        "timestamp": datetime.now().isoformat(),
        "tool_name": tool_name,
        "arguments": arguments,
        "result_preview": result_text[:RESULT_PREVIEW_LIMIT] if result_text else "",
        "error": error,
        "duration_ms": duration_ms,
    }
    log_path = _resolve_log_path()
    try:
        line = json.dumps(entry, default=str)
        with open(log_path, "a") as f:
            f.write(line + "\n")
    except Exception as e:
        logger.debug(f"Could not write activity log {log_path}: {e}")


def _iter_entries(path: Path) -> Iterator[dict]:
    with open(path) as f:
        for line in f:
            if not line.strip():
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                logger.debug(f"Skipping corrupt activity log line in {path}")


def read_activity_log(
    limit: int = 20,
    tool_name: str | None = None,
    log_path: Path | None = None,
    errors_only: bool = False,
) -> list[dict]:
    """Newest-first entries, optionally narrowed to one tool or to failed calls."""
    path = log_path or _resolve_log_path()
    if limit <= 0 or not path.exists():
        return []

    tail: deque[dict] = deque(maxlen=limit)
    for entry in _iter_entries(path):
        if tool_name and entry.get("tool_name") != tool_name:
            continue
        if errors_only and not entry.get("error"):
            continue
        tail.append(entry)

    return list(reversed(tail))
