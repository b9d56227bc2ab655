"""Tests for codekontext.activity: writing and reading the log."""

from __future__ import annotations

import json
from pathlib import Path

from codekontext.activity import RESULT_PREVIEW_LIMIT, log_tool_call, read_activity_log


def _write_entries(log_path: Path, tools: list[str]) -> None:
    with open(log_path, "a") as f:
        for i, tool in enumerate(tools):
            f.write(json.dumps({
                "timestamp": f"2024-01-01T00:00:{i:02d}",
                "tool_name": tool,
                "arguments": {},
                "result_preview": f"result {i}",
                "error": None,
                "duration_ms": i * 10,
            }) + "\n")


class TestLogToolCall:
    def test_creates_log_file(self, activity_log: Path):
        log_tool_call("migrate_schema", {"schema": "<object with 3 keys>"}, "ok", None, 100)
        entry = json.loads(activity_log.read_text().strip())
        assert entry["tool_name"] == "migrate_schema"
        assert entry["arguments"]["schema"] == "<object with 3 keys>"
        assert entry["duration_ms"] == 100
        assert entry["error"] is None

    def test_logs_error(self, activity_log: Path):
        log_tool_call("diff_files", {}, "", "something broke", 50)
        entry = json.loads(activity_log.read_text().strip())
        assert entry["error"] == "something broke"

    def test_truncates_result_preview(self, activity_log: Path):
        log_tool_call("build_context", {}, "x" * 1000, None, 10)
        entry = json.loads(activity_log.read_text().strip())
        assert len(entry["result_preview"]) == RESULT_PREVIEW_LIMIT

    def test_unwritable_path_does_not_raise(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CODEKONTEXT_LOG_PATH", str(tmp_path / "missing-dir" / "log.jsonl"))
        log_tool_call("diff_files", {}, "", None, 1)


    def test_unserializable_arguments_do_not_raise(self, activity_log: Path):
        circular: dict = {}
        circular["self"] = circular
        log_tool_call("build_context", circular, "ok", None, 1)
        assert not activity_log.exists()


class TestReadActivityLog:
    def test_read_missing(self, tmp_path: Path):
        assert read_activity_log(log_path=tmp_path / "missing.jsonl") == []

    def test_most_recent_first(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["context"] * 5)
        entries = read_activity_log(log_path=log_path)
        assert len(entries) == 5
        assert entries[0]["result_preview"] == "result 4"

    def test_filter_by_tool_name(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["diff", "migrate", "diff"])
        assert len(read_activity_log(tool_name="diff", log_path=log_path)) == 2

    def test_respects_limit(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["tool"] * 10)
        assert len(read_activity_log(limit=3, log_path=log_path)) == 3

    def test_limit_keeps_newest(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["tool"] * 10)
        entries = read_activity_log(limit=2, log_path=log_path)
        assert [e["result_preview"] for e in entries] == ["result 9", "result 8"]

    def test_errors_only(self, activity_log: Path):
        log_tool_call("migrate", {}, "ok", None, 1)
        log_tool_call("migrate", {}, "", "unsupported", 1)
        entries = read_activity_log(errors_only=True)
        assert len(entries) == 1
        assert entries[0]["error"] == "unsupported"

    def test_zero_limit(self, activity_log: Path):
        log_tool_call("diff", {}, "ok", None, 1)
        assert read_activity_log(limit=0) == []

    def test_skips_corrupt_lines(self, tmp_path: Path):
        log_path = tmp_path / "activity.jsonl"
        _write_entries(log_path, ["tool"])
        with open(log_path, "a") as f:
            f.write("not json\n\n")
        assert len(read_activity_log(log_path=log_path)) == 1

    def test_default_path_from_env(self, activity_log: Path):
        log_tool_call("validate_schema", {}, "ok", None, 3)
        assert read_activity_log()[0]["tool_name"] == "validate_schema"
