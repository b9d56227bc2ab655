"""Shared test fixtures for codekontext."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from codekontext.models import FileRecord, Message
from codekontext.schema.versioning import create_versioned_schema


@pytest.fixture(autouse=True)
def activity_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep every test's activity log out of the working directory."""
    log_path = tmp_path / "activity.jsonl"
    monkeypatch.setenv("CODEKONTEXT_LOG_PATH", str(log_path))
    return log_path


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 12, 1, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def old_files() -> list[FileRecord]:
    return [
        FileRecord("A.tsx", "x", "typescript"),
        FileRecord("B.tsx", "y", "typescript"),
        FileRecord("C.css", "z", "css"),
    ]


@pytest.fixture
def new_files() -> list[FileRecord]:
    return [
        FileRecord("A.tsx", "x2", "typescript"),
        FileRecord("B.tsx", "y", "typescript"),
        FileRecord("D.tsx", "w", "typescript"),
    ]


@pytest.fixture
def next_project() -> list[FileRecord]:
    return [
        FileRecord("README.md", "# Demo app\n", "markdown"),
        FileRecord("package.json", '{"name": "demo"}', "json"),
        FileRecord("app/page.tsx", "export default function Page() { return <main />; }", "typescript"),
        FileRecord("app/layout.tsx", "export default function Layout({ children }) { return children; }", "typescript"),
        FileRecord("components/Hero.tsx", "export function Hero() { return <section />; }", "typescript"),
        FileRecord("lib/utils.ts", "export const cn = (...c) => c.join(' ');", "typescript"),
        FileRecord("app/globals.css", "body { margin: 0; }", "css"),
    ]


@pytest.fixture
def vanilla_project() -> list[FileRecord]:
    return [
        FileRecord("index.html", "<!doctype html><html></html>", "html"),
        FileRecord("styles.css", "body { color: red; }", "css"),
        FileRecord("script.js", "console.log('hi');", "javascript"),
    ]


@pytest.fixture
def messages() -> list[Message]:
    return [
        Message("user", "Add a hero section"),
        Message("assistant", "Done, see components/Hero.tsx"),
        Message("user", "Make the hero in components/hero.tsx taller"),
    ]


@pytest.fixture
def schema_v1() -> dict:
    """A webapp schema from before responsive/PWA support existed."""
    return {
        "$schemaVersion": "1.0.0",
        "meta": {"name": "Task Tracker", "description": "Team todo lists", "platform": "webapp"},
        "design": {"theme": "light", "colors": {"primary": "#112233"}},
        "structure": {"navigation": {"type": "header", "items": []}},
        "features": {"auth": {"enabled": True, "providers": ["email"]}},
    }


@pytest.fixture
def current_schema(fixed_now: datetime) -> dict:
    return create_versioned_schema({"meta": {"name": "Shop"}}, "website", now=fixed_now)
