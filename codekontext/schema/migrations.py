"""Fixed migration step table for application schema documents.

Each step moves a document from one known version to the next. Transforms
mutate the copy handed to them and return the list of changes they made;
MigrationStep.apply() does the copying so callers never see mutation.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from dataclasses import dataclass

from codekontext.schema.defaults import DEFAULT_PRIMARY_COLOR, default_responsive

CURRENT_SCHEMA_VERSION = "2.0.0"
MIN_SUPPORTED_VERSION = "1.0.0"
DEFAULT_SCHEMA_VERSION = "1.0.0"  # assumed when a document has no $schemaVersion


@dataclass(frozen=True)
class VersionRelease:
    version: str
    date: str
    changes: tuple[str, ...]


VERSION_HISTORY = (
    VersionRelease("1.0.0", "2024-01-01", ("Initial schema structure",)),
    VersionRelease("1.1.0", "2024-03-01", ("Added PWA support", "Added responsive config")),
    VersionRelease("1.2.0", "2024-06-01", ("Added integrations", "Enhanced auth schema")),
    VersionRelease(
        "2.0.0",
        "2024-12-01",
        ("Unified schema format", "Added subPlatform types", "Enhanced validation"),
    ),
)


@dataclass(frozen=True)
class MigrationStep:
    from_version: str
    to_version: str
    description: tuple[str, ...]
    transform: Callable[[dict], list[str]]

    @property
    def label(self) -> str:
        return f"{self.from_version}→{self.to_version}"

    def apply(self, schema: dict) -> tuple[dict, list[str]]:
        migrated = copy.deepcopy(schema)
        changes = self.transform(migrated)
        return migrated, changes


def _add_responsive_and_pwa(schema: dict) -> list[str]:
    changes: list[str] = []

    design = schema.get("design")
    if isinstance(design, dict) and not design.get("responsive"):
        design["responsive"] = default_responsive()
        changes.append("Added default responsive configuration")

    meta = schema.get("meta") if isinstance(schema.get("meta"), dict) else {}
    features = schema.get("features")
    if meta.get("platform") == "webapp" and not (isinstance(features, dict) and features.get("pwa")):
        if not isinstance(features, dict):
            features = schema["features"] = {}
        name = meta.get("name") or ""
        colors = design.get("colors") if isinstance(design, dict) else None
        if not isinstance(colors, dict):
            colors = {}
        features["pwa"] = {
            "enabled": False,
            "name": name,
            "shortName": name[:12],
            "themeColor": colors.get("primary") or DEFAULT_PRIMARY_COLOR,
            "backgroundColor": "#ffffff",
            "display": "standalone",
            "orientation": "any",
            "startUrl": "/",
            "icons": [],
            "serviceWorker": {"enabled": False, "cachingStrategy": "stale-while-revalidate"},
        }
        changes.append("Added PWA configuration (disabled by default)")

    return changes


def _add_integrations_and_auth_redirects(schema: dict) -> list[str]:
    changes: list[str] = []

    if not isinstance(schema.get("integrations"), list):
        schema["integrations"] = []
        changes.append("Added empty integrations array")

    features = schema.get("features")
    auth = features.get("auth") if isinstance(features, dict) else None
    if isinstance(auth, dict):
        if not auth.get("redirectAfterLogin"):
            auth["redirectAfterLogin"] = "/"
            changes.append("Added default redirectAfterLogin")
        if not auth.get("redirectAfterLogout"):
            auth["redirectAfterLogout"] = "/login"
            changes.append("Added default redirectAfterLogout")

    return changes


def _unify_structure(schema: dict) -> list[str]:
    changes: list[str] = []

    meta = schema.get("meta")
    if isinstance(meta, dict) and not meta.get("version"):
        meta["version"] = "1.0.0"
        changes.append("Added default meta.version")

    structure = schema.get("structure")
    if isinstance(structure, dict):
        if not isinstance(structure.get("pages"), list):
            structure["pages"] = []
            changes.append("Initialized empty pages array")
        if not isinstance(structure.get("layouts"), list):
            structure["layouts"] = []
            changes.append("Initialized empty layouts array")

    if not isinstance(schema.get("components"), list):
        schema["components"] = []
        changes.append("Initialized empty components array")

    design = schema.get("design")
    if isinstance(design, dict) and not design.get("spacing"):
        design["spacing"] = "normal"
        changes.append("Added default spacing mode")

    return changes


def _release_notes(version: str) -> tuple[str, ...]:
    for release in VERSION_HISTORY:
        if release.version == version:
            return release.changes
    return ()


MIGRATIONS: tuple[MigrationStep, ...] = (
    MigrationStep("1.0.0", "1.1.0", _release_notes("1.1.0"), _add_responsive_and_pwa),
    MigrationStep("1.1.0", "1.2.0", _release_notes("1.2.0"), _add_integrations_and_auth_redirects),
    MigrationStep("1.2.0", "2.0.0", _release_notes("2.0.0"), _unify_structure),
)


def find_step(from_version: str) -> MigrationStep | None:
    for step in MIGRATIONS:
        if step.from_version == from_version:
            return step
    return None
