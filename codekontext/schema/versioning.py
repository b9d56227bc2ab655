"""Schema version manager.

Reads the $schemaVersion bookkeeping field on an application schema document,
walks the fixed migration table to bring it up to CURRENT_SCHEMA_VERSION, and
validates structural compatibility.

Nothing here raises on bad data. Unsupported versions, missing fields and
malformed version strings come back as warnings/issues on the result so the
generation pipeline can always react to a structured answer.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone

from codekontext.schema.defaults import (
    REQUIRED_FIELDS,
    create_empty_schema,
    is_valid_platform,
)
from codekontext.schema.migrations import (
    CURRENT_SCHEMA_VERSION,
    DEFAULT_SCHEMA_VERSION,
    MIGRATIONS,
    MIN_SUPPORTED_VERSION,
    MigrationStep,
    find_step,
)

logger = logging.getLogger(__name__)

VERSION_KEY = "$schemaVersion"
CREATED_AT_KEY = "$createdAt"
UPDATED_AT_KEY = "$updatedAt"
HISTORY_KEY = "$history"
BOOKKEEPING_PREFIX = "$"

VERSION_PATTERN = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


@dataclass
class VersionInfo:
    current: str
    minimum: str
    is_valid: bool
    needs_migration: bool
    migration_path: list[str] | None = None

    def to_dict(self) -> dict:
        data = {
            "current": self.current,
            "minimum": self.minimum,
            "isValid": self.is_valid,
            "needsMigration": self.needs_migration,
        }
        if self.migration_path is not None:
            data["migrationPath"] = list(self.migration_path)
        return data


@dataclass
class MigrationResult:
    success: bool
    from_version: str
    to_version: str
    schema: dict
    changes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "fromVersion": self.from_version,
            "toVersion": self.to_version,
            "schema": self.schema,
            "changes": list(self.changes),
            "warnings": list(self.warnings),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)


@dataclass
class CompatibilityResult:
    compatible: bool
    issues: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"compatible": self.compatible, "issues": list(self.issues)}


@dataclass
class VersionChanges:
    version: str
    changes: list[str]


@dataclass
class VersionDiff:
    from_version: str
    to_version: str
    changes: list[VersionChanges] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "fromVersion": self.from_version,
            "toVersion": self.to_version,
            "changes": [{"version": c.version, "changes": list(c.changes)} for c in self.changes],
        }


def _timestamp(now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_version(version: str) -> tuple[int, int, int]:
    """Split a version into (major, minor, patch); bad or missing parts read as 0."""
    parts: list[int] = []
    for raw in str(version).split(".")[:3]:
        try:
            parts.append(int(raw))
        except ValueError:
            parts.append(0)
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


def compare_versions(a: str, b: str) -> int:
    """Numeric three-way comparison: -1 if a < b, 0 if equal, 1 if a > b."""
    va, vb = parse_version(a), parse_version(b)
    if va == vb:
        return 0
    return -1 if va < vb else 1


def is_version_supported(version: str) -> bool:
    return compare_versions(version, MIN_SUPPORTED_VERSION) >= 0


def schema_version(schema: Mapping) -> str:
    value = schema.get(VERSION_KEY)
    if value is None or value == "":
        return DEFAULT_SCHEMA_VERSION
    return str(value)


def get_migration_path(from_version: str, to_version: str) -> list[str] | None:
    """Versions visited when walking the step table from one version to another.

    Returns [] when the versions are equal and None when the table has no
    route (unknown start, downgrade, or a target that is skipped over).
    """
    path: list[str] = []
    current = from_version
    while compare_versions(current, to_version) < 0:
        step = find_step(current)
        if step is None:
            return None
        path.append(step.to_version)
        current = step.to_version
    if current != to_version:
        return None
    return path


def get_version_info(schema: Mapping) -> VersionInfo:
    current = schema_version(schema)
    needs_migration = current != CURRENT_SCHEMA_VERSION
    path = get_migration_path(current, CURRENT_SCHEMA_VERSION) if needs_migration else None
    return VersionInfo(
        current=current,
        minimum=MIN_SUPPORTED_VERSION,
        is_valid=is_version_supported(current),
        needs_migration=needs_migration,
        migration_path=path or None,
    )


def _steps_for(current: str, warnings: list[str]) -> list[MigrationStep]:
    path = get_migration_path(current, CURRENT_SCHEMA_VERSION)
    if path is not None:
        steps: list[MigrationStep] = []
        version = current
        for target in path:
            step = find_step(version)
            steps.append(step)
            version = target
        return steps

    # Unknown intermediate version: replay every step that lands above it
    steps = [s for s in MIGRATIONS if compare_versions(s.to_version, current) > 0]
    warnings.append(
        f"No exact migration path from {current}; applied {len(steps)} later migration step(s)"
    )
    return steps


def migrate(schema: Mapping, now: datetime | None = None) -> MigrationResult:
    """Bring a schema document up to CURRENT_SCHEMA_VERSION.

    The input is never mutated. On success the returned schema is a new
    document with $schemaVersion, $updatedAt and a new $history entry.
    """
    current = schema_version(schema)

    if not is_version_supported(current):
        warning = f"Version {current} is not supported. Minimum: {MIN_SUPPORTED_VERSION}"
        logger.warning(warning)
        return MigrationResult(
            success=False,
            from_version=current,
            to_version=CURRENT_SCHEMA_VERSION,
            schema=schema,
            warnings=[warning],
        )

    direction = compare_versions(current, CURRENT_SCHEMA_VERSION)
    if direction >= 0:
        warnings = []
        if direction > 0:
            warnings.append(f"Schema version {current} is newer than current {CURRENT_SCHEMA_VERSION}")
            logger.info(warnings[0])
        return MigrationResult(
            success=True,
            from_version=current,
            to_version=current,
            schema=schema,
            changes=["No migration needed"],
            warnings=warnings,
        )

    warnings: list[str] = []
    changes: list[str] = []
    migrated = copy.deepcopy(dict(schema))
    for step in _steps_for(current, warnings):
        migrated, step_changes = step.apply(migrated)
        changes.extend(f"[{step.label}] {c}" for c in step_changes)

    stamp = _timestamp(now)
    migrated[VERSION_KEY] = CURRENT_SCHEMA_VERSION
    migrated[UPDATED_AT_KEY] = stamp
    history = migrated.get(HISTORY_KEY)
    migrated[HISTORY_KEY] = (list(history) if isinstance(history, list) else []) + [
        {"version": CURRENT_SCHEMA_VERSION, "timestamp": stamp, "changes": list(changes)}
    ]

    logger.info(f"Migrated schema {current} -> {CURRENT_SCHEMA_VERSION} ({len(changes)} change(s))")
    return MigrationResult(
        success=True,
        from_version=current,
        to_version=CURRENT_SCHEMA_VERSION,
        schema=migrated,
        changes=changes,
        warnings=warnings,
    )


def create_versioned_schema(
    partial: Mapping | None,
    platform: str,
    now: datetime | None = None,
) -> dict:
    """Fill in missing sections for a platform and stamp version bookkeeping."""
    if not is_valid_platform(platform):
        raise ValueError(f"Unknown platform: {platform!r}")

    partial = copy.deepcopy(dict(partial or {}))
    stamp = _timestamp(now)

    defaults = create_empty_schema(platform)

    meta = defaults["meta"]
    if isinstance(partial.get("meta"), dict):
        meta.update({k: v for k, v in partial["meta"].items() if v is not None})
    meta["platform"] = platform
    if not meta.get("version"):
        meta["version"] = "1.0.0"

    schema = dict(partial)
    for key, default in defaults.items():
        if schema.get(key) is None:
            schema[key] = default
    schema.update({
        "meta": meta,
        VERSION_KEY: CURRENT_SCHEMA_VERSION,
        CREATED_AT_KEY: stamp,
        UPDATED_AT_KEY: stamp,
        HISTORY_KEY: [
            {"version": CURRENT_SCHEMA_VERSION, "timestamp": stamp, "changes": ["Initial schema creation"]}
        ],
    })
    return schema


def validate_compatibility(schema: Mapping) -> CompatibilityResult:
    """Check required sections and the version string format; collects every issue."""
    issues: list[str] = []

    for name in REQUIRED_FIELDS:
        if schema.get(name) is None:
            issues.append(f"Missing required field: {name}")

    if VERSION_KEY in schema:
        value = schema[VERSION_KEY]
        if not isinstance(value, str) or not VERSION_PATTERN.fullmatch(value):
            issues.append(f"Invalid version format: {value}")

    return CompatibilityResult(compatible=not issues, issues=issues)


def get_version_diff(from_version: str, to_version: str) -> VersionDiff:
    """Release notes for every step landing in (from_version, to_version]."""
    diff = VersionDiff(from_version=from_version, to_version=to_version)
    for step in MIGRATIONS:
        if (
            compare_versions(step.to_version, from_version) > 0
            and compare_versions(step.to_version, to_version) <= 0
        ):
            diff.changes.append(VersionChanges(step.to_version, list(step.description)))
    return diff


def export_schema(schema: Mapping) -> dict:
    """Copy of the document without $-prefixed bookkeeping fields."""
    return {
        key: copy.deepcopy(value)
        for key, value in schema.items()
        if not (isinstance(key, str) and key.startswith(BOOKKEEPING_PREFIX))
    }
