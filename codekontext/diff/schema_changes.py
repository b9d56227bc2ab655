"""Schema-level change detection and the files each change touches.

Only the top-level sections are compared, plus design.colors one level down.
Colors are the most common tweak target, and the affected-files table is keyed
to this exact granularity.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType


class SchemaField(str, Enum):
    META = "meta"
    DESIGN = "design"
    DESIGN_COLORS = "design.colors"
    DESIGN_TYPOGRAPHY = "design.typography"
    STRUCTURE = "structure"
    STRUCTURE_PAGES = "structure.pages"
    STRUCTURE_NAVIGATION = "structure.navigation"
    FEATURES = "features"
    FEATURES_AUTH = "features.auth"
    FEATURES_DATABASE = "features.database"
    COMPONENTS = "components"
    INTEGRATIONS = "integrations"


COMPARED_SECTIONS = (
    SchemaField.META,
    SchemaField.DESIGN,
    SchemaField.STRUCTURE,
    SchemaField.COMPONENTS,
    SchemaField.FEATURES,
    SchemaField.INTEGRATIONS,
)

AFFECTED_FILES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    SchemaField.META.value: ("package.json", "app.json", "index.html"),
    SchemaField.DESIGN.value: ("globals.css", "tailwind.config.ts", "styles.css", "constants/Colors.ts"),
    SchemaField.DESIGN_COLORS.value: ("globals.css", "tailwind.config.ts", "styles.css"),
    SchemaField.DESIGN_TYPOGRAPHY.value: ("globals.css", "styles.css"),
    SchemaField.STRUCTURE.value: ("app/**/*", "pages/**/*"),
    SchemaField.STRUCTURE_PAGES.value: ("app/**/*", "pages/**/*"),
    SchemaField.STRUCTURE_NAVIGATION.value: ("components/nav/**/*", "app/(tabs)/**/*"),
    SchemaField.FEATURES.value: ("lib/**/*",),
    SchemaField.FEATURES_AUTH.value: ("app/(auth)/**/*", "lib/supabase.ts", "middleware.ts"),
    SchemaField.FEATURES_DATABASE.value: ("lib/supabase.ts", "types/database.ts"),
    SchemaField.COMPONENTS.value: ("components/**/*",),
    SchemaField.INTEGRATIONS.value: ("lib/**/*", "components/**/*"),
})


def _section(schema: Mapping, key: str):
    return schema.get(key) if isinstance(schema, Mapping) else None


def _same(a, b) -> bool:
    # Canonical JSON, so true and 1 differ the way they do in the document
    return json.dumps(a, sort_keys=True, default=str) == json.dumps(b, sort_keys=True, default=str)


def detect_schema_changes(old_schema: Mapping, new_schema: Mapping) -> list[str]:
    """List the schema sections that differ between two documents.

    Sections are compared as canonical JSON in a fixed order; a missing
    section equals None. "design.colors" follows "design" when the colors
    sub-object changed too.
    """
    if old_schema is new_schema:
        return []

    changes: list[str] = []
    for section in COMPARED_SECTIONS:
        old_value = _section(old_schema, section.value)
        new_value = _section(new_schema, section.value)
        if _same(old_value, new_value):
            continue
        changes.append(section.value)

        if section is SchemaField.DESIGN:
            if not _same(_section(old_value, "colors"), _section(new_value, "colors")):
                changes.append(SchemaField.DESIGN_COLORS.value)

    return changes


def get_affected_files(changed_fields: Iterable[str]) -> list[str]:
    """Map changed schema fields to the file globs that need regenerating."""
    affected: dict[str, None] = {}
    for changed in changed_fields:
        key = changed.value if isinstance(changed, SchemaField) else changed
        for pattern in AFFECTED_FILES.get(key, ()):
            affected.setdefault(pattern, None)
    return list(affected)
