"""Schema version manager for application description documents."""

from codekontext.schema.defaults import PLATFORMS, create_empty_schema, is_valid_platform
from codekontext.schema.migrations import (
    CURRENT_SCHEMA_VERSION,
    MIGRATIONS,
    MIN_SUPPORTED_VERSION,
    VERSION_HISTORY,
    MigrationStep,
)
from codekontext.schema.versioning import (
    CompatibilityResult,
    MigrationResult,
    VersionDiff,
    VersionInfo,
    compare_versions,
    create_versioned_schema,
    export_schema,
    get_migration_path,
    get_version_diff,
    get_version_info,
    is_version_supported,
    migrate,
    validate_compatibility,
)

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "MIGRATIONS",
    "MIN_SUPPORTED_VERSION",
    "PLATFORMS",
    "VERSION_HISTORY",
    "CompatibilityResult",
    "MigrationResult",
    "MigrationStep",
    "VersionDiff",
    "VersionInfo",
    "compare_versions",
    "create_empty_schema",
    "create_versioned_schema",
    "export_schema",
    "get_migration_path",
    "get_version_diff",
    "get_version_info",
    "is_valid_platform",
    "is_version_supported",
    "migrate",
    "validate_compatibility",
]
