"""Domain models for the schema_core engine."""

from schema_core.models.snapshot import (
    OPTION_DEFAULTS,
    IndexSnapshot,
    PropertySnapshot,
    SchemaKind,
    SchemaOptions,
    SchemaSnapshot,
    Snapshot,
)
from schema_core.models.version import (
    ChangeAction,
    CreateVersionResult,
    DiscardResult,
    PendingChanges,
    VersionChange,
    VersionDiff,
    VersionFile,
    VersionMetadata,
    VersionSummary,
)

__all__ = [
    "OPTION_DEFAULTS",
    "ChangeAction",
    "CreateVersionResult",
    "DiscardResult",
    "IndexSnapshot",
    "PendingChanges",
    "PropertySnapshot",
    "SchemaKind",
    "SchemaOptions",
    "SchemaSnapshot",
    "Snapshot",
    "VersionChange",
    "VersionDiff",
    "VersionFile",
    "VersionMetadata",
    "VersionSummary",
]
