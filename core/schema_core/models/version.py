"""Version history records: change entries, version files and summaries.

A :class:`VersionFile` stores the *full* snapshot as of its version rather
than a delta, so reading any version never requires replaying history.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from schema_core.models.snapshot import CamelModel, SchemaSnapshot


class ChangeAction(str, Enum):
    """Kind of change recorded between two snapshots."""

    SCHEMA_ADDED = "schema_added"
    SCHEMA_REMOVED = "schema_removed"
    SCHEMA_MODIFIED = "schema_modified"
    PROPERTY_ADDED = "property_added"
    PROPERTY_REMOVED = "property_removed"
    PROPERTY_MODIFIED = "property_modified"
    PROPERTY_RENAMED = "property_renamed"
    INDEX_ADDED = "index_added"
    INDEX_REMOVED = "index_removed"
    INDEX_MODIFIED = "index_modified"
    OPTION_CHANGED = "option_changed"


class VersionChange(CamelModel):
    """A single, immutable change record produced by the diff engine.

    ``property`` holds a property name, an option key or a schema metadata
    key depending on ``action``.  ``from``/``to`` carry the previous and new
    values; their shape depends on ``action`` (full property definitions,
    index definitions, option values, or old/new names for renames).
    """

    action: ChangeAction
    schema_name: str = Field(..., alias="schema")
    property: str | None = None
    from_value: Any = Field(default=None, alias="from")
    to_value: Any = Field(default=None, alias="to")


class VersionMetadata(CamelModel):
    """Caller-supplied metadata attached to a new version."""

    driver: str = Field(..., min_length=1)
    migration: str | None = None
    description: str | None = None


class VersionSummary(CamelModel):
    """Projection of a :class:`VersionFile` without its snapshot."""

    version: int
    timestamp: datetime
    driver: str
    migration: str | None = None
    description: str | None = None
    schema_count: int
    change_count: int


class VersionFile(CamelModel):
    """A numbered, immutable version as persisted by the version store."""

    version: int = Field(..., ge=1)
    timestamp: datetime
    driver: str
    migration: str | None = None
    description: str | None = None
    changes: list[VersionChange] = Field(default_factory=list)
    snapshot: dict[str, SchemaSnapshot] = Field(default_factory=dict)

    def summary(self) -> VersionSummary:
        return VersionSummary(
            version=self.version,
            timestamp=self.timestamp,
            driver=self.driver,
            migration=self.migration,
            description=self.description,
            schema_count=len(self.snapshot),
            change_count=len(self.changes),
        )


class VersionDiff(CamelModel):
    """Changes between two stored versions."""

    from_version: int
    to_version: int
    changes: list[VersionChange] = Field(default_factory=list)


class PendingChanges(CamelModel):
    """Difference between the latest stored version and the schemas on disk."""

    has_changes: bool
    changes: list[VersionChange] = Field(default_factory=list)
    current_schema_count: int
    previous_schema_count: int
    latest_version: int | None = None

    def to_document(self) -> dict[str, Any]:
        document = super().to_document()
        # A fresh project reports ``latestVersion: null`` rather than omitting it.
        document["latestVersion"] = self.latest_version
        return document


class CreateVersionResult(CamelModel):
    """Outcome of recording the pending changes as a new version."""

    version: int
    migration: str
    changes: list[VersionChange] = Field(default_factory=list)


class DiscardResult(CamelModel):
    """Outcome of restoring schema files from the latest version."""

    restored: int
    deleted: int
