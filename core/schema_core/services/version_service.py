"""Pending-changes, create-version and discard operations.

:class:`VersionService` ties the on-disk schemas to the version history:

* :meth:`~VersionService.get_pending_changes` diffs the latest stored
  snapshot against the schemas currently on disk;
* :meth:`~VersionService.create_version` records those changes as a new
  version;
* :meth:`~VersionService.discard_changes` rewrites the schema files from the
  latest version and deletes schema files it does not know about.

The store and the file collaborators are injected; nothing here holds global
state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from schema_core.config import Settings
from schema_core.errors import PreconditionFailedError
from schema_core.loader.file_writer import LocalFileWriter, SchemaFileWriter
from schema_core.loader.schema_loader import SchemaLoader, YamlSchemaLoader, is_schema_file
from schema_core.models.snapshot import Snapshot
from schema_core.models.version import (
    CreateVersionResult,
    DiscardResult,
    PendingChanges,
    VersionMetadata,
)
from schema_core.snapshot.normalizer import normalize_schemas
from schema_core.store.serializer import dump_schema_document
from schema_core.store.version_store import VersionStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def migration_name(moment: datetime) -> str:
    """Timestamp-based migration name, e.g. ``20261018093000_schema_migration``."""
    return f"{moment:%Y%m%d%H%M%S}_schema_migration"


class VersionService:
    """Answer "what changed since the last version" and act on the answer.

    Parameters
    ----------
    store:
        The version store holding the history.
    schemas_dir:
        Directory containing the schema files.
    loader:
        Reads raw schemas from *schemas_dir*.
    writer:
        Writes and deletes schema files during a discard.
    driver:
        Target database tag recorded on new versions.
    clock:
        Source of the timestamp used for migration names.
    """

    def __init__(
        self,
        store: VersionStore,
        schemas_dir: Path,
        *,
        loader: SchemaLoader | None = None,
        writer: SchemaFileWriter | None = None,
        driver: str = "mysql",
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._schemas_dir = schemas_dir
        self._loader = loader if loader is not None else YamlSchemaLoader()
        self._writer = writer if writer is not None else LocalFileWriter()
        self._driver = driver
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> VersionService:
        store = VersionStore(settings.resolved_versions_dir(), max_versions=settings.max_versions)
        return cls(store, settings.resolved_schemas_dir(), driver=settings.driver)

    @property
    def store(self) -> VersionStore:
        return self._store

    @property
    def schemas_dir(self) -> Path:
        return self._schemas_dir

    def current_snapshot(self) -> Snapshot:
        """Load and normalise the schemas currently on disk.

        A missing schemas directory is a project with no schemas yet.
        """
        try:
            raw_schemas = self._loader.load_schemas(self._schemas_dir)
        except FileNotFoundError:
            logger.info("Schemas directory %s not found; treating as empty", self._schemas_dir)
            raw_schemas = {}
        return normalize_schemas(raw_schemas)

    def get_pending_changes(self) -> PendingChanges:
        current = self.current_snapshot()
        latest = self._store.read_latest_version()
        previous: Snapshot = latest.snapshot if latest is not None else {}

        changes = self._store.compute_snapshot_diff(previous, current)
        logger.info(
            "Pending changes against version %s: %d",
            latest.version if latest is not None else "none",
            len(changes),
        )

        return PendingChanges(
            has_changes=bool(changes),
            changes=changes,
            current_schema_count=len(current),
            previous_schema_count=len(previous),
            latest_version=latest.version if latest is not None else None,
        )

    def create_version(self, description: str | None = None) -> CreateVersionResult:
        """Record the pending changes as a new version.

        Raises
        ------
        PreconditionFailedError
            With code ``NO_CHANGES`` if the schemas match the latest version.
        """
        current = self.current_snapshot()
        latest = self._store.read_latest_version()
        previous: Snapshot = latest.snapshot if latest is not None else {}

        changes = self._store.compute_snapshot_diff(previous, current)
        if not changes:
            raise PreconditionFailedError("No changes to create version.", code="NO_CHANGES")

        migration = migration_name(self._clock())
        version_file = self._store.create_version(
            current,
            changes,
            VersionMetadata(driver=self._driver, migration=migration, description=description),
        )

        return CreateVersionResult(
            version=version_file.version,
            migration=version_file.migration or migration,
            changes=version_file.changes,
        )

    def discard_changes(self) -> DiscardResult:
        """Restore the schema files from the latest version.

        Every schema in the latest snapshot is rewritten (into its existing
        file when there is one) and every other schema file is deleted.  This
        cannot be undone.

        Raises
        ------
        PreconditionFailedError
            With code ``NO_VERSION`` if the store is empty.
        """
        latest = self._store.read_latest_version()
        if latest is None:
            raise PreconditionFailedError(
                "No version to restore from. Cannot discard changes.",
                code="NO_VERSION",
            )

        schema_files = [
            name for name in self._writer.list_directory(self._schemas_dir) if is_schema_file(Path(name))
        ]
        existing = {Path(name).stem: name for name in schema_files}

        restored = 0
        for name, schema in latest.snapshot.items():
            file_name = existing.get(name, f"{name}.yaml")
            self._writer.write_file(self._schemas_dir / file_name, dump_schema_document(schema))
            restored += 1

        deleted = 0
        for file_name in schema_files:
            if Path(file_name).stem not in latest.snapshot:
                self._writer.delete_file(self._schemas_dir / file_name)
                deleted += 1

        logger.info(
            "Discarded changes: restored %d schema(s), deleted %d file(s) from version %d",
            restored,
            deleted,
            latest.version,
        )
        return DiscardResult(restored=restored, deleted=deleted)
