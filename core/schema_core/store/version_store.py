"""Directory-backed store of numbered, immutable schema versions.

Layout of the versions directory::

    0001_initial_schema.yaml
    0002_add_user_name.yaml
    ...
    current.yaml            # copy of the highest-numbered version file

Each version file holds the complete snapshot as of that version plus the
changes that led to it.  Version numbers start at 1 and each new version is
numbered one above the highest file present.  When the number of files
exceeds ``max_versions`` the oldest files are deleted.

The store assumes a single writer.  A new version file is written in full
before ``current.yaml`` is replaced; if the pointer is missing, unreadable or
behind the highest-numbered file, reads fall back to that file.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path

from schema_core.diff.snapshot_diff import diff_snapshots
from schema_core.errors import StoreError, StoreIOError
from schema_core.models.snapshot import Snapshot
from schema_core.models.version import (
    VersionChange,
    VersionDiff,
    VersionFile,
    VersionMetadata,
    VersionSummary,
)
from schema_core.store.serializer import dump_version_file, load_version_file
from schema_core.telemetry.profiling import profile_operation

logger = logging.getLogger(__name__)

LATEST_FILE_NAME = "current.yaml"

_VERSION_FILE_RE = re.compile(r"^(\d+)_[a-z0-9_]*\.yaml$")
_SLUG_RE = re.compile(r"[^a-z0-9]+")
_SLUG_MAX_LENGTH = 48


def _utc_now() -> datetime:
    return datetime.now(UTC)


def version_slug(metadata: VersionMetadata) -> str:
    """Derive the file-name slug for a version from its metadata."""
    source = metadata.description or metadata.migration or "version"
    slug = _SLUG_RE.sub("_", source.lower()).strip("_")[:_SLUG_MAX_LENGTH].rstrip("_")
    return slug or "version"


class VersionStore:
    """Persist and query numbered version files in a directory.

    Parameters
    ----------
    versions_dir:
        Directory holding the version files.  Created on first write.
    max_versions:
        Retention cap; the oldest versions are deleted once exceeded.
    clock:
        Source of version timestamps.
    """

    def __init__(
        self,
        versions_dir: Path,
        *,
        max_versions: int = 100,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if max_versions < 1:
            raise ValueError(f"max_versions must be at least 1, got {max_versions}")
        self._versions_dir = versions_dir
        self._max_versions = max_versions
        self._clock = clock

    @property
    def versions_dir(self) -> Path:
        return self._versions_dir

    @property
    def max_versions(self) -> int:
        return self._max_versions

    # -- Writes -------------------------------------------------------------

    @profile_operation("store.create_version")
    def create_version(
        self,
        snapshot: Snapshot,
        changes: Sequence[VersionChange],
        metadata: VersionMetadata,
    ) -> VersionFile:
        """Persist *snapshot* as the next version.

        The caller is responsible for computing *changes*; the store does not
        re-diff.

        Raises
        ------
        StoreError
            With code ``NO_CHANGES`` if *changes* is empty.
        StoreIOError
            If the version file or the latest pointer cannot be written.
        """
        if not changes:
            raise StoreError("Cannot create a version without changes.", code="NO_CHANGES")

        index = self._index()
        version = max(index, default=0) + 1
        version_file = VersionFile(
            version=version,
            timestamp=self._clock(),
            driver=metadata.driver,
            migration=metadata.migration,
            description=metadata.description,
            changes=list(changes),
            snapshot=dict(snapshot),
        )

        content = dump_version_file(version_file)
        path = self._versions_dir / f"{version:04d}_{version_slug(metadata)}.yaml"
        try:
            self._versions_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            self._latest_path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise StoreIOError(f"Failed to write version {version} to {path}: {exc}") from exc

        logger.info(
            "Created version %d with %d change(s) in %s",
            version,
            len(version_file.changes),
            self._versions_dir,
            extra={"version": version},
        )

        self._enforce_retention()
        return version_file

    def _enforce_retention(self) -> None:
        index = self._index()
        excess = len(index) - self._max_versions
        if excess <= 0:
            return

        for version in sorted(index)[:excess]:
            try:
                index[version].unlink(missing_ok=True)
            except OSError as exc:
                raise StoreIOError(f"Failed to evict version {version}: {exc}") from exc
            logger.info("Evicted version %d (retention cap %d)", version, self._max_versions)

    # -- Reads --------------------------------------------------------------

    def read_version(self, version: int) -> VersionFile | None:
        """Return version *version*, or ``None`` if it does not exist."""
        return self._read_indexed(self._index(), version)

    def read_latest_version(self) -> VersionFile | None:
        """Return the highest-numbered version, or ``None`` for an empty store."""
        index = self._index()
        if not index:
            return None
        highest = max(index)

        try:
            pointer = self._read_file(self._latest_path)
        except StoreError as exc:
            logger.warning("Ignoring unreadable latest pointer: %s", exc)
            pointer = None

        if pointer is not None and pointer.version == highest:
            return pointer

        logger.warning("Latest pointer is missing or stale; reading version %d directly", highest)
        return self._read_indexed(index, highest)

    def list_versions(self) -> list[VersionSummary]:
        """Summaries of every stored version, ascending by version number."""
        index = self._index()
        summaries: list[VersionSummary] = []
        for version in sorted(index):
            version_file = self._read_indexed(index, version)
            if version_file is not None:
                summaries.append(version_file.summary())
        return summaries

    # -- Diffs --------------------------------------------------------------

    def compute_snapshot_diff(self, before: Snapshot, after: Snapshot) -> list[VersionChange]:
        return diff_snapshots(before, after)

    def diff_versions(self, from_version: int, to_version: int) -> VersionDiff | None:
        """Diff the snapshots of two stored versions.

        Returns ``None`` if either version does not exist.
        """
        index = self._index()
        before = self._read_indexed(index, from_version)
        after = self._read_indexed(index, to_version)
        if before is None or after is None:
            return None

        return VersionDiff(
            from_version=from_version,
            to_version=to_version,
            changes=diff_snapshots(before.snapshot, after.snapshot),
        )

    # -- Internals ----------------------------------------------------------

    @property
    def _latest_path(self) -> Path:
        return self._versions_dir / LATEST_FILE_NAME

    def _index(self) -> dict[int, Path]:
        """Map version numbers to their files.  A missing directory is empty."""
        try:
            entries = sorted(self._versions_dir.iterdir())
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StoreIOError(f"Failed to list {self._versions_dir}: {exc}") from exc

        index: dict[int, Path] = {}
        for path in entries:
            match = _VERSION_FILE_RE.match(path.name)
            if match is None or not path.is_file():
                continue
            version = int(match.group(1))
            if version in index:
                logger.warning("Ignoring duplicate file %s for version %d", path.name, version)
                continue
            index[version] = path
        return index

    def _read_indexed(self, index: dict[int, Path], version: int) -> VersionFile | None:
        path = index.get(version)
        if path is None:
            return None

        version_file = self._read_file(path)
        if version_file is None:
            return None
        if version_file.version != version:
            raise StoreError(
                f"Version file {path.name} declares version {version_file.version}.",
                code="CORRUPT_VERSION_FILE",
            )
        return version_file

    def _read_file(self, path: Path) -> VersionFile | None:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreIOError(f"Failed to read {path}: {exc}") from exc
        return load_version_file(text, source=path.name)
