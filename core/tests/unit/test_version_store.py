"""Unit tests for schema_core.store.version_store."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from schema_core.errors import StoreError, StoreIOError
from schema_core.models.snapshot import PropertySnapshot, SchemaSnapshot, Snapshot
from schema_core.models.version import ChangeAction, VersionChange, VersionMetadata
from schema_core.store.version_store import LATEST_FILE_NAME, VersionStore, version_slug

FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)


def _store(tmp_path: Path, max_versions: int = 100) -> VersionStore:
    return VersionStore(tmp_path / "versions", max_versions=max_versions, clock=lambda: FIXED_NOW)


def _snapshot(*names: str) -> Snapshot:
    return {
        name: SchemaSnapshot(name=name, properties={"id": PropertySnapshot(type="Integer")})
        for name in names
    }


def _added(*names: str) -> list[VersionChange]:
    return [VersionChange(action=ChangeAction.SCHEMA_ADDED, schema_name=name) for name in names]


def _meta(description: str | None = None) -> VersionMetadata:
    return VersionMetadata(
        driver="mysql",
        migration="20260102030405_schema_migration",
        description=description,
    )


def _populate(store: VersionStore, count: int) -> None:
    names: list[str] = []
    for i in range(count):
        names.append(f"Schema{i}")
        store.create_version(_snapshot(*names), _added(names[-1]), _meta(f"Add schema {i}"))


# ---------------------------------------------------------------------------
# Empty store
# ---------------------------------------------------------------------------


class TestEmptyStore:
    def test_reads_on_missing_directory(self, tmp_path):
        store = _store(tmp_path)
        assert store.read_latest_version() is None
        assert store.read_version(1) is None
        assert store.list_versions() == []
        assert store.diff_versions(1, 2) is None

    def test_invalid_retention_cap(self, tmp_path):
        with pytest.raises(ValueError, match="max_versions"):
            VersionStore(tmp_path, max_versions=0)


# ---------------------------------------------------------------------------
# create_version
# ---------------------------------------------------------------------------


class TestCreateVersion:
    def test_sequential_numbering(self, tmp_path):
        store = _store(tmp_path)
        created = [
            store.create_version(_snapshot("User"), _added("User"), _meta()).version,
            store.create_version(_snapshot("User", "Post"), _added("Post"), _meta()).version,
            store.create_version(_snapshot("User", "Post", "Tag"), _added("Tag"), _meta()).version,
        ]
        assert created == [1, 2, 3]
        latest = store.read_latest_version()
        assert latest is not None
        assert latest.version == 3
        assert list(latest.snapshot) == ["User", "Post", "Tag"]

    def test_writes_version_file_and_pointer(self, tmp_path):
        store = _store(tmp_path)
        store.create_version(_snapshot("User"), _added("User"), _meta("Initial schema"))
        names = sorted(p.name for p in (tmp_path / "versions").iterdir())
        assert names == ["0001_initial_schema.yaml", LATEST_FILE_NAME]
        assert (tmp_path / "versions" / LATEST_FILE_NAME).read_text(encoding="utf-8") == (
            tmp_path / "versions" / "0001_initial_schema.yaml"
        ).read_text(encoding="utf-8")

    def test_returned_file_carries_metadata(self, tmp_path):
        store = _store(tmp_path)
        version_file = store.create_version(_snapshot("User"), _added("User"), _meta("Initial schema"))
        assert version_file.timestamp == FIXED_NOW
        assert version_file.driver == "mysql"
        assert version_file.migration == "20260102030405_schema_migration"
        assert version_file.description == "Initial schema"
        assert version_file.changes == _added("User")

    def test_round_trip(self, tmp_path):
        store = _store(tmp_path)
        created = store.create_version(_snapshot("User", "Post"), _added("Post", "User"), _meta("Initial"))
        assert store.read_version(1) == created

    def test_no_changes_rejected(self, tmp_path):
        store = _store(tmp_path)
        with pytest.raises(StoreError) as exc_info:
            store.create_version(_snapshot("User"), [], _meta())
        assert exc_info.value.code == "NO_CHANGES"
        assert not (tmp_path / "versions").exists()

    def test_unwritable_directory_raises_io_error(self, tmp_path):
        (tmp_path / "versions").write_text("not a directory", encoding="utf-8")
        store = _store(tmp_path)
        with pytest.raises(StoreIOError) as exc_info:
            store.create_version(_snapshot("User"), _added("User"), _meta())
        assert isinstance(exc_info.value.__cause__, OSError)


# ---------------------------------------------------------------------------
# Retention
# ---------------------------------------------------------------------------


class TestRetention:
    def test_oldest_version_evicted(self, tmp_path):
        store = _store(tmp_path, max_versions=2)
        _populate(store, 3)
        assert [s.version for s in store.list_versions()] == [2, 3]
        assert store.read_version(1) is None

    def test_numbering_continues_after_eviction(self, tmp_path):
        store = _store(tmp_path, max_versions=2)
        _populate(store, 4)
        assert [s.version for s in store.list_versions()] == [3, 4]
        latest = store.read_latest_version()
        assert latest is not None
        assert latest.version == 4

    def test_cap_of_one(self, tmp_path):
        store = _store(tmp_path, max_versions=1)
        _populate(store, 2)
        assert [s.version for s in store.list_versions()] == [2]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestReads:
    def test_list_summaries(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 2)
        summaries = store.list_versions()
        assert [s.version for s in summaries] == [1, 2]
        assert summaries[1].schema_count == 2
        assert summaries[1].change_count == 1
        assert summaries[1].description == "Add schema 1"
        assert summaries[1].timestamp == FIXED_NOW

    def test_missing_pointer_falls_back_to_highest(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 2)
        (tmp_path / "versions" / LATEST_FILE_NAME).unlink()
        latest = store.read_latest_version()
        assert latest is not None
        assert latest.version == 2

    def test_stale_pointer_falls_back_to_highest(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 1)
        stale = (tmp_path / "versions" / LATEST_FILE_NAME).read_text(encoding="utf-8")
        store.create_version(_snapshot("Schema0", "Extra"), _added("Extra"), _meta("Extra"))
        (tmp_path / "versions" / LATEST_FILE_NAME).write_text(stale, encoding="utf-8")
        latest = store.read_latest_version()
        assert latest is not None
        assert latest.version == 2

    def test_corrupt_pointer_falls_back_to_highest(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 1)
        (tmp_path / "versions" / LATEST_FILE_NAME).write_text("{{{ not yaml", encoding="utf-8")
        latest = store.read_latest_version()
        assert latest is not None
        assert latest.version == 1

    def test_corrupt_version_file_raises(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 1)
        (tmp_path / "versions" / "0001_add_schema_0.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(StoreError) as exc_info:
            store.read_version(1)
        assert exc_info.value.code == "CORRUPT_VERSION_FILE"

    def test_unrelated_files_ignored(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 1)
        (tmp_path / "versions" / "notes.txt").write_text("scratch", encoding="utf-8")
        (tmp_path / "versions" / "README.yaml").write_text("title: x\n", encoding="utf-8")
        assert [s.version for s in store.list_versions()] == [1]

    def test_directory_listed_once_per_read(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 5)
        calls = []
        original_index = store._index

        def counting_index():
            calls.append(1)
            return original_index()

        store._index = counting_index  # type: ignore[method-assign]

        assert [s.version for s in store.list_versions()] == [1, 2, 3, 4, 5]
        assert len(calls) == 1

        calls.clear()
        assert store.diff_versions(1, 5) is not None
        assert len(calls) == 1


# ---------------------------------------------------------------------------
# Diffs
# ---------------------------------------------------------------------------


class TestDiffVersions:
    def test_diff_between_stored_versions(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 3)
        version_diff = store.diff_versions(1, 3)
        assert version_diff is not None
        assert version_diff.from_version == 1
        assert version_diff.to_version == 3
        assert [(c.action, c.schema_name) for c in version_diff.changes] == [
            (ChangeAction.SCHEMA_ADDED, "Schema1"),
            (ChangeAction.SCHEMA_ADDED, "Schema2"),
        ]

    def test_reverse_diff(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 2)
        version_diff = store.diff_versions(2, 1)
        assert version_diff is not None
        assert [c.action for c in version_diff.changes] == [ChangeAction.SCHEMA_REMOVED]

    def test_missing_side_returns_none(self, tmp_path):
        store = _store(tmp_path)
        _populate(store, 1)
        assert store.diff_versions(1, 5) is None
        assert store.diff_versions(5, 1) is None

    def test_compute_snapshot_diff(self, tmp_path):
        store = _store(tmp_path)
        changes = store.compute_snapshot_diff({}, _snapshot("User"))
        assert changes == _added("User")


# ---------------------------------------------------------------------------
# version_slug
# ---------------------------------------------------------------------------


class TestVersionSlug:
    def test_from_description(self):
        assert version_slug(VersionMetadata(driver="mysql", description="Add user name!")) == "add_user_name"

    def test_from_migration(self):
        metadata = VersionMetadata(driver="mysql", migration="20260102030405_schema_migration")
        assert version_slug(metadata) == "20260102030405_schema_migration"

    def test_fallback(self):
        assert version_slug(VersionMetadata(driver="mysql")) == "version"
        assert version_slug(VersionMetadata(driver="mysql", description="!!!")) == "version"

    def test_truncated(self):
        slug = version_slug(VersionMetadata(driver="mysql", description="x" * 200))
        assert len(slug) <= 48
