"""Orchestration of normaliser, diff engine and version store."""

from schema_core.services.version_service import VersionService, migration_name

__all__ = ["VersionService", "migration_name"]
