"""Deterministic structural diff engine for schema snapshots."""

from schema_core.diff.snapshot_diff import diff_schema, diff_snapshots, properties_equal

__all__ = [
    "diff_schema",
    "diff_snapshots",
    "properties_equal",
]
