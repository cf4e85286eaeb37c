"""Conversion of loaded schema collections into canonical snapshots."""

from schema_core.snapshot.normalizer import normalize_indexes, normalize_property, normalize_schema, normalize_schemas

__all__ = [
    "normalize_indexes",
    "normalize_property",
    "normalize_schema",
    "normalize_schemas",
]
