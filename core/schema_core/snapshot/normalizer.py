"""Normalise raw schema definitions into the canonical :data:`Snapshot` form.

The schema loader hands over plain mappings exactly as they were read from
disk, including any options the author spelled out at their default value.
Normalisation rules:

1. ``kind`` defaults to ``object``.
2. Property attributes are copied only when defined.  ``None`` counts as
   undefined; no default is ever filled in.
3. Schema options equal to their documented default are dropped, so a schema
   that says ``timestamps: true`` and one that says nothing produce the same
   snapshot.
4. Explicit indexes and legacy unique constraints are merged into a single
   ``indexes`` list, explicit entries first.
5. Empty ``properties``/``values``/``options`` collapse to absent.

The output is keyed by schema name in sorted order so that identical inputs
always serialise to byte-identical documents.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from schema_core.errors import NormalizationError
from schema_core.models.snapshot import (
    OPTION_DEFAULTS,
    SCALAR_OPTION_KEYS,
    SCHEMA_METADATA_KEYS,
    PropertySnapshot,
    SchemaKind,
    SchemaSnapshot,
    Snapshot,
)
from schema_core.telemetry.profiling import profile_operation

logger = logging.getLogger(__name__)

# On-disk attribute names accepted on a property, in declaration order.
_PROPERTY_KEYS: tuple[str, ...] = tuple(
    field.alias or name for name, field in PropertySnapshot.model_fields.items()
)

_INDEX_ATTRIBUTE_KEYS: tuple[str, ...] = ("unique", "name", "type")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@profile_operation("snapshot.normalize")
def normalize_schemas(raw_schemas: Mapping[str, Any]) -> Snapshot:
    """Convert a loaded schema collection into a :data:`Snapshot`.

    Parameters
    ----------
    raw_schemas:
        Mapping of schema name to the raw schema mapping produced by the
        schema loader.

    Returns
    -------
    Snapshot
        Canonical snapshot keyed by schema name, sorted by name.

    Raises
    ------
    NormalizationError
        If any schema or property is malformed.
    """
    snapshot: Snapshot = {}
    for key in sorted(raw_schemas):
        snapshot[key] = normalize_schema(key, raw_schemas[key])

    logger.debug("Normalised %d schema(s)", len(snapshot))
    return snapshot


def normalize_schema(key: str, raw: Any) -> SchemaSnapshot:
    """Normalise a single raw schema registered under *key*."""
    if not isinstance(raw, Mapping):
        raise NormalizationError(f"Schema '{key}' must be a mapping, got {type(raw).__name__}.")

    name = raw.get("name") or key
    if not isinstance(name, str):
        raise NormalizationError(f"Schema '{key}' has a non-string name: {name!r}.")

    raw_kind = raw.get("kind") or SchemaKind.OBJECT.value
    try:
        kind = SchemaKind(raw_kind)
    except ValueError as exc:
        raise NormalizationError(f"Schema '{name}' has unknown kind {raw_kind!r}.") from exc

    document: dict[str, Any] = {"name": name, "kind": kind}
    for meta_key in SCHEMA_METADATA_KEYS:
        value = raw.get(meta_key)
        if value is not None:
            document[meta_key] = value

    properties = _normalize_properties(name, raw.get("properties"))
    if properties:
        document["properties"] = properties

    values = _normalize_enum_values(name, raw.get("values"))
    if values:
        document["values"] = values

    options = _normalize_options(name, raw.get("options"))
    if options:
        document["options"] = options

    try:
        return SchemaSnapshot.model_validate(document)
    except ValidationError as exc:
        raise NormalizationError(f"Schema '{name}' is invalid: {exc}") from exc


def normalize_property(schema_name: str, prop_name: str, raw: Any) -> PropertySnapshot:
    """Normalise one property definition, copying only defined attributes."""
    if not isinstance(raw, Mapping):
        raise NormalizationError(
            f"Property '{schema_name}.{prop_name}' must be a mapping, got {type(raw).__name__}."
        )

    prop_type = raw.get("type")
    if not isinstance(prop_type, str) or not prop_type:
        raise NormalizationError(f"Property '{schema_name}.{prop_name}' has no type.")

    data = {key: raw[key] for key in _PROPERTY_KEYS if raw.get(key) is not None}
    try:
        return PropertySnapshot.model_validate(data)
    except ValidationError as exc:
        raise NormalizationError(f"Property '{schema_name}.{prop_name}' is invalid: {exc}") from exc


def normalize_indexes(schema_name: str, raw_indexes: Any, raw_unique: Any) -> list[dict[str, Any]]:
    """Merge explicit indexes and legacy unique constraints into one list.

    Each entry of ``indexes`` and ``unique`` may take one of three shapes:

    * ``"email"`` -- a single column;
    * ``["tenant_id", "slug"]`` -- a composite column list;
    * ``{"columns": [...], "unique": ..., "name": ..., "type": ...}`` -- a
      full definition (``columns`` may also be a single string).

    A bare string or mapping in place of the list is treated as a one-entry
    list.  Unique constraints become unique indexes named
    ``unique_<position>`` unless they carry a name, and are appended after the
    explicit indexes.
    """
    indexes = [
        _index_entry(schema_name, entry, "indexes")
        for entry in _as_entry_list(schema_name, raw_indexes, "indexes")
    ]

    for position, entry in enumerate(_as_entry_list(schema_name, raw_unique, "unique")):
        index = _index_entry(schema_name, entry, "unique")
        index["unique"] = True
        index.setdefault("name", f"unique_{position}")
        indexes.append(index)

    return indexes


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalize_properties(schema_name: str, raw_properties: Any) -> dict[str, PropertySnapshot]:
    if raw_properties is None:
        return {}
    if not isinstance(raw_properties, Mapping):
        raise NormalizationError(f"Schema '{schema_name}' has non-mapping properties.")

    return {
        str(prop_name): normalize_property(schema_name, str(prop_name), raw)
        for prop_name, raw in raw_properties.items()
    }


def _normalize_enum_values(schema_name: str, raw_values: Any) -> list[str]:
    if raw_values is None:
        return []
    if not isinstance(raw_values, list):
        raise NormalizationError(f"Schema '{schema_name}' has non-list enum values.")

    values: list[str] = []
    for entry in raw_values:
        if isinstance(entry, Mapping):
            entry = entry.get("value")
            if entry is None:
                raise NormalizationError(f"Schema '{schema_name}' has an enum value without 'value'.")
        if isinstance(entry, bool):
            raise NormalizationError(
                f"Schema '{schema_name}' has a boolean enum value {entry!r}; quote it to keep it a string."
            )
        if isinstance(entry, (str, int, float)):
            values.append(str(entry))
        else:
            raise NormalizationError(f"Schema '{schema_name}' has an unsupported enum value: {entry!r}.")
    return values


def _normalize_options(schema_name: str, raw_options: Any) -> dict[str, Any]:
    if raw_options is None:
        return {}
    if not isinstance(raw_options, Mapping):
        raise NormalizationError(f"Schema '{schema_name}' has non-mapping options.")

    stored: dict[str, Any] = {}
    for key in SCALAR_OPTION_KEYS:
        value = raw_options.get(key)
        if value is None or value == "":
            continue
        if key in OPTION_DEFAULTS and value == OPTION_DEFAULTS[key]:
            continue
        stored[key] = value

    indexes = normalize_indexes(schema_name, raw_options.get("indexes"), raw_options.get("unique"))
    if indexes:
        stored["indexes"] = indexes

    return stored


def _as_entry_list(schema_name: str, raw: Any, source: str) -> list[Any]:
    if raw is None:
        return []
    if isinstance(raw, (str, Mapping)):
        return [raw]
    if isinstance(raw, list):
        return raw
    raise NormalizationError(f"Schema '{schema_name}' has a non-list {source} option.")


def _index_entry(schema_name: str, entry: Any, source: str) -> dict[str, Any]:
    if isinstance(entry, str):
        return {"columns": [entry]}

    if isinstance(entry, list):
        columns = _column_list(schema_name, entry, source)
        return {"columns": columns}

    if isinstance(entry, Mapping):
        raw_columns = entry.get("columns")
        if isinstance(raw_columns, str):
            raw_columns = [raw_columns]
        if not isinstance(raw_columns, list):
            raise NormalizationError(f"Schema '{schema_name}' has an {source} entry without columns.")
        index: dict[str, Any] = {"columns": _column_list(schema_name, raw_columns, source)}
        for key in _INDEX_ATTRIBUTE_KEYS:
            if entry.get(key) is not None:
                index[key] = entry[key]
        return index

    raise NormalizationError(f"Schema '{schema_name}' has an unsupported {source} entry: {entry!r}.")


def _column_list(schema_name: str, raw_columns: list[Any], source: str) -> list[str]:
    if not raw_columns or not all(isinstance(col, str) and col for col in raw_columns):
        raise NormalizationError(
            f"Schema '{schema_name}' has an {source} entry with invalid columns: {raw_columns!r}."
        )
    return list(raw_columns)
