"""Structural diff engine for comparing two schema snapshots.

Produces an ordered list of :class:`VersionChange` records.  Schemas are
visited in sorted name order; within a schema the order is fixed:

1. kind and display metadata (``schema_modified``);
2. scalar options (``option_changed``), absent options taking their default;
3. properties: renamed, removed and modified in sorted order of the old
   names, then added in sorted order of the new names;
4. indexes (object schemas only): removed, then added/modified in the order
   they are declared in the newer snapshot;
5. enum values (``schema_modified``), compared as an ordered list.

Equality is decided attribute by attribute on the typed models, never by
comparing raw documents, so an attribute that is absent and one that is
``None`` are the same.  Comparing a snapshot with itself yields no changes.
"""

from __future__ import annotations

import logging
from typing import Any

from schema_core.models.snapshot import (
    SCALAR_OPTION_KEYS,
    SCHEMA_METADATA_KEYS,
    IndexSnapshot,
    PropertySnapshot,
    SchemaKind,
    SchemaSnapshot,
    Snapshot,
)
from schema_core.models.version import ChangeAction, VersionChange
from schema_core.telemetry.profiling import profile_operation

logger = logging.getLogger(__name__)

_PROPERTY_FIELDS: tuple[str, ...] = tuple(PropertySnapshot.model_fields)

_SCHEMA_ATTRS: dict[str, str] = {
    field.alias or name: name for name, field in SchemaSnapshot.model_fields.items()
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


@profile_operation("snapshot.diff")
def diff_snapshots(before: Snapshot, after: Snapshot) -> list[VersionChange]:
    """Compute the ordered list of changes that turn *before* into *after*.

    Parameters
    ----------
    before:
        The older snapshot (e.g. the latest stored version).
    after:
        The newer snapshot (e.g. the schemas currently on disk).

    Returns
    -------
    list[VersionChange]
        Changes in deterministic, schema-major order.  Empty when the two
        snapshots are structurally equal.
    """
    changes: list[VersionChange] = []

    for name in sorted(set(before) | set(after)):
        old = before.get(name)
        new = after.get(name)
        if old is None:
            changes.append(VersionChange(action=ChangeAction.SCHEMA_ADDED, schema_name=name))
        elif new is None:
            changes.append(VersionChange(action=ChangeAction.SCHEMA_REMOVED, schema_name=name))
        else:
            changes.extend(diff_schema(name, old, new))

    logger.debug("Snapshot diff: %d schema(s) -> %d change(s)", len(set(before) | set(after)), len(changes))
    return changes


def diff_schema(name: str, before: SchemaSnapshot, after: SchemaSnapshot) -> list[VersionChange]:
    """Compare two versions of the schema registered under *name*."""
    changes: list[VersionChange] = []

    if before.kind != after.kind:
        changes.append(_schema_modified(name, "kind", before.kind.value, after.kind.value))

    for key in SCHEMA_METADATA_KEYS:
        old_value = getattr(before, _SCHEMA_ATTRS[key])
        new_value = getattr(after, _SCHEMA_ATTRS[key])
        if not _values_equal(old_value, new_value):
            changes.append(_schema_modified(name, key, old_value, new_value))

    changes.extend(_diff_options(name, before, after))

    if before.kind != SchemaKind.ENUM or after.kind != SchemaKind.ENUM:
        changes.extend(_diff_properties(name, before, after))

    if after.kind == SchemaKind.OBJECT:
        changes.extend(_diff_indexes(name, before.index_list(), after.index_list()))

    if before.kind == SchemaKind.ENUM or after.kind == SchemaKind.ENUM:
        old_values = before.values or []
        new_values = after.values or []
        if old_values != new_values:
            changes.append(_schema_modified(name, "values", old_values, new_values))

    return changes


def properties_equal(left: PropertySnapshot, right: PropertySnapshot) -> bool:
    """Return ``True`` if every attribute of the two properties matches."""
    return all(_values_equal(getattr(left, field), getattr(right, field)) for field in _PROPERTY_FIELDS)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


def _diff_options(name: str, before: SchemaSnapshot, after: SchemaSnapshot) -> list[VersionChange]:
    old_options = before.option_set()
    new_options = after.option_set()

    changes: list[VersionChange] = []
    for key in SCALAR_OPTION_KEYS:
        old_value = old_options.effective(key)
        new_value = new_options.effective(key)
        if not _values_equal(old_value, new_value):
            changes.append(
                VersionChange(
                    action=ChangeAction.OPTION_CHANGED,
                    schema_name=name,
                    property=key,
                    from_value=old_value,
                    to_value=new_value,
                )
            )
    return changes


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


def _diff_properties(name: str, before: SchemaSnapshot, after: SchemaSnapshot) -> list[VersionChange]:
    old_props = before.property_map()
    new_props = after.property_map()

    removed = [prop for prop in sorted(old_props) if prop not in new_props]
    added = [prop for prop in sorted(new_props) if prop not in old_props]
    renames = _detect_renames(removed, added, old_props, new_props)
    rename_targets = set(renames.values())

    changes: list[VersionChange] = []
    for prop in sorted(old_props):
        if prop in renames:
            changes.append(
                VersionChange(
                    action=ChangeAction.PROPERTY_RENAMED,
                    schema_name=name,
                    property=renames[prop],
                    from_value=prop,
                    to_value=renames[prop],
                )
            )
        elif prop not in new_props:
            changes.append(
                VersionChange(
                    action=ChangeAction.PROPERTY_REMOVED,
                    schema_name=name,
                    property=prop,
                    from_value=old_props[prop].to_document(),
                )
            )
        elif not properties_equal(old_props[prop], new_props[prop]):
            changes.append(
                VersionChange(
                    action=ChangeAction.PROPERTY_MODIFIED,
                    schema_name=name,
                    property=prop,
                    from_value=old_props[prop].to_document(),
                    to_value=new_props[prop].to_document(),
                )
            )

    for prop in added:
        if prop in rename_targets:
            continue
        changes.append(
            VersionChange(
                action=ChangeAction.PROPERTY_ADDED,
                schema_name=name,
                property=prop,
                to_value=new_props[prop].to_document(),
            )
        )

    return changes


def _detect_renames(
    removed: list[str],
    added: list[str],
    old_props: dict[str, PropertySnapshot],
    new_props: dict[str, PropertySnapshot],
) -> dict[str, str]:
    """Pair removed and added properties that differ only by name.

    A pair is accepted only when each side has exactly one identical
    counterpart on the other side.  Any ambiguity leaves every involved
    property as a plain removal or addition.
    """
    if not removed or not added:
        return {}

    old_matches = {
        old: [new for new in added if properties_equal(old_props[old], new_props[new])] for old in removed
    }
    new_matches = {
        new: [old for old in removed if properties_equal(old_props[old], new_props[new])] for new in added
    }

    renames: dict[str, str] = {}
    for old, candidates in old_matches.items():
        if len(candidates) == 1 and len(new_matches[candidates[0]]) == 1:
            renames[old] = candidates[0]
    return renames


# ---------------------------------------------------------------------------
# Indexes
# ---------------------------------------------------------------------------


def _diff_indexes(name: str, before: list[IndexSnapshot], after: list[IndexSnapshot]) -> list[VersionChange]:
    unmatched = list(range(len(before)))
    pairs: list[tuple[IndexSnapshot | None, IndexSnapshot]] = []

    for index in after:
        position = _match_index(index, before, unmatched)
        if position is None:
            pairs.append((None, index))
        else:
            unmatched.remove(position)
            pairs.append((before[position], index))

    changes: list[VersionChange] = [
        VersionChange(
            action=ChangeAction.INDEX_REMOVED,
            schema_name=name,
            property=_index_label(before[position]),
            from_value=before[position].to_document(),
        )
        for position in unmatched
    ]

    for old, new in pairs:
        if old is None:
            changes.append(
                VersionChange(
                    action=ChangeAction.INDEX_ADDED,
                    schema_name=name,
                    property=_index_label(new),
                    to_value=new.to_document(),
                )
            )
        elif _index_differs(old, new):
            changes.append(
                VersionChange(
                    action=ChangeAction.INDEX_MODIFIED,
                    schema_name=name,
                    property=_index_label(new),
                    from_value=old.to_document(),
                    to_value=new.to_document(),
                )
            )

    return changes


def _match_index(index: IndexSnapshot, before: list[IndexSnapshot], candidates: list[int]) -> int | None:
    # Column identity is tried before name identity.
    for position in candidates:
        if before[position].columns == index.columns:
            return position
    for position in candidates:
        if before[position].same_index(index):
            return position
    return None


def _index_differs(old: IndexSnapshot, new: IndexSnapshot) -> bool:
    return (
        old.columns != new.columns
        or bool(old.unique) != bool(new.unique)
        or old.type != new.type
        or old.name != new.name
    )


def _index_label(index: IndexSnapshot) -> str:
    return index.name or ",".join(index.columns)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _schema_modified(name: str, key: str, old_value: Any, new_value: Any) -> VersionChange:
    return VersionChange(
        action=ChangeAction.SCHEMA_MODIFIED,
        schema_name=name,
        property=key,
        from_value=old_value,
        to_value=new_value,
    )


def _values_equal(left: Any, right: Any) -> bool:
    # ``True == 1`` in Python; a boolean never equals a number here.
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right
