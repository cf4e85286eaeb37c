"""Snapshot models: the canonical, default-elided shape of a schema collection.

A :data:`Snapshot` maps schema names to :class:`SchemaSnapshot` records.  Every
optional attribute is ``None`` when absent, and absence always means "the
default for this attribute".  On disk the same records are written with
camelCase keys and with every ``None`` field dropped, so a key that is missing
from a version file and a key that was never set compare identically.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Immutable base model that reads and writes camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    def to_document(self) -> dict[str, Any]:
        """Return the on-disk representation: aliased keys, ``None`` dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SchemaKind(str, Enum):
    """Kind of schema declared in a schema file."""

    OBJECT = "object"
    ENUM = "enum"
    PARTIAL = "partial"
    PIVOT = "pivot"


LocalizedText = str | dict[str, str]


class PropertySnapshot(CamelModel):
    """One field of a schema.

    Only ``type`` is mandatory.  Relation descriptors (``relation``,
    ``target``, ``targets``, ``morph_name``, ``on_delete``, ``on_update``,
    ``mapped_by``, ``inversed_by``, ``join_table``, ``owning``) are only set
    on association properties.
    """

    type: str = Field(..., min_length=1)
    display_name: LocalizedText | None = None
    description: LocalizedText | None = None
    nullable: bool | None = None
    unique: bool | None = None
    default: Any = None
    length: int | None = None
    unsigned: bool | None = None
    precision: int | None = None
    scale: int | None = None
    enum: str | list[Any] | None = None
    relation: str | None = None
    target: str | None = None
    targets: list[str] | None = None
    morph_name: str | None = None
    on_delete: str | None = None
    on_update: str | None = None
    mapped_by: str | None = None
    inversed_by: str | None = None
    join_table: str | None = None
    owning: bool | None = None


class IndexSnapshot(CamelModel):
    """A (possibly composite) index declared on a schema.

    Column order is significant: ``[a, b]`` and ``[b, a]`` are different
    indexes unless they share an explicit ``name``.
    """

    columns: list[str] = Field(..., min_length=1)
    unique: bool | None = None
    name: str | None = None
    type: str | None = None

    def same_index(self, other: IndexSnapshot) -> bool:
        """Return ``True`` if *other* denotes the same index as this one."""
        if self.columns == other.columns:
            return True
        return self.name is not None and self.name == other.name


# Documented defaults for schema options, keyed by on-disk option name.  An
# option equal to its default is never stored in a snapshot.
OPTION_DEFAULTS: dict[str, Any] = {
    "id": True,
    "idType": "BigInt",
    "timestamps": True,
    "softDelete": False,
    "translations": False,
    "authenticatable": False,
}

# Scalar options in comparison order.  ``indexes`` is diffed structurally.
SCALAR_OPTION_KEYS: tuple[str, ...] = (
    "id",
    "idType",
    "timestamps",
    "softDelete",
    "tableName",
    "translations",
    "authenticatable",
)


class SchemaOptions(CamelModel):
    """Schema-level flags.  ``None`` means the option is at its default."""

    id: bool | None = None
    id_type: str | None = None
    timestamps: bool | None = None
    soft_delete: bool | None = None
    table_name: str | None = None
    translations: bool | None = None
    authenticatable: bool | None = None
    indexes: list[IndexSnapshot] | None = None

    def raw(self, key: str) -> Any:
        """Return the stored value for the option named *key* (camelCase)."""
        return getattr(self, _OPTION_ATTRS[key])

    def effective(self, key: str) -> Any:
        """Return the value of option *key* with its default applied."""
        value = self.raw(key)
        if value is None:
            return OPTION_DEFAULTS.get(key)
        return value

    def with_defaults(self) -> dict[str, Any]:
        """Re-expand elided options into their effective values.

        ``tableName`` has no default and is only included when set;
        ``indexes`` are not part of the expansion.
        """
        expanded: dict[str, Any] = {}
        for key in SCALAR_OPTION_KEYS:
            value = self.effective(key)
            if value is not None:
                expanded[key] = value
        return expanded


_OPTION_ATTRS: dict[str, str] = {
    "id": "id",
    "idType": "id_type",
    "timestamps": "timestamps",
    "softDelete": "soft_delete",
    "tableName": "table_name",
    "translations": "translations",
    "authenticatable": "authenticatable",
    "indexes": "indexes",
}

_EMPTY_OPTIONS = SchemaOptions()


class SchemaSnapshot(CamelModel):
    """The captured shape of a single schema."""

    name: str = Field(..., min_length=1)
    kind: SchemaKind = SchemaKind.OBJECT
    display_name: LocalizedText | None = None
    singular: LocalizedText | None = None
    plural: LocalizedText | None = None
    title_index: str | None = None
    group: str | None = None
    properties: dict[str, PropertySnapshot] | None = None
    values: list[str] | None = None
    options: SchemaOptions | None = None

    def option_set(self) -> SchemaOptions:
        """Return the options, substituting an all-default set when absent."""
        return self.options if self.options is not None else _EMPTY_OPTIONS

    def property_map(self) -> dict[str, PropertySnapshot]:
        return self.properties or {}

    def index_list(self) -> list[IndexSnapshot]:
        return self.option_set().indexes or []


# Schema-level display metadata, compared as ``schema_modified`` changes.
SCHEMA_METADATA_KEYS: tuple[str, ...] = (
    "displayName",
    "singular",
    "plural",
    "titleIndex",
    "group",
)

Snapshot = dict[str, SchemaSnapshot]
