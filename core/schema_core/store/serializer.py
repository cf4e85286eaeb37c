"""YAML (de)serialisation for version files and schema files.

Documents are written in block style with their key order preserved and a
line width of 120 so that version files stay readable and diff cleanly under
source control.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from schema_core.errors import StoreError
from schema_core.models.snapshot import OPTION_DEFAULTS, SchemaKind, SchemaSnapshot
from schema_core.models.version import VersionFile

_LINE_WIDTH = 120


def dump_document(document: Mapping[str, Any]) -> str:
    """Render a nested mapping as a YAML document."""
    return yaml.safe_dump(
        dict(document),
        sort_keys=False,
        width=_LINE_WIDTH,
        allow_unicode=True,
        default_flow_style=False,
    )


def dump_version_file(version_file: VersionFile) -> str:
    return dump_document(version_file.to_document())


def load_version_file(text: str, *, source: str) -> VersionFile:
    """Parse a version file previously written by :func:`dump_version_file`.

    Raises
    ------
    StoreError
        With code ``CORRUPT_VERSION_FILE`` if *text* is not valid YAML or
        does not describe a version.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise StoreError(f"Version file {source} is not valid YAML: {exc}", code="CORRUPT_VERSION_FILE") from exc

    if not isinstance(data, dict):
        raise StoreError(f"Version file {source} does not contain a mapping.", code="CORRUPT_VERSION_FILE")

    try:
        return VersionFile.model_validate(data)
    except ValidationError as exc:
        raise StoreError(f"Version file {source} is invalid: {exc}", code="CORRUPT_VERSION_FILE") from exc


def schema_to_document(schema: SchemaSnapshot) -> dict[str, Any]:
    """Convert a schema snapshot back into the body of a schema file.

    The schema name comes from the file name and is not written.  ``kind`` is
    written only when it is not ``object`` and options only when they differ
    from their defaults.
    """
    document = schema.to_document()
    document.pop("name", None)
    if schema.kind == SchemaKind.OBJECT:
        document.pop("kind", None)

    options = document.get("options")
    if options is not None:
        for key, default in OPTION_DEFAULTS.items():
            if key in options and options[key] == default:
                del options[key]
        if not options:
            del document["options"]

    return document


def dump_schema_document(schema: SchemaSnapshot) -> str:
    return dump_document(schema_to_document(schema))
