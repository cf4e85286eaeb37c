"""Load raw schema definitions from a directory of YAML files.

Each top-level ``<Name>.yaml`` (or ``.yml``) file holds one schema; the schema
name is the file stem.  The loader returns the parsed mappings untouched --
turning them into snapshots is the normaliser's job.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Protocol

import yaml  # type: ignore[import-untyped]

from schema_core.errors import SchemaLoadError

logger = logging.getLogger(__name__)

SCHEMA_FILE_SUFFIXES: tuple[str, ...] = (".yaml", ".yml")

_BOOL_TAG = "tag:yaml.org,2002:bool"
_INT_TAG = "tag:yaml.org,2002:int"


class SchemaYamlLoader(yaml.SafeLoader):
    """``SafeLoader`` with YAML 1.2 booleans and integers.

    Only ``true``/``false`` resolve to booleans and an integer never carries a
    leading zero, so enum values such as ``ON``, ``no`` or ``010`` stay strings.
    """


SchemaYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_BOOL_TAG, _INT_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
SchemaYamlLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
SchemaYamlLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(r"^(?:[-+]?(?:0|[1-9][0-9_]*)|0x[0-9a-fA-F_]+)$"),
    list("-+0123456789"),
)


class SchemaLoader(Protocol):
    """Anything that can produce raw schemas for a directory.

    Implementations raise :class:`FileNotFoundError` when *directory* does
    not exist.
    """

    def load_schemas(self, directory: Path) -> dict[str, dict[str, Any]]: ...


def is_schema_file(path: Path) -> bool:
    return path.suffix in SCHEMA_FILE_SUFFIXES


class YamlSchemaLoader:
    """Default :class:`SchemaLoader` reading one schema per YAML file."""

    def load_schemas(self, directory: Path) -> dict[str, dict[str, Any]]:
        if not directory.is_dir():
            raise FileNotFoundError(f"Schemas directory not found: {directory}")

        schemas: dict[str, dict[str, Any]] = {}
        for path in sorted(directory.iterdir()):
            if not is_schema_file(path) or not path.is_file():
                continue

            name = path.stem
            if name in schemas:
                raise SchemaLoadError(f"Schema '{name}' is defined by more than one file in {directory}.")

            data = self._parse(path)
            data["name"] = name
            schemas[name] = data

        logger.debug("Loaded %d schema file(s) from %s", len(schemas), directory)
        return schemas

    def _parse(self, path: Path) -> dict[str, Any]:
        try:
            data = yaml.load(path.read_text(encoding="utf-8"), Loader=SchemaYamlLoader)  # noqa: S506
        except OSError as exc:
            raise SchemaLoadError(f"Failed to read schema file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise SchemaLoadError(f"Schema file {path} is not valid YAML: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise SchemaLoadError(f"Schema file {path} must contain a mapping.")
        return data
