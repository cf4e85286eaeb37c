"""Collaborators that read and write schema files on disk."""

from schema_core.loader.file_writer import LocalFileWriter, SchemaFileWriter
from schema_core.loader.schema_loader import SCHEMA_FILE_SUFFIXES, SchemaLoader, YamlSchemaLoader

__all__ = [
    "SCHEMA_FILE_SUFFIXES",
    "LocalFileWriter",
    "SchemaFileWriter",
    "SchemaLoader",
    "YamlSchemaLoader",
]
