"""File-backed version history store."""

from schema_core.store.serializer import dump_schema_document, dump_version_file, load_version_file
from schema_core.store.version_store import LATEST_FILE_NAME, VersionStore

__all__ = [
    "LATEST_FILE_NAME",
    "VersionStore",
    "dump_schema_document",
    "dump_version_file",
    "load_version_file",
]
