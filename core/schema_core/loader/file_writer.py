"""File-system access used when restoring schema files."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class SchemaFileWriter(Protocol):
    def write_file(self, path: Path, content: str) -> None: ...

    def delete_file(self, path: Path) -> None: ...

    def list_directory(self, path: Path) -> list[str]: ...


class LocalFileWriter:
    """:class:`SchemaFileWriter` backed by the local file system."""

    def write_file(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def delete_file(self, path: Path) -> None:
        path.unlink()

    def list_directory(self, path: Path) -> list[str]:
        """Names of the regular files in *path*; empty if it does not exist."""
        if not path.is_dir():
            return []
        return sorted(entry.name for entry in path.iterdir() if entry.is_file())
