"""Schema Ledger CLI application -- Typer-based developer interface.

Provides commands for listing and inspecting schema versions, diffing two
versions, showing pending changes, recording a new version and discarding
pending changes.  Human-readable output goes to *stderr* via Rich; ``--json``
writes machine-readable documents to *stdout* so that scripts can compose
cleanly.

Exit codes: 0 on success, 1 on a domain or I/O error, 2 when a requested
version does not exist.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from ledger_cli.display import (
    display_changes,
    display_discard_result,
    display_pending,
    display_version,
    display_version_list,
)
from schema_core.config import Settings, load_settings
from schema_core.errors import SchemaLedgerError
from schema_core.logging_config import configure_logging
from schema_core.services.version_service import VersionService

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="schema-ledger",
    help="Schema Ledger - version history and diffs for schema definitions",
    no_args_is_help=True,
)
console = Console(stderr=True)

EXIT_ERROR = 1
EXIT_NOT_FOUND = 2

# Mutable global options populated by the Typer callback.
_json_output: bool = False
_project_dir: Path | None = None


# ---------------------------------------------------------------------------
# Callback -- global options
# ---------------------------------------------------------------------------


@app.callback()
def _global_options(
    json_mode: bool = typer.Option(
        False,
        "--json/--no-json",
        help="Emit structured JSON to stdout instead of human-readable output.",
    ),
    project_dir: Path | None = typer.Option(
        None,
        "--project-dir",
        "-p",
        help="Project root containing the schemas and version history.",
        envvar="SCHEMA_LEDGER_PROJECT_DIR",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress at INFO level."),
) -> None:
    """Global options applied to every command."""
    global _json_output, _project_dir  # noqa: PLW0603
    _json_output = json_mode
    _project_dir = project_dir

    try:
        settings = _settings()
    except SchemaLedgerError as exc:
        raise _fail(exc) from exc
    configure_logging("INFO" if verbose else settings.log_level, structured=settings.structured_logging)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _settings() -> Settings:
    overrides: dict[str, Any] = {}
    if _project_dir is not None:
        overrides["project_dir"] = _project_dir
    return load_settings(**overrides)


def _service() -> VersionService:
    return VersionService.from_settings(_settings())


def _write_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")


def _fail(exc: Exception) -> typer.Exit:
    code = exc.code if isinstance(exc, SchemaLedgerError) else type(exc).__name__
    if _json_output:
        _write_json({"error": {"code": code, "message": str(exc)}})
    console.print(f"[red]{code}: {escape(str(exc))}[/red]")
    return typer.Exit(code=EXIT_ERROR)


def _not_found(message: str) -> typer.Exit:
    if _json_output:
        _write_json({"error": {"code": "VERSION_NOT_FOUND", "message": message}})
    console.print(f"[yellow]{message}[/yellow]")
    return typer.Exit(code=EXIT_NOT_FOUND)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@app.command("list")
def list_versions() -> None:
    """List every stored version."""
    try:
        summaries = _service().store.list_versions()
    except (SchemaLedgerError, OSError) as exc:
        raise _fail(exc) from exc

    if _json_output:
        _write_json([s.to_document() for s in summaries])
    else:
        display_version_list(console, summaries)


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


@app.command()
def show(
    version: str = typer.Argument(..., help="Version number, or 'latest'."),
) -> None:
    """Display one stored version with its changes."""
    if version != "latest" and not version.isdigit():
        console.print(f"[red]Version must be a number or 'latest', got '{version}'.[/red]")
        raise typer.Exit(code=EXIT_ERROR)

    try:
        store = _service().store
        version_file = store.read_latest_version() if version == "latest" else store.read_version(int(version))
    except (SchemaLedgerError, OSError) as exc:
        raise _fail(exc) from exc

    if version_file is None:
        raise _not_found("No versions recorded yet." if version == "latest" else f"Version {version} not found.")

    if _json_output:
        _write_json(version_file.to_document())
    else:
        display_version(console, version_file)


# ---------------------------------------------------------------------------
# diff
# ---------------------------------------------------------------------------


@app.command()
def diff(
    from_version: int = typer.Argument(..., help="Older version number."),
    to_version: int = typer.Argument(..., help="Newer version number."),
) -> None:
    """Show the changes between two stored versions."""
    try:
        version_diff = _service().store.diff_versions(from_version, to_version)
    except (SchemaLedgerError, OSError) as exc:
        raise _fail(exc) from exc

    if version_diff is None:
        raise _not_found(f"Could not diff {from_version} -> {to_version}: one or both versions do not exist.")

    if _json_output:
        _write_json(version_diff.to_document())
    else:
        display_changes(console, version_diff.changes, title=f"Changes {from_version} -> {to_version}")


# ---------------------------------------------------------------------------
# pending
# ---------------------------------------------------------------------------


@app.command()
def pending() -> None:
    """Show changes between the latest version and the schemas on disk."""
    try:
        result = _service().get_pending_changes()
    except (SchemaLedgerError, OSError) as exc:
        raise _fail(exc) from exc

    if _json_output:
        _write_json(result.to_document())
    else:
        display_pending(console, result)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


@app.command()
def create(
    description: str | None = typer.Option(None, "--description", "-d", help="Description of this version."),
) -> None:
    """Record the pending changes as a new version."""
    try:
        result = _service().create_version(description)
    except (SchemaLedgerError, OSError) as exc:
        raise _fail(exc) from exc

    if _json_output:
        _write_json(result.to_document())
    else:
        console.print(f"[green]Created version {result.version}[/green] ({result.migration})")
        display_changes(console, result.changes)


# ---------------------------------------------------------------------------
# discard
# ---------------------------------------------------------------------------


@app.command()
def discard(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Restore the schema files from the latest version, deleting unknown ones."""
    if not yes:
        typer.confirm(
            "This overwrites schema files and deletes schemas not in the latest version. Continue?",
            abort=True,
            err=True,
        )

    try:
        result = _service().discard_changes()
    except (SchemaLedgerError, OSError) as exc:
        raise _fail(exc) from exc

    if _json_output:
        _write_json(result.to_document())
    else:
        display_discard_result(console, result)
