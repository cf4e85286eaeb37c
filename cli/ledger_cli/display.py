"""Rich output formatting for the Schema Ledger CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that JSON output on *stdout* is never polluted with
human-readable decoration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from schema_core.models.version import (
        DiscardResult,
        PendingChanges,
        VersionChange,
        VersionFile,
        VersionSummary,
    )


# ---------------------------------------------------------------------------
# Action colour mapping
# ---------------------------------------------------------------------------


def _action_colour(action: str) -> str:
    if action.endswith("_added"):
        return "green"
    if action.endswith("_removed"):
        return "red"
    if action.endswith("_renamed"):
        return "cyan"
    return "yellow"


def _coloured_action(action: str) -> str:
    colour = _action_colour(action)
    return f"[{colour}]{action}[/{colour}]"


def _format_value(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, dict):
        if "type" in value:
            return str(value["type"])
        if "columns" in value:
            unique = " unique" if value.get("unique") else ""
            return f"({', '.join(value['columns'])}){unique}"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def describe_change(change: VersionChange) -> str:
    """One-line human description of a change's before/after values."""
    before = change.from_value
    after = change.to_value
    if before is None and after is None:
        return ""
    if before is None:
        return _format_value(after)
    if after is None:
        return _format_value(before)
    return f"{_format_value(before)} -> {_format_value(after)}"


# ---------------------------------------------------------------------------
# Changes
# ---------------------------------------------------------------------------


def display_changes(console: Console, changes: list[VersionChange], *, title: str = "Changes") -> None:
    """Render a table of change records."""
    if not changes:
        console.print("[dim]No changes.[/dim]")
        return

    table = Table(title=f"{title} ({len(changes)})", show_lines=False, pad_edge=True, expand=False)
    table.add_column("Action")
    table.add_column("Schema", style="bold")
    table.add_column("Property")
    table.add_column("Detail")

    for change in changes:
        table.add_row(
            _coloured_action(change.action.value),
            change.schema_name,
            change.property or "-",
            describe_change(change) or "-",
        )

    console.print(table)


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------


def display_version_list(console: Console, summaries: list[VersionSummary]) -> None:
    if not summaries:
        console.print("[dim]No versions recorded yet.[/dim]")
        return

    table = Table(title=f"Versions ({len(summaries)})", show_lines=False, pad_edge=True, expand=False)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Created")
    table.add_column("Driver")
    table.add_column("Migration")
    table.add_column("Description")
    table.add_column("Schemas", justify="right")
    table.add_column("Changes", justify="right")

    for summary in summaries:
        table.add_row(
            str(summary.version),
            summary.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            summary.driver,
            summary.migration or "-",
            summary.description or "-",
            str(summary.schema_count),
            str(summary.change_count),
        )

    console.print(table)


def display_version(console: Console, version_file: VersionFile) -> None:
    """Render a version header panel followed by its change table."""
    header_lines = [
        f"[bold]Version:[/bold]     {version_file.version}",
        f"[bold]Created:[/bold]     {version_file.timestamp.isoformat()}",
        f"[bold]Driver:[/bold]      {version_file.driver}",
        f"[bold]Migration:[/bold]   {version_file.migration or '(none)'}",
        f"[bold]Description:[/bold] {version_file.description or '(none)'}",
        f"[bold]Schemas:[/bold]     {', '.join(sorted(version_file.snapshot)) or '(none)'}",
    ]
    console.print(Panel("\n".join(header_lines), title="Schema Version", border_style="blue"))
    display_changes(console, version_file.changes)


def display_pending(console: Console, pending: PendingChanges) -> None:
    base = f"version {pending.latest_version}" if pending.latest_version is not None else "no version"
    console.print(
        f"Comparing {pending.current_schema_count} schema(s) on disk "
        f"against {base} ({pending.previous_schema_count} schema(s))."
    )
    if not pending.has_changes:
        console.print("[green]No pending changes.[/green]")
        return
    display_changes(console, pending.changes, title="Pending changes")


def display_discard_result(console: Console, result: DiscardResult) -> None:
    console.print(
        Panel(
            f"[bold]Restored:[/bold] {result.restored}\n[bold]Deleted:[/bold]  {result.deleted}",
            title="Discarded Changes",
            border_style="red",
        )
    )
