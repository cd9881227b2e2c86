# src/formsnap/cli.py
"""
formsnap Command Line Interface (CLI).

This module implements a terminal interface over a file-backed snapshot
store using `typer` and `rich`. It is meant for inspecting and exporting form
histories outside of the application that records them.

Features
--------
- **Listing**: tabular view of a form's snapshot history.
- **Inspection**: show one snapshot, or diff two of them.
- **Validation**: check every stored snapshot against a field config file.
- **Reports**: render text / Markdown / HTML / JSON reports to the terminal or a file.

Usage
-----
    $ formsnap list signup
    $ formsnap diff signup <id-a> <id-b>
    $ formsnap report signup --config fields.json --format markdown -o report.md
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from formsnap.core.contracts.report import ReportFilters, ReportOptions
from formsnap.core.diff import compare_snapshots, create_snapshot_summary
from formsnap.core.store import FileStorage, SnapshotStore
from formsnap.core.validation import validate_snapshot
from formsnap.reports import format_report, generate_report
from formsnap.reports.formatters import RENDERERS
from formsnap.reports.formatters.common import format_timestamp, json_value

# Ensure env vars (like FORMSNAP_STORE_DIR) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="formsnap: inspect, diff and report on stored form snapshots.",
    rich_markup_mode="markdown",
)
console = Console()

StoreDirOption = Annotated[
    Path | None,
    typer.Option(
        "--store-dir",
        "-d",
        help="Directory of the file-backed store (defaults to FORMSNAP_STORE_DIR).",
    ),
]
NamespaceOption = Annotated[
    str | None,
    typer.Option("--namespace", "-n", help="Storage namespace prefix."),
]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _open_store(form_id: str, store_dir: Path | None, namespace: str | None) -> SnapshotStore:
    return SnapshotStore(form_id, storage=FileStorage(store_dir), namespace=namespace)


def _load_config(path: Path | None) -> dict[str, Any]:
    """Read a field-config JSON object; exit with code 1 if unreadable."""
    if path is None:
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]❌ Could not read config {path}:[/bold red] {e}")
        raise typer.Exit(code=1) from e
    if not isinstance(data, dict):
        console.print(f"[bold red]❌ Config {path} must be a JSON object.[/bold red]")
        raise typer.Exit(code=1)
    return data


def _fail(message: str) -> None:
    console.print(f"[bold red]❌ {message}[/bold red]")
    raise typer.Exit(code=1)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command("list")  # type: ignore[misc]
def list_snapshots(
    form_id: Annotated[str, typer.Argument(help="Form identity.")],
    store_dir: StoreDirOption = None,
    namespace: NamespaceOption = None,
) -> None:
    """List the stored snapshots of a form, oldest first."""
    store = _open_store(form_id, store_dir, namespace)
    snapshots = store.get_all_snapshots()
    if not snapshots:
        console.print(f"[dim]No snapshots stored for '{form_id}'.[/dim]")
        return

    table = Table(title=f"Snapshots of {form_id}")
    table.add_column("#", justify="right")
    table.add_column("ID")
    table.add_column("Captured")
    table.add_column("Version")
    table.add_column("Fields", justify="right")
    table.add_column("Auto")
    for i, snap in enumerate(snapshots, start=1):
        auto = bool(snap.metadata and snap.metadata.auto)
        table.add_row(
            str(i),
            snap.id,
            format_timestamp(snap.timestamp),
            snap.version,
            str(len(snap.state)),
            "yes" if auto else "",
        )
    console.print(table)


@app.command()  # type: ignore[misc]
def show(
    form_id: Annotated[str, typer.Argument(help="Form identity.")],
    snapshot_id: Annotated[str, typer.Argument(help="Snapshot id.")],
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", exists=True, dir_okay=False, help="Field config JSON."),
    ] = None,
    store_dir: StoreDirOption = None,
    namespace: NamespaceOption = None,
) -> None:
    """Print a plain-text summary of one snapshot."""
    store = _open_store(form_id, store_dir, namespace)
    snapshot = store.get_snapshot(snapshot_id)
    if snapshot is None:
        _fail(f"Snapshot '{snapshot_id}' not found for '{form_id}'.")
        return
    console.print(Panel(create_snapshot_summary(snapshot, _load_config(config)), title=snapshot.id))


@app.command()  # type: ignore[misc]
def diff(
    form_id: Annotated[str, typer.Argument(help="Form identity.")],
    older: Annotated[str, typer.Argument(help="Id of the older snapshot.")],
    newer: Annotated[str, typer.Argument(help="Id of the newer snapshot.")],
    store_dir: StoreDirOption = None,
    namespace: NamespaceOption = None,
) -> None:
    """Show added / removed / modified fields between two snapshots."""
    store = _open_store(form_id, store_dir, namespace)
    a, b = store.get_snapshot(older), store.get_snapshot(newer)
    if a is None or b is None:
        missing = older if a is None else newer
        _fail(f"Snapshot '{missing}' not found for '{form_id}'.")
        return

    result = compare_snapshots(a, b)
    table = Table(title=f"{older} → {newer}")
    table.add_column("Field")
    table.add_column("Status")
    table.add_column("Before")
    table.add_column("After")
    for name, value in result.added.items():
        table.add_row(name, "[green]added[/green]", "", json_value(value))
    for name, value in result.removed.items():
        table.add_row(name, "[red]removed[/red]", json_value(value), "")
    for name, change in result.modified.items():
        table.add_row(name, "[yellow]modified[/yellow]", json_value(change.from_), json_value(change.to))
    console.print(table)
    console.print(f"[dim]{len(result.unchanged)} unchanged field(s)[/dim]")


@app.command()  # type: ignore[misc]
def validate(
    form_id: Annotated[str, typer.Argument(help="Form identity.")],
    config: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="Field config JSON."),
    ],
    store_dir: StoreDirOption = None,
    namespace: NamespaceOption = None,
) -> None:
    """Validate every stored snapshot; exits 1 if any is invalid."""
    field_config = _load_config(config)
    store = _open_store(form_id, store_dir, namespace)

    invalid = 0
    for snap in store.get_all_snapshots():
        result = validate_snapshot(snap, field_config)
        if result.is_valid:
            console.print(f"[green]✔[/green] {snap.id}")
            continue
        invalid += 1
        console.print(f"[red]✘[/red] {snap.id}")
        for issue in result.errors:
            console.print(f"    [dim]{issue.code.value}[/dim] {issue.message}")

    if invalid:
        raise typer.Exit(code=1)


@app.command()  # type: ignore[misc]
def report(
    form_id: Annotated[str, typer.Argument(help="Form identity.")],
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", exists=True, dir_okay=False, help="Field config JSON."),
    ] = None,
    fmt: Annotated[
        str,
        typer.Option("--format", "-f", help="text | markdown | html | json"),
    ] = "text",
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the report to this file instead of stdout."),
    ] = None,
    only_important: Annotated[
        bool,
        typer.Option("--only-important", help="Keep only high-importance snapshots."),
    ] = False,
    versions: Annotated[
        list[str] | None,
        typer.Option("--version", help="Version allow-list (repeatable)."),
    ] = None,
    fields: Annotated[
        list[str] | None,
        typer.Option("--field", help="Only consider these fields for changes (repeatable)."),
    ] = None,
    no_metadata: Annotated[
        bool,
        typer.Option("--no-metadata", help="Omit snapshot metadata from the output."),
    ] = False,
    store_dir: StoreDirOption = None,
    namespace: NamespaceOption = None,
) -> None:
    """Render a snapshot report for a form."""
    if fmt not in RENDERERS:
        _fail(f"Unknown format '{fmt}'. Choose from: {', '.join(RENDERERS)}.")

    store = _open_store(form_id, store_dir, namespace)
    options = ReportOptions(
        include_metadata=not no_metadata,
        format=fmt,
        filters=ReportFilters(
            versions=versions or None,
            fields=fields or None,
            only_important=only_important,
        ),
    )
    built = generate_report(store.get_all_snapshots(), _load_config(config), options)
    rendered = format_report(built, options.format, include_metadata=options.include_metadata)

    if output is not None:
        try:
            output.write_text(rendered, encoding="utf-8")
        except OSError as e:
            _fail(f"Failed to save to {output}: {e}")
        console.print(
            Panel(
                f"Saved to: [link=file://{output}]{output}[/link]",
                title="Report",
                border_style="green",
            )
        )
        return

    if fmt == "markdown":
        console.print(Markdown(rendered))
    else:
        # plain print keeps html/json byte-exact for piping
        print(rendered)


@app.command()  # type: ignore[misc]
def clear(
    form_id: Annotated[str, typer.Argument(help="Form identity.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
    store_dir: StoreDirOption = None,
    namespace: NamespaceOption = None,
) -> None:
    """Delete the whole snapshot history of a form."""
    if not yes and not Confirm.ask(f"Delete all snapshots of '{form_id}'?", default=False):
        console.print("[dim]Aborted.[/dim]")
        return
    _open_store(form_id, store_dir, namespace).clear_snapshots()
    console.print(f"[bold green]✅ Cleared snapshots of '{form_id}'.[/bold green]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
