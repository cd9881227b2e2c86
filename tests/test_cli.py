# tests/test_cli.py
"""
Tests for the formsnap command-line interface (CLI).

Scope
-----
1.  **Command Registration**: `--help` lists every command.
2.  **Store Access**: commands read the file-backed store given by `--store-dir`.
3.  **Exit Codes**: missing snapshots and invalid histories exit with code 1.
4.  **Output**: JSON reports are byte-exact on stdout; `-o` writes a file.

We use `typer.testing.CliRunner` to invoke the app in-process. Snapshot ids
are not asserted inside rich tables because columns may wrap.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from formsnap.cli import app
from formsnap.core.contracts.snapshot import Snapshot
from formsnap.core.store import FileStorage, SnapshotStore


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture  # type: ignore[misc]
def seeded(tmp_path: Path, clock: Callable[[], int]) -> tuple[Path, list[Snapshot]]:
    """Two snapshots of form ``signup`` in a temporary store directory."""
    store = SnapshotStore("signup", storage=FileStorage(tmp_path), clock=clock)
    first = store.create_snapshot({"email": "a@x.io", "age": 30})
    second = store.create_snapshot({"email": "b@x.io", "nickname": "bee"}, {"auto": True})
    return tmp_path, [first, second]


def _config(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "fields.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_help_lists_commands(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, result.output
    for command in ("list", "show", "diff", "validate", "report", "clear"):
        assert command in result.output


def test_list_shows_history(runner: CliRunner, seeded: tuple[Path, list[Snapshot]]) -> None:
    store_dir, _ = seeded
    result = runner.invoke(app, ["list", "signup", "--store-dir", str(store_dir)])

    assert result.exit_code == 0, result.output
    assert "Snapshots of signup" in result.output
    assert "1.0.0" in result.output


def test_list_empty_form(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(app, ["list", "ghost", "-d", str(tmp_path)])
    assert result.exit_code == 0
    assert "No snapshots stored for 'ghost'" in result.output


def test_show_missing_snapshot_exits_1(
    runner: CliRunner, seeded: tuple[Path, list[Snapshot]]
) -> None:
    store_dir, _ = seeded
    result = runner.invoke(app, ["show", "signup", "nope", "-d", str(store_dir)])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_show_prints_summary(runner: CliRunner, seeded: tuple[Path, list[Snapshot]]) -> None:
    store_dir, snaps = seeded
    config = _config(store_dir, {"email": {"important": True}})
    result = runner.invoke(
        app, ["show", "signup", snaps[0].id, "-d", str(store_dir), "--config", str(config)]
    )
    assert result.exit_code == 0, result.output
    assert "email (Important)" in result.output


def test_diff_reports_field_statuses(
    runner: CliRunner, seeded: tuple[Path, list[Snapshot]]
) -> None:
    store_dir, (first, second) = seeded
    result = runner.invoke(app, ["diff", "signup", first.id, second.id, "-d", str(store_dir)])

    assert result.exit_code == 0, result.output
    assert "added" in result.output
    assert "removed" in result.output
    assert "modified" in result.output
    assert "0 unchanged field(s)" in result.output


def test_validate_exits_1_on_invalid_history(
    runner: CliRunner, seeded: tuple[Path, list[Snapshot]]
) -> None:
    store_dir, _ = seeded
    config = _config(store_dir, {"age": {"type": "number", "required": True}})

    result = runner.invoke(app, ["validate", "signup", str(config), "-d", str(store_dir)])

    assert result.exit_code == 1
    assert "REQUIRED_FIELD" in result.output


def test_validate_passes(runner: CliRunner, seeded: tuple[Path, list[Snapshot]]) -> None:
    store_dir, _ = seeded
    config = _config(store_dir, {"email": {"type": "string", "required": True}})
    result = runner.invoke(app, ["validate", "signup", str(config), "-d", str(store_dir)])
    assert result.exit_code == 0, result.output


def test_report_json_on_stdout(runner: CliRunner, seeded: tuple[Path, list[Snapshot]]) -> None:
    store_dir, _ = seeded
    config = _config(store_dir, {"email": {"important": True}})

    result = runner.invoke(
        app,
        ["report", "signup", "-f", "json", "-c", str(config), "-d", str(store_dir)],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["summary"]["total_snapshots"] == 2
    assert payload["summary"]["important_changes"] == 1
    assert payload["snapshots"][1]["importance"] == "high"


def test_report_writes_file(
    runner: CliRunner, seeded: tuple[Path, list[Snapshot]], tmp_path: Path
) -> None:
    store_dir, _ = seeded
    out = tmp_path / "report.html"
    result = runner.invoke(app, ["report", "signup", "-f", "html", "-o", str(out), "-d", str(store_dir)])

    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8").lstrip().startswith("<!DOCTYPE html>")


def test_report_rejects_unknown_format(
    runner: CliRunner, seeded: tuple[Path, list[Snapshot]]
) -> None:
    store_dir, _ = seeded
    result = runner.invoke(app, ["report", "signup", "-f", "pdf", "-d", str(store_dir)])
    assert result.exit_code == 1
    assert "Unknown format" in result.output


def test_clear_with_yes(runner: CliRunner, seeded: tuple[Path, list[Snapshot]]) -> None:
    store_dir, _ = seeded
    result = runner.invoke(app, ["clear", "signup", "--yes", "-d", str(store_dir)])

    assert result.exit_code == 0, result.output
    assert SnapshotStore("signup", storage=FileStorage(store_dir)).get_all_snapshots() == []


def test_clear_aborts_without_confirmation(
    runner: CliRunner, seeded: tuple[Path, list[Snapshot]]
) -> None:
    store_dir, _ = seeded
    result = runner.invoke(app, ["clear", "signup", "-d", str(store_dir)], input="n\n")

    assert result.exit_code == 0
    assert "Aborted" in result.output
    assert len(SnapshotStore("signup", storage=FileStorage(store_dir))) == 2
