"""Unit tests for the report renderers and the format dispatcher."""

from __future__ import annotations

import json
from typing import Any

import pytest

from formsnap.core.contracts.snapshot import Snapshot, SnapshotMetadata
from formsnap.reports import format_report, generate_report
from formsnap.reports.formatters.markdown import md_code_block, md_escape

CONFIG = {"email": {"important": True}, "bio": {}, "a": {}, "b": {}, "c": {}, "d": {}}
BASE_MS = 1_700_000_000_000


def _report(**states: dict[str, Any]) -> Any:
    snaps = [
        Snapshot(
            id=name,
            timestamp=BASE_MS + i * 1000,
            state=state,
            metadata=SnapshotMetadata(auto=i % 2 == 1),
        )
        for i, (name, state) in enumerate(states.items())
    ]
    return generate_report(snaps, CONFIG)


@pytest.fixture()  # type: ignore[misc]
def mixed_report() -> Any:
    """One snapshot per tier: first (low), high, medium."""
    return _report(
        s0={"email": "a", "bio": "hi", "a": 0, "b": 0, "c": 0, "d": 0},
        s1={"email": "b", "bio": "hi", "a": 0, "b": 0, "c": 0, "d": 0},
        s2={"email": "b", "bio": "hi", "a": 1, "b": 1, "c": 1, "d": 1},
    )


@pytest.fixture()  # type: ignore[misc]
def hostile_report() -> Any:
    return _report(
        s0={"bio": "plain"},
        s1={"bio": "<script>alert('x')</script> a|b *bold*"},
    )


# ---------------------------------- Text ----------------------------------


def test_text_report_lists_summary_and_changes(mixed_report: Any) -> None:
    text = format_report(mixed_report, "text")

    assert text.startswith("Form Snapshot Report\n====================")
    assert "Total Snapshots: 3" in text
    assert "Important Changes: 1" in text
    assert "Versions: 1.0.0" in text
    assert "Importance: high" in text
    assert "  email:\n    From: \"a\"\n    To:   \"b\"" in text
    assert "2023-11-14 22:13:20 UTC" in text
    assert "Metadata:\n  auto: true" in text


def test_text_report_flags(mixed_report: Any) -> None:
    text = format_report(mixed_report, "text", include_metadata=False, include_timestamps=False)
    assert "Metadata:" not in text
    assert " UTC)" not in text
    assert "Version 1.0.0\nImportance: low" in text


# -------------------------------- Markdown --------------------------------


def test_markdown_groups_tiers_and_collapses_low(mixed_report: Any) -> None:
    md = format_report(mixed_report, "markdown")

    high = md.index("### 🔴 High Importance Changes")
    medium = md.index("### 🟡 Medium Importance Changes")
    low = md.index("### 🟢 Low Importance Changes")
    assert high < medium < low
    assert "<details>\n<summary>Show low importance changes</summary>" in md[low:]
    assert "<details>" not in md[:low]
    assert "| Metric | Value |" in md
    assert "| Total Snapshots | 3 |" in md
    assert "| Field | Previous Value | New Value |" in md
    assert "```json\n{\n  \"auto\": true\n}\n```" in md


def test_markdown_escapes_user_content(hostile_report: Any) -> None:
    md = format_report(hostile_report, "markdown")

    assert "<script>" not in md
    assert "\\<script\\>" in md
    assert "a\\|b" in md
    assert "\\*bold\\*" in md
    row = next(line for line in md.splitlines() if line.startswith("| bio |"))
    # escaped pipes do not add columns
    assert row.replace("\\|", "").count("|") == 4


def test_md_helpers() -> None:
    assert md_escape("line1\nline2") == "line1<br>line2"
    assert md_escape("# [x](y)") == "\\# \\[x\\](y)"
    block = md_code_block("has ``` inside")
    assert block.startswith("````\n") and block.endswith("\n````")


# ---------------------------------- HTML ----------------------------------


def test_html_is_self_contained_with_dark_mode(mixed_report: Any) -> None:
    html = format_report(mixed_report, "html")

    assert html.lstrip().startswith("<!DOCTYPE html>")
    assert "<style>" in html
    assert "@media (prefers-color-scheme: dark)" in html
    assert '<span class="badge badge-high">High</span>' in html
    assert "<summary>Show low importance changes</summary>" in html
    assert html.index("High Importance Changes") < html.index("<details>")


def test_html_escapes_user_content(hostile_report: Any) -> None:
    html = format_report(hostile_report, "html")

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_html_omits_metadata_when_disabled(mixed_report: Any) -> None:
    html = format_report(mixed_report, "html", include_metadata=False)
    assert 'class="metadata"' not in html


# ------------------------------ JSON/dispatch -----------------------------


def test_json_report_uses_wire_names(mixed_report: Any) -> None:
    payload = json.loads(format_report(mixed_report, "json"))

    assert payload["summary"]["total_snapshots"] == 3
    assert set(payload["summary"]["date_range"]) == {"from", "to"}
    changes = payload["snapshots"][1]["changes"]
    assert changes["email"] == {"from": "a", "to": "b"}


def test_unknown_format_is_rejected(mixed_report: Any) -> None:
    with pytest.raises(ValueError, match="Unknown report format"):
        format_report(mixed_report, "pdf")  # type: ignore[arg-type]


def test_renderers_are_pure(mixed_report: Any) -> None:
    before = mixed_report.model_dump()
    for fmt in ("text", "markdown", "html", "json"):
        format_report(mixed_report, fmt)
    assert mixed_report.model_dump() == before
