"""Markdown report renderer.

Layout
------
- Summary table.
- One section per non-empty importance tier. High and medium are rendered
  inline; low is wrapped in a collapsible ``<details>`` block.
- Per snapshot: version heading, optional timestamp, a change table and the
  metadata as a fenced JSON block.

Escaping
--------
Field names and values are user-controlled. Inline text escapes Markdown
punctuation (including ``|`` so table rows keep their column count, and
``<``/``>`` so values cannot open HTML tags). Code fences are made longer
than the longest backtick run of their content.
"""

from __future__ import annotations

import re

from formsnap.core.contracts.report import ProcessedSnapshot, SnapshotReport
from formsnap.core.contracts.snapshot import StateChanges

from .common import (
    GROUP_HEADINGS,
    LOW_SUMMARY,
    TITLE,
    format_timestamp,
    grouped,
    json_value,
    metadata_payload,
    summary_rows,
)

_MD_SPECIAL = re.compile(r"([\\`*_\[\]{}<>|#])")
_BACKTICK_RUN = re.compile(r"`+")


def md_escape(text: str) -> str:
    """Backslash-escape Markdown punctuation and flatten newlines."""
    escaped = _MD_SPECIAL.sub(r"\\\1", text)
    return escaped.replace("\r\n", "<br>").replace("\n", "<br>")


def md_table(headers: list[str], rows: list[list[str]]) -> str:
    lines = [
        f"| {' | '.join(headers)} |",
        f"| {' | '.join('---' for _ in headers)} |",
    ]
    lines.extend(f"| {' | '.join(row)} |" for row in rows)
    return "\n".join(lines)


def md_details(summary: str, content: str) -> str:
    return f"<details>\n<summary>{summary}</summary>\n\n{content}\n</details>"


def md_code_block(content: str, language: str = "") -> str:
    longest = max((len(run) for run in _BACKTICK_RUN.findall(content)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}{language}\n{content}\n{fence}"


def _changes_table(changes: StateChanges) -> str:
    rows = [
        [md_escape(name), md_escape(json_value(change.from_)), md_escape(json_value(change.to))]
        for name, change in changes.items()
    ]
    return md_table(["Field", "Previous Value", "New Value"], rows)


def _snapshot_section(
    processed: ProcessedSnapshot,
    *,
    include_metadata: bool,
    include_timestamps: bool,
) -> list[str]:
    snap = processed.snapshot
    lines = [f"#### Version {md_escape(snap.version)}", ""]
    if include_timestamps:
        lines.extend([f"*{format_timestamp(snap.timestamp)}*", ""])

    if processed.changes:
        lines.extend(["Changes:", "", _changes_table(processed.changes), ""])

    metadata = metadata_payload(processed) if include_metadata else None
    if metadata:
        lines.extend(["Metadata:", "", md_code_block(json_value(metadata, indent=2), "json"), ""])

    lines.extend(["---", ""])
    return lines


def format_markdown_report(
    report: SnapshotReport,
    *,
    include_metadata: bool = True,
    include_timestamps: bool = True,
) -> str:
    lines = [
        f"# {TITLE}",
        "",
        "## Summary",
        "",
        md_table(["Metric", "Value"], [[label, md_escape(value)] for label, value in summary_rows(report)]),
        "",
        "## Snapshots",
        "",
    ]

    for tier, items in grouped(report):
        lines.extend([f"### {GROUP_HEADINGS[tier]}", ""])
        body: list[str] = []
        for processed in items:
            body.extend(
                _snapshot_section(
                    processed,
                    include_metadata=include_metadata,
                    include_timestamps=include_timestamps,
                )
            )
        if tier == "low":
            lines.append(md_details(LOW_SUMMARY, "\n".join(body)))
        else:
            lines.extend(body)

    return "\n".join(lines)


__all__ = ["format_markdown_report", "md_code_block", "md_escape", "md_table"]
