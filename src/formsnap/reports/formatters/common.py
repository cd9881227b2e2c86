"""Helpers shared by the report renderers."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from formsnap.core.contracts.report import IMPORTANCE_ORDER, ProcessedSnapshot, SnapshotReport
from formsnap.reports.generator import from_millis

TITLE = "Form Snapshot Report"

GROUP_HEADINGS: dict[str, str] = {
    "high": "🔴 High Importance Changes",
    "medium": "🟡 Medium Importance Changes",
    "low": "🟢 Low Importance Changes",
}

LOW_SUMMARY = "Show low importance changes"


def json_value(value: Any, *, indent: int | None = None) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def format_date(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def format_timestamp(ms: int) -> str:
    return from_millis(ms).strftime("%Y-%m-%d %H:%M:%S UTC")


def iso_timestamp(ms: int) -> str:
    return from_millis(ms).isoformat()


def date_range_label(report: SnapshotReport) -> str:
    rng = report.summary.date_range
    return f"{format_date(rng.from_)} - {format_date(rng.to)}"


def grouped(report: SnapshotReport) -> list[tuple[str, list[ProcessedSnapshot]]]:
    """Non-empty importance groups in display order (high, medium, low)."""
    groups = [(tier, report.by_importance(tier)) for tier in IMPORTANCE_ORDER]
    return [(tier, items) for tier, items in groups if items]


def metadata_payload(processed: ProcessedSnapshot) -> dict[str, Any] | None:
    """Metadata as a JSON-ready dict, or ``None`` when absent or empty."""
    metadata = processed.snapshot.metadata
    if metadata is None:
        return None
    dumped: dict[str, Any] = metadata.model_dump(mode="json", by_alias=True)
    return dumped or None


def summary_rows(report: SnapshotReport) -> list[tuple[str, str]]:
    summary = report.summary
    return [
        ("Total Snapshots", str(summary.total_snapshots)),
        ("Date Range", date_range_label(report)),
        ("Versions", ", ".join(summary.versions)),
        ("Total Changes", str(summary.total_changes)),
        ("Important Changes", str(summary.important_changes)),
    ]


__all__ = [
    "GROUP_HEADINGS",
    "LOW_SUMMARY",
    "TITLE",
    "date_range_label",
    "format_date",
    "format_timestamp",
    "grouped",
    "iso_timestamp",
    "json_value",
    "metadata_payload",
    "summary_rows",
]
