"""Report contracts: the structured output of `generate_report`.

A report is computed fresh on every request and frozen once returned:

- `ProcessedSnapshot` : a snapshot plus its changes against the previous
  snapshot in the filtered history and a derived importance tier.
- `ReportSummary`     : counts, date range and the sorted version list.
- `SnapshotReport`    : summary + processed snapshots (chronological).

`ReportFilters` / `ReportOptions` describe the request side.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .snapshot import Snapshot, StateChanges

Importance = Literal["high", "medium", "low"]
ReportFormat = Literal["text", "markdown", "html", "json"]

IMPORTANCE_ORDER: tuple[Importance, ...] = ("high", "medium", "low")


class ProcessedSnapshot(BaseModel):
    """A snapshot annotated with report-time derived data."""

    model_config = ConfigDict(frozen=True)

    snapshot: Snapshot
    changes: StateChanges | None = None
    importance: Importance = "low"


class DateRange(BaseModel):
    """Inclusive capture-time range covered by a report."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: datetime = Field(alias="from")
    to: datetime


class ReportSummary(BaseModel):
    """Aggregates over the processed snapshots of a report."""

    model_config = ConfigDict(frozen=True)

    total_snapshots: int = 0
    date_range: DateRange
    versions: list[str] = Field(default_factory=list)
    total_changes: int = 0
    important_changes: int = 0


class SnapshotReport(BaseModel):
    """Filtered, classified history of one form."""

    model_config = ConfigDict(frozen=True)

    summary: ReportSummary
    snapshots: list[ProcessedSnapshot] = Field(default_factory=list)

    def by_importance(self, importance: Importance) -> list[ProcessedSnapshot]:
        """Return the processed snapshots of one tier, chronological."""
        return [s for s in self.snapshots if s.importance == importance]


class ReportFilters(BaseModel):
    """Optional filters applied, in order, by `generate_report`."""

    from_date: datetime | None = None
    to_date: datetime | None = None
    versions: list[str] | None = None
    fields: list[str] | None = None
    only_important: bool = False


class ReportOptions(BaseModel):
    """Request options for report generation and rendering."""

    include_metadata: bool = True
    include_timestamps: bool = True
    format: ReportFormat = "text"
    filters: ReportFilters = Field(default_factory=ReportFilters)


__all__ = [
    "DateRange",
    "IMPORTANCE_ORDER",
    "Importance",
    "ProcessedSnapshot",
    "ReportFilters",
    "ReportFormat",
    "ReportOptions",
    "ReportSummary",
    "SnapshotReport",
]
