"""Build a filtered, importance-classified report over a snapshot history.

Pipeline
--------
1. Sort by timestamp (stable, so equal timestamps keep input order).
2. Filter by date range (inclusive), then by version allow-list.
3. For each remaining snapshot after the first, compute per-field changes
   against its predecessor *in the filtered list*, restricted to
   ``filters.fields`` when given.
4. Classify importance:
   - ``high``   : any changed field is flagged ``important`` in the config;
   - ``medium`` : more than three fields changed;
   - ``low``    : otherwise (including the first snapshot).
5. Optionally keep only ``high`` snapshots.
6. Summarize.

Empty input is not an error: the summary has zero counts and a date range
collapsed on the current time.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from formsnap.core.contracts.report import (
    DateRange,
    Importance,
    ProcessedSnapshot,
    ReportOptions,
    ReportSummary,
    SnapshotReport,
)
from formsnap.core.contracts.snapshot import (
    FieldConfig,
    Snapshot,
    SnapshotFormConfig,
    StateChanges,
    coerce_config,
)
from formsnap.core.diff import changed_fields
from formsnap.core.versioning import unique_sorted_versions

# more changed fields than this makes a snapshot "medium"
MEDIUM_CHANGE_THRESHOLD = 3


def to_millis(moment: datetime) -> int:
    """Epoch milliseconds of `moment`; naive datetimes are read as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp() * 1000)


def from_millis(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def classify_importance(changes: StateChanges, config: SnapshotFormConfig) -> Importance:
    if any(name in config and config[name].important for name in changes):
        return "high"
    if len(changes) > MEDIUM_CHANGE_THRESHOLD:
        return "medium"
    return "low"


def _summarize(processed: list[ProcessedSnapshot]) -> ReportSummary:
    if processed:
        first = from_millis(processed[0].snapshot.timestamp)
        last = from_millis(processed[-1].snapshot.timestamp)
    else:
        first = last = datetime.now(UTC)

    return ReportSummary(
        total_snapshots=len(processed),
        date_range=DateRange(from_=first, to=last),
        versions=unique_sorted_versions(p.snapshot.version for p in processed),
        total_changes=sum(1 for p in processed if p.changes),
        important_changes=sum(1 for p in processed if p.importance == "high"),
    )


def generate_report(
    snapshots: Iterable[Snapshot],
    config: Mapping[str, FieldConfig | Mapping[str, Any]],
    options: ReportOptions | None = None,
) -> SnapshotReport:
    """Aggregate `snapshots` into a `SnapshotReport`.

    Parameters
    ----------
    snapshots:
        Any iterable of snapshots, typically `SnapshotStore.get_all_snapshots()`.
    config:
        Field configuration; only the ``important`` flags are consulted.
    options:
        Filters and rendering flags; defaults to no filtering.
    """
    opts = options or ReportOptions()
    filters = opts.filters
    field_configs = coerce_config(config)

    ordered = sorted(snapshots, key=lambda s: s.timestamp)

    if filters.from_date is not None:
        lower = to_millis(filters.from_date)
        ordered = [s for s in ordered if s.timestamp >= lower]
    if filters.to_date is not None:
        upper = to_millis(filters.to_date)
        ordered = [s for s in ordered if s.timestamp <= upper]
    if filters.versions:
        allowed = set(filters.versions)
        ordered = [s for s in ordered if s.version in allowed]

    processed: list[ProcessedSnapshot] = []
    previous: Snapshot | None = None
    for snap in ordered:
        changes: StateChanges = {}
        if previous is not None:
            changes = changed_fields(previous.state, snap.state, filters.fields)
        processed.append(
            ProcessedSnapshot(
                snapshot=snap,
                changes=changes or None,
                importance=classify_importance(changes, field_configs),
            )
        )
        previous = snap

    if filters.only_important:
        processed = [p for p in processed if p.importance == "high"]

    return SnapshotReport(summary=_summarize(processed), snapshots=processed)


__all__ = ["MEDIUM_CHANGE_THRESHOLD", "classify_importance", "from_millis", "generate_report", "to_millis"]
