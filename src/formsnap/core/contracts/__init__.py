"""Pydantic contracts shared by the store, differ, validator, migrations and reports."""

from __future__ import annotations

from .analysis import SnapshotDiff, SnapshotValidationResult, ValidationCode, ValidationIssue
from .report import (
    DateRange,
    Importance,
    ProcessedSnapshot,
    ReportFilters,
    ReportFormat,
    ReportOptions,
    ReportSummary,
    SnapshotReport,
)
from .snapshot import (
    FieldChange,
    FieldConfig,
    MigrationRecord,
    Snapshot,
    SnapshotFormConfig,
    SnapshotMetadata,
    StateChanges,
    coerce_config,
    coerce_metadata,
    dump_snapshot,
)

__all__ = [
    "DateRange",
    "FieldChange",
    "FieldConfig",
    "Importance",
    "MigrationRecord",
    "ProcessedSnapshot",
    "ReportFilters",
    "ReportFormat",
    "ReportOptions",
    "ReportSummary",
    "Snapshot",
    "SnapshotDiff",
    "SnapshotFormConfig",
    "SnapshotMetadata",
    "SnapshotReport",
    "SnapshotValidationResult",
    "StateChanges",
    "ValidationCode",
    "ValidationIssue",
    "coerce_config",
    "coerce_metadata",
    "dump_snapshot",
]
