"""Request bodies for the snapshot HTTP API.

Response bodies reuse the core contracts (`Snapshot`, `SnapshotDiff`,
`SnapshotValidationResult`) directly.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from formsnap.core.contracts.report import ReportFilters
from formsnap.core.contracts.snapshot import FieldConfig, Snapshot, SnapshotMetadata


class CreateSnapshotRequest(BaseModel):
    """Body of `POST /forms/{form_id}/snapshots`."""

    state: dict[str, Any]
    metadata: SnapshotMetadata | None = None


class AutoSnapshotRequest(BaseModel):
    """Body of `POST /forms/{form_id}/snapshots/auto`."""

    config: dict[str, FieldConfig]
    current_state: dict[str, Any]
    prev_state: dict[str, Any]


class AutoSnapshotResponse(BaseModel):
    created: bool
    snapshot: Snapshot | None = None


class ValidateRequest(BaseModel):
    config: dict[str, FieldConfig] = Field(default_factory=dict)


class ReportRequest(BaseModel):
    """Body of `POST /forms/{form_id}/report`."""

    config: dict[str, FieldConfig] = Field(default_factory=dict)
    filters: ReportFilters = Field(default_factory=ReportFilters)
    include_metadata: bool = True
    include_timestamps: bool = True


class DiffRequest(BaseModel):
    """Two states to compare; `a` is the older one."""

    a: dict[str, Any]
    b: dict[str, Any]


__all__ = [
    "AutoSnapshotRequest",
    "AutoSnapshotResponse",
    "CreateSnapshotRequest",
    "DiffRequest",
    "ReportRequest",
    "ValidateRequest",
]
