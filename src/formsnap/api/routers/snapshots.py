"""
API Routes for snapshot histories and reports.

Endpoints
---------
- `GET    /forms/{form_id}/snapshots`            : full history, oldest first.
- `POST   /forms/{form_id}/snapshots`            : capture a state.
- `POST   /forms/{form_id}/snapshots/auto`       : capture only on important changes.
- `GET    /forms/{form_id}/snapshots/{id}`       : one snapshot (404 if absent).
- `POST   /forms/{form_id}/snapshots/{id}/validate` : structural validation.
- `DELETE /forms/{form_id}/snapshots/{id}`       : delete one (404 if absent).
- `DELETE /forms/{form_id}/snapshots`            : clear the history.
- `POST   /forms/{form_id}/report?format=...`    : rendered report.
- `POST   /diff`                                 : compare two raw states.

Design Decisions
----------------
- **Injected storage**: every request builds a `SnapshotStore` over the
  storage provider held on `app.state`, so tests can swap in `MemoryStorage`.
- **Wire names**: snapshots are returned with their JSON wire names
  (``"from"`` in change records).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from formsnap.api.schemas import (
    AutoSnapshotRequest,
    AutoSnapshotResponse,
    CreateSnapshotRequest,
    DiffRequest,
    ReportRequest,
    ValidateRequest,
)
from formsnap.core.contracts.analysis import SnapshotDiff, SnapshotValidationResult
from formsnap.core.contracts.report import ReportFormat, ReportOptions
from formsnap.core.contracts.snapshot import Snapshot, dump_snapshot
from formsnap.core.diff import compare_snapshots
from formsnap.core.store import SnapshotStore
from formsnap.core.validation import validate_snapshot
from formsnap.reports import format_report, generate_report

router = APIRouter(tags=["Snapshots"])

MEDIA_TYPES: dict[str, str] = {
    "text": "text/plain; charset=utf-8",
    "markdown": "text/markdown; charset=utf-8",
    "html": "text/html; charset=utf-8",
    "json": "application/json",
}


def _store(request: Request, form_id: str) -> SnapshotStore:
    return SnapshotStore(
        form_id,
        storage=request.app.state.storage,
        notifier=request.app.state.notifier,
    )


def _get_or_404(store: SnapshotStore, snapshot_id: str) -> Snapshot:
    snapshot = store.get_snapshot(snapshot_id)
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Snapshot {snapshot_id} not found",
        )
    return snapshot


@router.get("/forms/{form_id}/snapshots", summary="List a form's snapshots")
def list_snapshots(form_id: str, request: Request) -> list[dict[str, Any]]:
    return [dump_snapshot(s) for s in _store(request, form_id).get_all_snapshots()]


@router.post(
    "/forms/{form_id}/snapshots",
    status_code=status.HTTP_201_CREATED,
    summary="Capture a snapshot",
)
def create_snapshot(form_id: str, body: CreateSnapshotRequest, request: Request) -> dict[str, Any]:
    snapshot = _store(request, form_id).create_snapshot(body.state, body.metadata)
    return dump_snapshot(snapshot)


@router.post(
    "/forms/{form_id}/snapshots/auto",
    response_model=AutoSnapshotResponse,
    response_model_by_alias=True,
    summary="Capture a snapshot if an important field changed",
)
def create_auto_snapshot(
    form_id: str, body: AutoSnapshotRequest, request: Request
) -> AutoSnapshotResponse:
    snapshot = _store(request, form_id).create_auto_snapshot(
        body.config, body.current_state, body.prev_state
    )
    return AutoSnapshotResponse(created=snapshot is not None, snapshot=snapshot)


@router.get("/forms/{form_id}/snapshots/{snapshot_id}", summary="Get one snapshot")
def get_snapshot(form_id: str, snapshot_id: str, request: Request) -> dict[str, Any]:
    return dump_snapshot(_get_or_404(_store(request, form_id), snapshot_id))


@router.post(
    "/forms/{form_id}/snapshots/{snapshot_id}/validate",
    response_model=SnapshotValidationResult,
    summary="Validate one snapshot against a field config",
)
def validate(
    form_id: str, snapshot_id: str, body: ValidateRequest, request: Request
) -> SnapshotValidationResult:
    snapshot = _get_or_404(_store(request, form_id), snapshot_id)
    return validate_snapshot(snapshot, body.config)


@router.delete(
    "/forms/{form_id}/snapshots/{snapshot_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete one snapshot",
)
def delete_snapshot(form_id: str, snapshot_id: str, request: Request) -> Response:
    if not _store(request, form_id).delete_snapshot(snapshot_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Snapshot {snapshot_id} not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/forms/{form_id}/snapshots",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear a form's history",
)
def clear_snapshots(form_id: str, request: Request) -> Response:
    _store(request, form_id).clear_snapshots()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/forms/{form_id}/report", summary="Render a snapshot report")
def report(
    form_id: str,
    body: ReportRequest,
    request: Request,
    format: ReportFormat = Query(default="text"),
) -> Response:
    """
    Build and render a report for the viewer/exporter front-end.

    The response media type follows the requested format so browsers can
    display (HTML) or download (Markdown, JSON) the result directly.
    """
    options = ReportOptions(
        include_metadata=body.include_metadata,
        include_timestamps=body.include_timestamps,
        format=format,
        filters=body.filters,
    )
    built = generate_report(_store(request, form_id).get_all_snapshots(), body.config, options)
    rendered = format_report(
        built,
        options.format,
        include_metadata=options.include_metadata,
        include_timestamps=options.include_timestamps,
    )
    return Response(content=rendered, media_type=MEDIA_TYPES[options.format])


@router.post(
    "/diff",
    response_model=SnapshotDiff,
    response_model_by_alias=True,
    summary="Compare two states",
)
def diff(body: DiffRequest) -> SnapshotDiff:
    return compare_snapshots(body.a, body.b)


__all__ = ["router"]
