"""Structural comparison of form states.

Two notions of "changed" live here:

- **Canonical equality** (`values_equal`): two values are equal iff their
  key-sorted JSON serializations are identical. Nested key order never causes
  a spurious difference. Used by `compare_snapshots` and the field history.
- **Per-field changes** (`changed_fields`, `shallow_changes`): a top-level
  field is compared with `field_changed` (type first, then ``!=``) and
  reported as a `FieldChange`. Used by the auto-snapshot trigger and by
  report generation.

All functions are pure and never mutate their inputs.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from formsnap.core.contracts.analysis import SnapshotDiff
from formsnap.core.contracts.snapshot import (
    FieldChange,
    FieldConfig,
    Snapshot,
    StateChanges,
    coerce_config,
)

StateLike = Snapshot | Mapping[str, Any]


def canonical_json(value: Any) -> str:
    """Serialize `value` with sorted keys and no whitespace.

    Non-JSON values fall back to ``str()`` so the comparison never raises.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def values_equal(a: Any, b: Any) -> bool:
    return canonical_json(a) == canonical_json(b)


def field_changed(a: Any, b: Any) -> bool:
    """True when `a` and `b` differ in type or value.

    ``1``, ``1.0`` and ``True`` compare equal with ``==`` but are distinct
    form values.
    """
    return type(a) is not type(b) or a != b


def _state_of(value: StateLike) -> Mapping[str, Any]:
    return value.state if isinstance(value, Snapshot) else value


def compare_snapshots(a: StateLike, b: StateLike) -> SnapshotDiff:
    """Partition the keys of two states into added/removed/modified/unchanged.

    Parameters
    ----------
    a, b:
        The *older* and *newer* state, either as `Snapshot` models or plain
        mappings.

    Returns
    -------
    SnapshotDiff
        ``added`` holds keys only in `b`, ``removed`` keys only in `a`,
        ``modified`` keys in both whose values differ canonically, and
        ``unchanged`` the remaining shared keys (in the order of `a`).
    """
    left, right = _state_of(a), _state_of(b)

    added = {k: v for k, v in right.items() if k not in left}
    removed: dict[str, Any] = {}
    modified: StateChanges = {}
    unchanged: list[str] = []

    for key, old in left.items():
        if key not in right:
            removed[key] = old
        elif values_equal(old, right[key]):
            unchanged.append(key)
        else:
            modified[key] = FieldChange(from_=old, to=right[key])

    return SnapshotDiff(added=added, removed=removed, modified=modified, unchanged=unchanged)


def changed_fields(
    prev: Mapping[str, Any],
    curr: Mapping[str, Any],
    fields: Iterable[str] | None = None,
) -> StateChanges:
    """Return per-field changes from `prev` to `curr`.

    Candidate fields are those of `curr` followed by fields only in `prev`,
    restricted to `fields` when given. A field missing on one side compares
    as ``None``.
    """
    allowed = set(fields) if fields is not None else None
    candidates = list(curr) + [k for k in prev if k not in curr]

    changes: StateChanges = {}
    for key in candidates:
        if allowed is not None and key not in allowed:
            continue
        before, after = prev.get(key), curr.get(key)
        if field_changed(before, after):
            changes[key] = FieldChange(from_=before, to=after)
    return changes


def shallow_changes(
    config: Mapping[str, FieldConfig | Mapping[str, Any]],
    current: Mapping[str, Any],
    prev: Mapping[str, Any],
) -> StateChanges:
    """Per-field changes for the fields declared in `config` only."""
    return changed_fields(prev, current, fields=list(config)) if config else {}


def has_important_changes(
    config: Mapping[str, FieldConfig | Mapping[str, Any]],
    current: Mapping[str, Any],
    prev: Mapping[str, Any],
) -> bool:
    """True when a field flagged ``important`` differs between the two states."""
    for name, field_config in coerce_config(config).items():
        if field_config.important and field_changed(current.get(name), prev.get(name)):
            return True
    return False


def find_snapshot_differences(snapshots: Iterable[Snapshot], field: str) -> list[dict[str, Any]]:
    """Chronological value history of one field.

    Emits ``{"timestamp", "value"}`` for the first snapshot and then each time
    the value differs canonically from the last emitted one.
    """
    history: list[dict[str, Any]] = []
    last: Any = None
    seen = False
    for snap in sorted(snapshots, key=lambda s: s.timestamp):
        value = snap.state.get(field)
        if not seen or not values_equal(last, value):
            history.append({"timestamp": snap.timestamp, "value": value})
            last, seen = value, True
    return history


def create_snapshot_summary(
    snapshot: Snapshot,
    config: Mapping[str, FieldConfig | Mapping[str, Any]],
) -> str:
    """Plain-text overview of one snapshot, flagging important fields."""
    field_configs = coerce_config(config)
    captured = datetime.fromtimestamp(snapshot.timestamp / 1000, tz=UTC)
    lines = [
        f"Snapshot ID: {snapshot.id}",
        f"Timestamp: {captured:%Y-%m-%d %H:%M:%S} UTC",
        f"Version: {snapshot.version}",
        "",
        "Fields:",
    ]
    for name, value in snapshot.state.items():
        field_config = field_configs.get(name)
        flag = " (Important)" if field_config and field_config.important else ""
        lines.append(f"  {name}{flag}: {json.dumps(value, default=str)}")

    if snapshot.metadata is not None:
        dumped = snapshot.metadata.model_dump(mode="json", by_alias=True)
        if dumped:
            lines.extend(["", "Metadata:"])
            for key, value in dumped.items():
                lines.append(f"  {key}: {json.dumps(value, default=str)}")

    return "\n".join(lines)


__all__ = [
    "canonical_json",
    "changed_fields",
    "compare_snapshots",
    "create_snapshot_summary",
    "field_changed",
    "find_snapshot_differences",
    "has_important_changes",
    "shallow_changes",
    "values_equal",
]
