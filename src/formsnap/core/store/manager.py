"""Namespaced, size-bounded snapshot history for one form.

Milestone
---------
Snapshot Store

`SnapshotStore` keeps the ordered list of `Snapshot`s for a single form
identity under the storage key ``<namespace>_<form_id>``. Every operation
reads the persisted list, works on it, and (for mutations) writes it back.

Responsibilities
----------------
- **Create**: assign a fresh id and a non-decreasing millisecond timestamp,
  append, evict the oldest entry on overflow, persist.
- **Read**: fetch one snapshot, the whole history, or just a state to restore.
- **Delete / Clear**: drop one entry or the whole namespace.
- **Auto snapshots**: capture only when an ``important`` field changed.

Failure policy
--------------
Storage problems are recovered locally. A payload that cannot be read,
decoded or parsed is logged and treated as an empty history; a failed write
is logged and the operation completes without persisting. Callers of read
paths never see a storage exception.

Persisted layout
----------------
A JSON array of snapshot objects (wire names, e.g. ``"from"``), optionally
wrapped by the reversible encoding in `codec.py`.
"""

from __future__ import annotations

import json
import time
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from formsnap.core.contracts.snapshot import (
    FieldConfig,
    Snapshot,
    SnapshotMetadata,
    coerce_metadata,
    dump_snapshot,
)
from formsnap.core.diff import has_important_changes, shallow_changes
from formsnap.core.result import Result, err, ok
from formsnap.core.settings import get_logger, load_settings
from formsnap.core.store import codec
from formsnap.core.store.backends import KeyValueStorage, MemoryStorage
from formsnap.core.store.notify import ChangeNotifier

logger = get_logger(__name__)

_SNAPSHOT_LIST = TypeAdapter(list[Snapshot])


def _now_ms() -> int:
    return int(time.time() * 1000)


class SnapshotStore:
    """Versioned snapshot history of one form.

    Parameters
    ----------
    form_id:
        Identity of the form; combined with `namespace` into the storage key.
    storage:
        Key-value provider. Defaults to a private `MemoryStorage`.
    max_snapshots, auto_cleanup, compression_enabled, namespace, version:
        Override the corresponding `Settings` defaults. `version` is stamped
        on every snapshot this store creates.
    notifier:
        Optional `ChangeNotifier`; receives the storage key after each write.
    clock:
        Millisecond clock, injectable for tests.
    """

    def __init__(
        self,
        form_id: str,
        *,
        storage: KeyValueStorage | None = None,
        max_snapshots: int | None = None,
        auto_cleanup: bool | None = None,
        compression_enabled: bool | None = None,
        namespace: str | None = None,
        version: str | None = None,
        notifier: ChangeNotifier | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        cfg = load_settings()
        self.form_id = form_id
        self.storage: KeyValueStorage = storage if storage is not None else MemoryStorage()
        self.max_snapshots = max_snapshots if max_snapshots is not None else cfg.max_snapshots
        self.auto_cleanup = auto_cleanup if auto_cleanup is not None else cfg.auto_cleanup
        self.compression_enabled = (
            compression_enabled if compression_enabled is not None else cfg.compression_enabled
        )
        self.namespace = namespace or cfg.namespace
        self.version = version or cfg.schema_version
        self.notifier = notifier
        self._clock = clock or _now_ms

        if self.max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")

    @property
    def key(self) -> str:
        """Storage key of this form's history."""
        return f"{self.namespace}_{self.form_id}"

    # ------------------------------- Persistence -----------------------------

    def _decode(self, raw: str) -> Result[list[Snapshot], str]:
        text: Result[str, str] = codec.decode(raw) if self.compression_enabled else ok(raw)
        return text.flat_map(self._parse)

    @staticmethod
    def _parse(text: str) -> Result[list[Snapshot], str]:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            return err(f"payload is not valid JSON: {exc}")
        if not isinstance(payload, list):
            return err(f"expected a JSON array, got {type(payload).__name__}")
        try:
            return ok(_SNAPSHOT_LIST.validate_python(payload))
        except ValidationError as exc:
            return err(f"payload does not match the snapshot schema: {exc.error_count()} error(s)")

    def _load(self) -> list[Snapshot]:
        try:
            raw = self.storage.get(self.key)
        except Exception:
            logger.exception("Error reading snapshots for %s", self.key)
            return []
        if not raw:
            return []

        decoded = self._decode(raw)
        if decoded.is_err():
            logger.error("Error loading snapshots for %s: %s", self.key, decoded.unwrap_err())
        return decoded.get_or([])

    def _save(self, snapshots: list[Snapshot]) -> bool:
        try:
            text = json.dumps([dump_snapshot(s) for s in snapshots], ensure_ascii=False)
        except (PydanticSerializationError, TypeError, ValueError):
            logger.exception("Error serializing snapshots for %s", self.key)
            return False
        data = codec.encode(text) if self.compression_enabled else text
        try:
            self.storage.set(self.key, data)
        except Exception:
            logger.exception("Error saving snapshots for %s", self.key)
            return False
        if self.notifier is not None:
            self.notifier.publish(self.key, "update")
        return True

    # ------------------------------- Public API ------------------------------

    def create_snapshot(
        self,
        state: Mapping[str, Any],
        metadata: SnapshotMetadata | Mapping[str, Any] | None = None,
    ) -> Snapshot:
        """Capture `state`, append it and enforce the retention limit.

        Returns
        -------
        Snapshot
            The new snapshot. It is returned even when persisting failed
            (the failure is logged).
        """
        snapshots = self._load()
        existing_ids = {s.id for s in snapshots}

        snap_id = str(uuid.uuid4())
        while snap_id in existing_ids:
            snap_id = str(uuid.uuid4())

        timestamp = self._clock()
        if snapshots:
            timestamp = max(timestamp, snapshots[-1].timestamp)

        snapshot = Snapshot(
            id=snap_id,
            timestamp=timestamp,
            state=dict(state),
            version=self.version,
            metadata=coerce_metadata(metadata),
        )
        snapshots.append(snapshot)

        if self.auto_cleanup and len(snapshots) > self.max_snapshots:
            evicted = snapshots.pop(0)
            logger.debug("Evicted oldest snapshot %s from %s", evicted.id, self.key)

        self._save(snapshots)
        return snapshot

    def get_snapshot(self, snapshot_id: str) -> Snapshot | None:
        return next((s for s in self._load() if s.id == snapshot_id), None)

    def get_all_snapshots(self) -> list[Snapshot]:
        """Return the history in persisted (insertion) order."""
        return self._load()

    def restore_snapshot(self, snapshot_id: str) -> dict[str, Any] | None:
        """Return a copy of the stored state, or ``None`` for an unknown id."""
        snapshot = self.get_snapshot(snapshot_id)
        return dict(snapshot.state) if snapshot is not None else None

    def delete_snapshot(self, snapshot_id: str) -> bool:
        snapshots = self._load()
        remaining = [s for s in snapshots if s.id != snapshot_id]
        if len(remaining) == len(snapshots):
            return False
        self._save(remaining)
        return True

    def clear_snapshots(self) -> None:
        try:
            self.storage.remove(self.key)
        except Exception:
            logger.exception("Error clearing snapshots for %s", self.key)
            return
        if self.notifier is not None:
            self.notifier.publish(self.key, "clear")

    def create_auto_snapshot(
        self,
        config: Mapping[str, FieldConfig | Mapping[str, Any]],
        current_state: Mapping[str, Any],
        prev_state: Mapping[str, Any],
    ) -> Snapshot | None:
        """Snapshot `current_state` only if an ``important`` field changed.

        The metadata records ``auto=True`` and the per-field `changes` of
        every configured field that differs from `prev_state`.
        """
        if not has_important_changes(config, current_state, prev_state):
            return None

        changes = shallow_changes(config, current_state, prev_state)
        return self.create_snapshot(
            current_state,
            SnapshotMetadata(auto=True, changes=changes),
        )

    def __len__(self) -> int:
        return len(self._load())


__all__ = ["SnapshotStore"]
