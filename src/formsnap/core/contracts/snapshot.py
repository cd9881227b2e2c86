"""Snapshot contracts: the persisted shape of a form's history.

This module defines the Pydantic v2 models shared by every component:

- `FieldChange`       : one field's `{from, to}` transition.
- `MigrationRecord`   : audit entry appended by each executed migration step.
- `SnapshotMetadata`  : known keys (`auto`, `changes`, `migrations`) plus an
  open extension bag for caller-defined keys.
- `Snapshot`          : `{id, timestamp, state, version, metadata}`.
- `FieldConfig`       : per-field options driving validation and importance.

Serialization
-------------
`FieldChange` and `DateRange` expose a Python-safe attribute (`from_`) and
serialize under the wire name `from`. Always dump with ``by_alias=True``;
`dump_snapshot` does this for the storage layer.

Versioning
----------
`version` is a dotted numeric schema version ("1.0.0"). Ordering between
versions is defined in :mod:`formsnap.core.versioning`, not lexically.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)

VERSION_PATTERN = r"^\d+(\.\d+)*$"


class FieldChange(BaseModel):
    """Transition of a single field between two captures."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_: Any = Field(default=None, alias="from")
    to: Any = None


StateChanges = dict[str, FieldChange]


class MigrationRecord(BaseModel):
    """Audit entry written into `metadata.migrations` by each step."""

    version: str
    direction: Literal["up", "down"]
    timestamp: int
    description: str = ""


class SnapshotMetadata(BaseModel):
    """Documented metadata keys plus arbitrary caller extensions.

    Unknown keys are kept in ``model_extra`` and round-trip through storage.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    auto: bool | None = None
    changes: StateChanges | None = None
    migrations: list[MigrationRecord] = Field(default_factory=list)

    @model_serializer(mode="wrap")
    def _omit_empty_known_keys(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        """Keep payloads minimal: unset known keys are not written out."""
        data: dict[str, Any] = handler(self)
        for key in ("auto", "changes"):
            if data.get(key) is None:
                data.pop(key, None)
        if not data.get("migrations"):
            data.pop("migrations", None)
        return data

    @property
    def extras(self) -> dict[str, Any]:
        """Caller-defined keys outside the documented set."""
        return dict(self.model_extra or {})


class Snapshot(BaseModel):
    """Immutable capture of a form's field values at one point in time.

    Attributes
    ----------
    id : str
        Opaque identifier, unique within a storage namespace.
    timestamp : int
        Capture time in milliseconds since the Unix epoch.
    state : dict[str, Any]
        Field name -> value mapping.
    version : str
        Dotted numeric schema version of `state`.
    metadata : SnapshotMetadata | None
        Optional documented + open metadata.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: int = Field(ge=0)
    state: dict[str, Any] = Field(default_factory=dict)
    version: str = Field(default="1.0.0", pattern=VERSION_PATTERN)
    metadata: SnapshotMetadata | None = None


class FieldConfig(BaseModel):
    """Per-field options supplied by the surrounding form layer."""

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    important: bool = False
    required: bool = False
    label: str | None = None


SnapshotFormConfig = dict[str, FieldConfig]


def coerce_config(config: Mapping[str, FieldConfig | Mapping[str, Any]]) -> SnapshotFormConfig:
    """Return `config` with every entry as a `FieldConfig` (plain dicts accepted)."""
    out: SnapshotFormConfig = {}
    for name, entry in config.items():
        out[name] = entry if isinstance(entry, FieldConfig) else FieldConfig.model_validate(entry)
    return out


def coerce_metadata(
    metadata: SnapshotMetadata | Mapping[str, Any] | None,
) -> SnapshotMetadata | None:
    """Accept metadata as a model or a plain mapping."""
    if metadata is None or isinstance(metadata, SnapshotMetadata):
        return metadata
    return SnapshotMetadata.model_validate(dict(metadata))


def dump_snapshot(snapshot: Snapshot) -> dict[str, Any]:
    """JSON-ready dict of `snapshot` using wire names (``from`` not ``from_``)."""
    return snapshot.model_dump(mode="json", by_alias=True)


__all__ = [
    "FieldChange",
    "FieldConfig",
    "MigrationRecord",
    "Snapshot",
    "SnapshotFormConfig",
    "SnapshotMetadata",
    "StateChanges",
    "VERSION_PATTERN",
    "coerce_config",
    "coerce_metadata",
    "dump_snapshot",
]
