"""Result contracts for the differ and the validator.

Both components are pure functions returning these models; neither raises on
bad input. Validation problems are *data*, not exceptions.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .snapshot import StateChanges


class SnapshotDiff(BaseModel):
    """Key-level partition of two states.

    Every key of either state lands in exactly one bucket.
    """

    model_config = ConfigDict(frozen=True)

    added: dict[str, Any] = Field(default_factory=dict)
    removed: dict[str, Any] = Field(default_factory=dict)
    modified: StateChanges = Field(default_factory=dict)
    unchanged: list[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)


class ValidationCode(StrEnum):
    """Machine-readable validation failure codes."""

    INVALID_STATE = "INVALID_STATE"
    REQUIRED_FIELD = "REQUIRED_FIELD"
    INVALID_TYPE = "INVALID_TYPE"
    INVALID_METADATA = "INVALID_METADATA"


class ValidationIssue(BaseModel):
    """One structural problem found in a snapshot."""

    model_config = ConfigDict(frozen=True)

    code: ValidationCode
    message: str
    field: str | None = None


class SnapshotValidationResult(BaseModel):
    """Outcome of `validate_snapshot`; `is_valid` iff `errors` is empty."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: list[ValidationIssue] = Field(default_factory=list)

    def codes(self) -> list[str]:
        """Return the error codes in report order (handy for assertions)."""
        return [e.code.value for e in self.errors]


__all__ = ["SnapshotDiff", "SnapshotValidationResult", "ValidationCode", "ValidationIssue"]
