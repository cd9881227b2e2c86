"""Exception types raised by the snapshot engine.

Only migration execution and the migration self-check raise; storage and
validation failures are reported as values (see `formsnap.core.result`).
"""

from __future__ import annotations

from typing import Literal

from formsnap.core.contracts.snapshot import Snapshot


class FormSnapError(Exception):
    """Base class for all formsnap exceptions."""


class SnapshotMigrationError(FormSnapError):
    """A migration step raised while migrating `snapshot`.

    Attributes
    ----------
    version : str
        Version of the migration whose step failed.
    snapshot : Snapshot
        The snapshot handed to `migrate_to_version` (never a partial result).
    direction : "up" | "down"
        Which function of the migration failed.
    """

    def __init__(
        self,
        message: str,
        version: str,
        snapshot: Snapshot,
        direction: Literal["up", "down"] = "up",
    ) -> None:
        super().__init__(message)
        self.version = version
        self.snapshot = snapshot
        self.direction = direction


class MigrationValidationError(FormSnapError):
    """Aggregate of every continuity/reversibility violation found."""

    def __init__(self, problems: list[str]) -> None:
        super().__init__("Migration validation failed:\n" + "\n".join(problems))
        self.problems = list(problems)


__all__ = ["FormSnapError", "MigrationValidationError", "SnapshotMigrationError"]
