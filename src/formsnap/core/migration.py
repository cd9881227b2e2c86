"""Schema migrations for snapshot states.

A `Migration` moves a state *to* its `version` (`up`) and back to the
previous schema (`down`). Registered migrations form one linear chain,
ordered by dotted numeric version (see `formsnap.core.versioning`).

Execution model
---------------
- `migrate_to_version` is a coroutine. Each step's `up`/`down` may be a plain
  function or return an awaitable; steps are awaited strictly one after the
  other, never concurrently.
- A failing step raises `SnapshotMigrationError` immediately. The remaining
  chain is abandoned and no partially migrated snapshot escapes; callers
  decide whether to retry the whole call.
- Every executed step yields a *new* snapshot with `version` set to the
  step's version and a `MigrationRecord` appended to `metadata.migrations`.

Self-check
----------
`validate_migrations` (strict mode) verifies ordering and that
``down(up({}))`` gives back ``{}`` for every migration, raising one
`MigrationValidationError` that lists every violation.

Usage
-----
    manager = MigrationManager().add_migration(
        Migration(version="2.0.0", description="Split name", up=split, down=join)
    )
    upgraded = await manager.migrate_to_latest(snapshot)
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from formsnap.core.contracts.snapshot import (
    FieldConfig,
    MigrationRecord,
    Snapshot,
    SnapshotMetadata,
)
from formsnap.core.diff import values_equal
from formsnap.core.errors import MigrationValidationError, SnapshotMigrationError
from formsnap.core.settings import get_logger
from formsnap.core.versioning import compare_versions, version_key

State = dict[str, Any]
StepFn = Callable[[State], State | Awaitable[State]]
Direction = Literal["up", "down"]
MigrationLogger = Callable[[str, Mapping[str, Any] | None], None]


@dataclass(frozen=True, slots=True)
class Migration:
    """One reversible schema step.

    Attributes
    ----------
    version : str
        Schema version produced by `up`.
    description : str
        Human-readable summary, copied into the migration audit trail.
    up : StepFn
        Old state -> new state (sync or async).
    down : StepFn
        New state -> old state (sync or async).
    """

    version: str
    description: str
    up: StepFn
    down: StepFn


def _now_ms() -> int:
    return int(time.time() * 1000)


async def _settle(value: State | Awaitable[State]) -> State:
    if inspect.isawaitable(value):
        return await value
    return value


def _settle_sync(value: State | Awaitable[State]) -> State:
    """Resolve an awaitable on a private loop (design-time checks only)."""
    if inspect.isawaitable(value):
        return asyncio.run(_settle(value))
    return value


class MigrationManager:
    """Ordered registry and executor of migrations.

    Parameters
    ----------
    strict:
        Enables `validate_migrations`; when ``False`` the self-check is a no-op.
    logger:
        Optional ``logger(message, data)`` callable. Defaults to the package
        logger at INFO level.
    clock:
        Millisecond clock used for audit records.
    """

    def __init__(
        self,
        *,
        strict: bool = True,
        logger: MigrationLogger | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.strict = strict
        self._log: MigrationLogger = logger or self._default_log
        self._clock = clock or _now_ms
        self._migrations: list[Migration] = []
        self._logger = get_logger(__name__)

    def _default_log(self, message: str, data: Mapping[str, Any] | None = None) -> None:
        if data:
            self._logger.info("%s %s", message, dict(data))
        else:
            self._logger.info("%s", message)

    # ------------------------------- Registry --------------------------------

    def add_migration(self, migration: Migration) -> MigrationManager:
        """Register `migration` and keep the chain sorted ascending."""
        self._migrations.append(migration)
        self._migrations.sort(key=lambda m: version_key(m.version))
        return self

    @property
    def migrations(self) -> tuple[Migration, ...]:
        return tuple(self._migrations)

    @property
    def latest_version(self) -> str | None:
        return self._migrations[-1].version if self._migrations else None

    def _select(self, current: str, target: str) -> tuple[Direction, list[Migration]]:
        if compare_versions(target, current) > 0:
            steps = [
                m
                for m in self._migrations
                if compare_versions(m.version, current) > 0
                and compare_versions(m.version, target) <= 0
            ]
            return "up", steps
        steps = [
            m
            for m in reversed(self._migrations)
            if compare_versions(m.version, current) <= 0
            and compare_versions(m.version, target) > 0
        ]
        return "down", steps

    # ------------------------------- Execution -------------------------------

    async def _execute(
        self,
        snapshot: Snapshot,
        migration: Migration,
        direction: Direction,
    ) -> Snapshot:
        fn = migration.up if direction == "up" else migration.down
        # nested edits made by a step must never reach the input snapshot
        new_state = await _settle(fn(copy.deepcopy(snapshot.state)))
        if not isinstance(new_state, Mapping):
            raise TypeError(f"migration returned {type(new_state).__name__}, expected a mapping")

        record = MigrationRecord(
            version=migration.version,
            direction=direction,
            timestamp=self._clock(),
            description=migration.description,
        )
        metadata = snapshot.metadata or SnapshotMetadata()
        metadata = metadata.model_copy(update={"migrations": [*metadata.migrations, record]})
        return snapshot.model_copy(
            update={"state": dict(new_state), "version": migration.version, "metadata": metadata}
        )

    async def migrate_to_version(self, snapshot: Snapshot, target_version: str) -> Snapshot:
        """Return a new snapshot whose state is at `target_version`.

        Each executed step stamps *its own* migration version, in both
        directions. A downgrade therefore ends on the version of the last
        ``down`` step run, not on `target_version`: going from ``3.0.0`` to
        ``1.0.0`` through steps 3.0.0 and 2.0.0 yields ``version == "2.0.0"``
        with a fully downgraded state. A later `migrate_to_latest` on that
        snapshot skips the 2.0.0 ``up``; re-stamp the version with
        ``model_copy`` before upgrading again if that matters.

        Raises
        ------
        SnapshotMigrationError
            If any selected step fails. Carries the failing version and the
            snapshot originally passed in.
        """
        current_version = snapshot.version
        self._log(f"Migrating from version {current_version} to {target_version}", None)

        if compare_versions(current_version, target_version) == 0:
            return snapshot

        direction, steps = self._select(current_version, target_version)
        migrated = snapshot
        for migration in steps:
            self._log(
                f"Executing {direction} migration to version {migration.version}",
                {"description": migration.description},
            )
            try:
                migrated = await self._execute(migrated, migration, direction)
            except Exception as exc:
                raise SnapshotMigrationError(
                    f"Migration {direction} to version {migration.version} failed: {exc}",
                    migration.version,
                    snapshot,
                    direction,
                ) from exc
        return migrated

    async def migrate_to_latest(self, snapshot: Snapshot) -> Snapshot:
        latest = self.latest_version
        if latest is None:
            return snapshot
        return await self.migrate_to_version(snapshot, latest)

    # ------------------------------- Self-check ------------------------------

    def validate_migrations(
        self,
        config: Mapping[str, FieldConfig | Mapping[str, Any]] | None = None,
    ) -> None:
        """Check ordering and reversibility of every registered migration.

        `config` is accepted for call-site symmetry with the validator; the
        reversibility probe always starts from an empty state.

        Raises
        ------
        MigrationValidationError
            Listing every violation found (nothing is raised per item).
        """
        if not self.strict:
            return

        problems: list[str] = []

        previous = "0.0.0"
        for migration in self._migrations:
            if compare_versions(migration.version, previous) <= 0:
                problems.append(f"Invalid version order: {previous} -> {migration.version}")
            previous = migration.version

        for migration in self._migrations:
            probe: State = {}
            try:
                up_state = _settle_sync(migration.up(dict(probe)))
                down_state = _settle_sync(migration.down(dict(up_state)))
            except Exception as exc:
                problems.append(f"Migration {migration.version} validation failed: {exc}")
                continue
            if not values_equal(probe, down_state):
                problems.append(f"Migration {migration.version} is not reversible")

        if problems:
            raise MigrationValidationError(problems)


__all__ = ["Migration", "MigrationManager", "StepFn"]
