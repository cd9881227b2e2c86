"""Table-driven checks for form configurations and migration chains.

These runners let a form layer ship declarative expectations next to its
field configuration and migrations:

- `SnapshotTestRunner`  : validate snapshots and compare the produced error
  messages with expected substrings.
- `MigrationTestRunner` : migrate an initial state between two versions on a
  fresh `MigrationManager` and compare the result canonically.

Runner failures are reported in the returned outcomes, never raised.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from formsnap.core.contracts.snapshot import FieldConfig, Snapshot
from formsnap.core.diff import values_equal
from formsnap.core.migration import Migration, MigrationManager
from formsnap.core.validation import validate_snapshot

ConfigLike = Mapping[str, FieldConfig | Mapping[str, Any]]


@dataclass(slots=True)
class SnapshotTestCase:
    """Expectation for `validate_snapshot` on one snapshot."""

    __test__ = False

    name: str
    snapshot: Snapshot | Mapping[str, Any]
    config: ConfigLike
    expected_errors: list[str] | None = None


@dataclass(slots=True)
class MigrationTestCase:
    """Expectation for migrating `initial_state` between two versions."""

    __test__ = False

    name: str
    from_version: str
    to_version: str
    initial_state: dict[str, Any]
    expected_state: dict[str, Any]
    config: ConfigLike = field(default_factory=dict)


@dataclass(slots=True)
class CaseOutcome:
    case: SnapshotTestCase | MigrationTestCase
    passed: bool
    errors: list[str] = field(default_factory=list)


def create_snapshot_test(
    name: str,
    snapshot: Snapshot | Mapping[str, Any],
    config: ConfigLike,
    expected_errors: list[str] | None = None,
) -> SnapshotTestCase:
    return SnapshotTestCase(name, snapshot, config, expected_errors)


def create_migration_test(
    name: str,
    from_version: str,
    to_version: str,
    initial_state: dict[str, Any],
    expected_state: dict[str, Any],
    config: ConfigLike | None = None,
) -> MigrationTestCase:
    return MigrationTestCase(
        name, from_version, to_version, initial_state, expected_state, dict(config or {})
    )


class SnapshotTestRunner:
    """Run validation expectations."""

    __test__ = False

    def run_tests(self, cases: Iterable[SnapshotTestCase]) -> list[CaseOutcome]:
        outcomes: list[CaseOutcome] = []
        for case in cases:
            result = validate_snapshot(case.snapshot, case.config)
            messages = [issue.message for issue in result.errors]
            if case.expected_errors is not None:
                passed = self._matches(messages, case.expected_errors)
            else:
                passed = not messages
            outcomes.append(CaseOutcome(case, passed, messages))
        return outcomes

    @staticmethod
    def _matches(actual: list[str], expected: list[str]) -> bool:
        """Same count, and every expected text is a substring of some message."""
        if len(actual) != len(expected):
            return False
        return all(any(exp in msg for msg in actual) for exp in expected)


class MigrationTestRunner:
    """Run migration expectations, each on a fresh manager."""

    __test__ = False

    async def run_tests(
        self,
        cases: Iterable[MigrationTestCase],
        migrations: Iterable[Migration],
    ) -> list[CaseOutcome]:
        chain = list(migrations)
        outcomes: list[CaseOutcome] = []
        for case in cases:
            manager = MigrationManager()
            for migration in chain:
                manager.add_migration(migration)

            initial = Snapshot(
                id="test",
                timestamp=int(time.time() * 1000),
                version=case.from_version,
                state=dict(case.initial_state),
            )
            try:
                migrated = await manager.migrate_to_version(initial, case.to_version)
            except Exception as exc:
                outcomes.append(CaseOutcome(case, False, [str(exc)]))
                continue

            if values_equal(migrated.state, case.expected_state):
                outcomes.append(CaseOutcome(case, True))
            else:
                outcomes.append(CaseOutcome(case, False, ["State mismatch after migration"]))
        return outcomes


__all__ = [
    "CaseOutcome",
    "MigrationTestCase",
    "MigrationTestRunner",
    "SnapshotTestCase",
    "SnapshotTestRunner",
    "create_migration_test",
    "create_snapshot_test",
]
