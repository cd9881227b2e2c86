"""Unit tests for the table-driven validation and migration runners."""

from __future__ import annotations

import asyncio
from typing import Any

from formsnap.core.contracts.snapshot import Snapshot
from formsnap.core.migration import Migration
from formsnap.testing import (
    MigrationTestRunner,
    SnapshotTestRunner,
    create_migration_test,
    create_snapshot_test,
)

CONFIG = {"name": {"type": "string", "required": True}, "age": {"type": "number"}}


def _split(state: dict[str, Any]) -> dict[str, Any]:
    if "name" not in state:
        return state
    first, _, last = str(state.pop("name")).partition(" ")
    return {**state, "firstName": first, "lastName": last}


def _join(state: dict[str, Any]) -> dict[str, Any]:
    if "firstName" not in state:
        return state
    return {"name": f"{state.pop('firstName')} {state.pop('lastName', '')}".strip(), **state}


SPLIT = Migration("2.0.0", "Split name", _split, _join)


def test_snapshot_runner_matches_expected_substrings() -> None:
    cases = [
        create_snapshot_test("valid", Snapshot(id="a", timestamp=0, state={"name": "x"}), CONFIG),
        create_snapshot_test(
            "missing name",
            {"state": {"age": "old"}},
            CONFIG,
            expected_errors=["Required field", 'Field "age" must be a number'],
        ),
        create_snapshot_test(
            "count mismatch",
            {"state": {}},
            CONFIG,
            expected_errors=["Required field", "extra"],
        ),
        create_snapshot_test("unexpected errors", {"state": {}}, CONFIG),
    ]

    outcomes = SnapshotTestRunner().run_tests(cases)

    assert [o.passed for o in outcomes] == [True, True, False, False]
    assert outcomes[0].errors == []
    assert outcomes[3].errors == ['Required field "name" is missing']
    assert outcomes[1].case.name == "missing name"


def test_migration_runner_reports_pass_mismatch_and_failure() -> None:
    def broken(state: dict[str, Any]) -> dict[str, Any]:
        raise RuntimeError("boom")

    cases = [
        create_migration_test(
            "split", "1.0.0", "2.0.0", {"name": "John Doe"}, {"firstName": "John", "lastName": "Doe"}
        ),
        create_migration_test("join", "2.0.0", "1.0.0", {"firstName": "A", "lastName": "B"}, {"name": "A B"}),
        create_migration_test("wrong", "1.0.0", "2.0.0", {"name": "John Doe"}, {"name": "John Doe"}),
        create_migration_test("broken", "1.0.0", "3.0.0", {"name": "John Doe"}, {}),
    ]
    chain = [SPLIT, Migration("3.0.0", "Broken", broken, lambda s: s)]

    outcomes = asyncio.run(MigrationTestRunner().run_tests(cases, chain))

    assert [o.passed for o in outcomes] == [True, True, False, False]
    assert outcomes[2].errors == ["State mismatch after migration"]
    assert "3.0.0" in outcomes[3].errors[0]


def test_migration_cases_do_not_share_state() -> None:
    case = create_migration_test("split", "1.0.0", "2.0.0", {"name": "A B"}, {"firstName": "A", "lastName": "B"})
    runner = MigrationTestRunner()

    first = asyncio.run(runner.run_tests([case], [SPLIT]))
    second = asyncio.run(runner.run_tests([case], [SPLIT]))

    assert first[0].passed and second[0].passed
    assert case.initial_state == {"name": "A B"}
