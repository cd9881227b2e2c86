"""Unit tests for the snapshot differ and per-field change helpers."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from formsnap.core.contracts.snapshot import Snapshot, SnapshotMetadata
from formsnap.core.diff import (
    canonical_json,
    changed_fields,
    compare_snapshots,
    create_snapshot_summary,
    field_changed,
    find_snapshot_differences,
    values_equal,
)


def test_compare_basic_scenario() -> None:
    diff = compare_snapshots({"a": 1, "b": 2}, {"a": 1, "c": 3})

    assert diff.added == {"c": 3}
    assert diff.removed == {"b": 2}
    assert diff.modified == {}
    assert diff.unchanged == ["a"]
    assert diff.has_changes


def test_modified_records_from_and_to() -> None:
    diff = compare_snapshots({"tags": ["x"]}, {"tags": ["x", "y"]})
    change = diff.modified["tags"]
    assert change.from_ == ["x"] and change.to == ["x", "y"]
    assert change.model_dump(by_alias=True) == {"from": ["x"], "to": ["x", "y"]}


def test_nested_key_order_is_not_a_change() -> None:
    a = {"address": {"city": "Oslo", "zip": "0150"}}
    b = {"address": {"zip": "0150", "city": "Oslo"}}
    diff = compare_snapshots(a, b)
    assert diff.unchanged == ["address"]
    assert not diff.has_changes
    assert canonical_json(a) == canonical_json(b)


def test_strict_equality_distinguishes_types() -> None:
    assert not values_equal(1, True)
    assert not values_equal(1, "1")
    assert values_equal([1, {"a": None}], [1, {"a": None}])


@pytest.mark.parametrize(  # type: ignore[misc]
    ("a", "b"),
    [
        ({}, {}),
        ({"a": 1}, {}),
        ({}, {"a": 1}),
        ({"a": 1, "b": [1, 2], "c": {"d": 1}}, {"a": 2, "b": [1, 2], "e": None}),
        ({"x": None}, {"x": 0}),
    ],
)
def test_every_key_lands_in_exactly_one_bucket(a: dict[str, Any], b: dict[str, Any]) -> None:
    diff = compare_snapshots(a, b)
    buckets = [set(diff.added), set(diff.removed), set(diff.modified), set(diff.unchanged)]

    assert set().union(*buckets) == set(a) | set(b)
    assert sum(len(bucket) for bucket in buckets) == len(set(a) | set(b))


def test_inputs_are_not_mutated() -> None:
    a = {"a": {"nested": [1, 2]}, "b": 1}
    b = {"a": {"nested": [1, 3]}, "c": 2}
    a_copy, b_copy = copy.deepcopy(a), copy.deepcopy(b)

    compare_snapshots(a, b)

    assert a == a_copy and b == b_copy


def test_accepts_snapshot_models() -> None:
    old = Snapshot(id="1", timestamp=1, state={"email": "a@x.io"})
    new = Snapshot(id="2", timestamp=2, state={"email": "b@x.io"})
    assert set(compare_snapshots(old, new).modified) == {"email"}


def test_changed_fields_respects_restriction_and_removals() -> None:
    prev = {"a": 1, "b": 2, "gone": True}
    curr = {"a": 1, "b": 3, "new": "x"}

    assert set(changed_fields(prev, curr)) == {"b", "new", "gone"}
    assert set(changed_fields(prev, curr, fields=["b"])) == {"b"}
    assert changed_fields(prev, curr)["gone"].to is None


@pytest.mark.parametrize(  # type: ignore[misc]
    ("before", "after"), [(1, True), (0, False), (1, 1.0)]
)
def test_changed_fields_distinguishes_equal_values_of_other_types(before: Any, after: Any) -> None:
    assert field_changed(before, after)
    assert set(changed_fields({"a": before}, {"a": after})) == {"a"}
    assert changed_fields({"a": before}, {"a": before}) == {}


def test_field_history_emits_only_value_changes() -> None:
    snaps = [
        Snapshot(id="3", timestamp=30, state={"email": "b"}),
        Snapshot(id="1", timestamp=10, state={"email": "a"}),
        Snapshot(id="2", timestamp=20, state={"email": "a"}),
        Snapshot(id="4", timestamp=40, state={}),
    ]
    history = find_snapshot_differences(snaps, "email")
    assert history == [
        {"timestamp": 10, "value": "a"},
        {"timestamp": 30, "value": "b"},
        {"timestamp": 40, "value": None},
    ]


def test_snapshot_summary_marks_important_fields() -> None:
    snap = Snapshot(
        id="abc",
        timestamp=0,
        version="2.0.0",
        state={"email": "a@x.io", "age": 3},
        metadata=SnapshotMetadata(auto=True),
    )
    text = create_snapshot_summary(snap, {"email": {"important": True}})

    assert "Snapshot ID: abc" in text
    assert "Version: 2.0.0" in text
    assert '  email (Important): "a@x.io"' in text
    assert "  age: 3" in text
    assert "  auto: true" in text
