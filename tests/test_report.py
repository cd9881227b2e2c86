"""Unit tests for report generation (filtering, change detection, importance)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from formsnap.core.contracts.report import ReportFilters, ReportOptions
from formsnap.core.contracts.snapshot import FieldChange, Snapshot, coerce_config
from formsnap.reports.generator import classify_importance, generate_report, to_millis

CONFIG: dict[str, Any] = {
    "email": {"type": "string", "important": True},
    "a": {}, "b": {}, "c": {}, "d": {},
}

BASE_MS = 1_700_000_000_000


def _snap(n: int, state: dict[str, Any], version: str = "1.0.0") -> Snapshot:
    return Snapshot(id=f"s{n}", timestamp=BASE_MS + n * 60_000, version=version, state=state)


def test_importance_boundary() -> None:
    """Three plain changes stay low, four become medium, one important is high."""
    snaps = [
        _snap(0, {"a": 0, "b": 0, "c": 0, "d": 0, "email": "x"}),
        _snap(1, {"a": 1, "b": 1, "c": 1, "d": 0, "email": "x"}),
        _snap(2, {"a": 2, "b": 2, "c": 2, "d": 2, "email": "x"}),
        _snap(3, {"a": 2, "b": 2, "c": 2, "d": 2, "email": "y"}),
    ]
    report = generate_report(snaps, CONFIG)

    assert [p.importance for p in report.snapshots] == ["low", "low", "medium", "high"]
    assert report.snapshots[0].changes is None
    assert len(report.snapshots[1].changes or {}) == 3
    assert report.summary.total_changes == 3
    assert report.summary.important_changes == 1


def test_classify_importance_prefers_high() -> None:
    config = coerce_config(CONFIG)
    many = {k: FieldChange(from_=0, to=1) for k in ("a", "b", "c", "d", "email")}
    assert classify_importance(many, config) == "high"
    assert classify_importance({}, config) == "low"


def test_unordered_input_is_sorted_by_timestamp() -> None:
    later = _snap(5, {"email": "b"})
    earlier = _snap(1, {"email": "a"})
    report = generate_report([later, earlier], CONFIG)

    assert [p.snapshot.id for p in report.snapshots] == ["s1", "s5"]
    change = (report.snapshots[1].changes or {})["email"]
    assert (change.from_, change.to) == ("a", "b")
    assert report.summary.date_range.from_ < report.summary.date_range.to


def test_versions_are_unique_and_numerically_sorted() -> None:
    snaps = [
        _snap(0, {}, "1.10.0"),
        _snap(1, {}, "1.2.0"),
        _snap(2, {}, "1.2.0"),
        _snap(3, {}, "2.0.0"),
    ]
    assert generate_report(snaps, CONFIG).summary.versions == ["1.2.0", "1.10.0", "2.0.0"]


def test_date_filter_is_inclusive_and_changes_use_filtered_predecessor() -> None:
    snaps = [_snap(n, {"a": n}) for n in range(5)]
    start = datetime.fromtimestamp((BASE_MS + 60_000) / 1000, tz=UTC)
    end = datetime.fromtimestamp((BASE_MS + 3 * 60_000) / 1000, tz=UTC)
    options = ReportOptions(filters=ReportFilters(from_date=start, to_date=end))

    report = generate_report(snaps, CONFIG, options)

    assert [p.snapshot.id for p in report.snapshots] == ["s1", "s2", "s3"]
    assert report.snapshots[0].changes is None
    assert report.summary.total_snapshots == 3


def test_version_and_field_filters() -> None:
    snaps = [
        _snap(0, {"a": 0, "b": 0}, "1.0.0"),
        _snap(1, {"a": 1, "b": 0}, "1.1.0"),
        _snap(2, {"a": 1, "b": 1}, "1.0.0"),
    ]
    options = ReportOptions(filters=ReportFilters(versions=["1.0.0"], fields=["b"]))
    report = generate_report(snaps, CONFIG, options)

    assert [p.snapshot.id for p in report.snapshots] == ["s0", "s2"]
    assert set(report.snapshots[1].changes or {}) == {"b"}


def test_only_important_keeps_high_tier() -> None:
    snaps = [
        _snap(0, {"email": "a", "a": 0}),
        _snap(1, {"email": "a", "a": 1}),
        _snap(2, {"email": "b", "a": 1}),
    ]
    options = ReportOptions(filters=ReportFilters(only_important=True))
    report = generate_report(snaps, CONFIG, options)

    assert [p.snapshot.id for p in report.snapshots] == ["s2"]
    assert report.summary.total_snapshots == 1
    assert report.summary.important_changes == 1


def test_empty_history_degenerates() -> None:
    report = generate_report([], CONFIG)

    assert report.snapshots == []
    assert report.summary.total_snapshots == 0
    assert report.summary.versions == []
    assert report.summary.date_range.from_ == report.summary.date_range.to


def test_naive_datetimes_are_utc() -> None:
    naive = datetime(2024, 1, 1, 12, 0, 0)
    aware = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
    assert to_millis(naive) == to_millis(aware)
