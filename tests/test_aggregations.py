"""Unit tests for row grouping and aggregation helpers."""

from __future__ import annotations

from datetime import date

import pytest

from analysis.aggregations import aggregate_values, group_key, group_rows, running_totals, sum_by_key

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("aggregation", "expected"),
    [("sum", 9.0), ("avg", 3.0), ("min", 1.0), ("max", 5.0), ("count", 4.0)],
)
def test_aggregate_values_supports_every_aggregation(aggregation: str, expected: float) -> None:
    """Non-numeric values are ignored except by `count`, which counts distinct values."""

    assert aggregate_values([1, 3, 5, "n/a"], aggregation=aggregation) == expected


def test_aggregate_values_returns_zero_without_numbers() -> None:
    """Groups without usable values aggregate to zero."""

    assert aggregate_values(["x", None]) == 0.0
    assert aggregate_values([], aggregation="avg") == 0.0


def test_group_key_applies_date_hierarchy() -> None:
    """Date-like values are truncated to the requested level."""

    assert group_key("2026-03-14", date_hierarchy="year") == "2026"
    assert group_key("2026-03-14", date_hierarchy="month") == "2026-03"
    assert group_key(date(2026, 3, 14), date_hierarchy="day") == "2026-03-14"
    assert group_key("Q1", date_hierarchy="month") == "Q1"


def test_group_key_normalizes_scalars() -> None:
    """Integral floats drop their decimal part; None becomes an empty key."""

    assert group_key(3.0) == "3"
    assert group_key(3.5) == "3.5"
    assert group_key(None) == ""


def test_group_rows_preserves_first_seen_order() -> None:
    """Groups appear in the order their first row appears."""

    rows = [{"k": "b", "v": 1}, {"k": "a", "v": 2}, {"k": "b", "v": 3}]
    groups = group_rows(rows, field="k")
    assert list(groups) == ["b", "a"]
    assert [row["v"] for row in groups["b"]] == [1, 3]


def test_sum_by_key_keeps_keys_with_unreadable_values() -> None:
    """A key whose values are all unreadable still appears with a zero total."""

    rows = [{"k": "a", "v": 2}, {"k": "b", "v": "?"}, {"k": "a", "v": "3"}]
    assert sum_by_key(rows, key_field="k", value_field="v") == {"a": 5.0, "b": 0.0}


def test_running_totals_chain_consecutive_partial_sums() -> None:
    """Each step starts where the previous one ended."""

    pairs = running_totals([100, -30, 10])
    assert pairs == [(0, 100), (100, 70), (70, 80)]
    for (_before, after), (next_before, _next_after) in zip(pairs, pairs[1:]):
        assert after == next_before
