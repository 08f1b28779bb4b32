"""Unit tests for box-plot quantile statistics."""

from __future__ import annotations

import random

import pytest

from analysis.quantiles import box_stats, quartiles

pytestmark = pytest.mark.unit


def test_quartiles_interpolate_between_ranks() -> None:
    """Quartiles fall between ranks and interpolate linearly."""

    q1, median, q3 = quartiles([1.0, 2.0, 3.0, 4.0])
    assert q1 == pytest.approx(1.75)
    assert median == pytest.approx(2.5)
    assert q3 == pytest.approx(3.25)


def test_quartiles_of_single_value_and_empty_input() -> None:
    """A single value is its own quartiles; empty input raises ValueError."""

    assert quartiles([7.0]) == (7.0, 7.0, 7.0)
    with pytest.raises(ValueError):
        quartiles([])


def test_box_stats_of_single_value_has_zero_spread() -> None:
    """One observation collapses the box and fences onto that value."""

    stats = box_stats([5])
    assert stats is not None
    assert (stats.q1, stats.median, stats.q3, stats.iqr) == (5.0, 5.0, 5.0, 0.0)
    assert stats.outliers == ()


def test_box_stats_flags_single_outlier() -> None:
    """1, 2, 3, 4, 100 yields Q1=2, median=3, Q3=4 and 100 as the sole outlier."""

    stats = box_stats([1, 2, 3, 4, 100])
    assert stats is not None
    assert (stats.q1, stats.median, stats.q3) == (2.0, 3.0, 4.0)
    assert stats.iqr == 2.0
    assert stats.lower_fence == -1.0
    assert stats.upper_fence == 7.0
    assert stats.outliers == (100.0,)
    assert (stats.whisker_low, stats.whisker_high) == (1.0, 4.0)
    assert stats.mean == 22.0


def test_box_stats_ignores_non_numeric_values() -> None:
    """Unreadable entries are skipped; a group with none returns None."""

    assert box_stats(["a", None]) is None
    stats = box_stats([5, "x", 5])
    assert stats is not None
    assert stats.count == 2
    assert stats.outliers == ()


def test_box_stats_ordering_holds_for_random_inputs() -> None:
    """Q1 <= median <= Q3 and every outlier lies strictly outside the fences."""

    rng = random.Random(1234)
    for _ in range(200):
        values = [rng.uniform(-50, 50) for _ in range(rng.randint(1, 40))]
        if rng.random() < 0.5:
            values.append(rng.choice([-1000.0, 1000.0]))
        stats = box_stats(values)
        assert stats is not None
        assert stats.q1 <= stats.median <= stats.q3
        assert stats.whisker_low >= stats.lower_fence
        assert stats.whisker_high <= stats.upper_fence
        for outlier in stats.outliers:
            assert outlier < stats.lower_fence or outlier > stats.upper_fence
