"""Unit tests for hierarchical roll-ups and squarified tiling."""

from __future__ import annotations

import random

import pytest

from analysis.hierarchy import rollup
from analysis.tiling import squarify

pytestmark = pytest.mark.unit


def test_rollup_sorts_children_and_sums_positive_values() -> None:
    """Children are sorted by descending total; the root sums positive children only."""

    rows = [
        {"cat": "a", "v": 1},
        {"cat": "b", "v": 5},
        {"cat": "a", "v": 2},
        {"cat": "c", "v": -4},
    ]
    root = rollup(rows, category_field="cat", value_field="v")
    assert [child.name for child in root.children] == ["b", "a", "c"]
    assert [child.value for child in root.children] == [5.0, 3.0, -4.0]
    assert root.value == 8.0
    assert [child.name for child in root.positive_children()] == ["b", "a"]
    assert [leaf.name for leaf in root.leaves()] == ["b", "a", "c"]


def test_squarify_areas_are_proportional_and_sum_to_container() -> None:
    """Tile areas are proportional to weights and fill the container."""

    weights = [6, 6, 4, 3, 2, 2, 1]
    rects = squarify(weights, 0, 0, 600, 400)
    total_area = sum(w * h for _x, _y, w, h in rects)
    assert total_area == pytest.approx(600 * 400)
    for weight, (_x, _y, w, h) in zip(weights, rects):
        assert w * h == pytest.approx(600 * 400 * weight / sum(weights))


def test_squarify_tiles_stay_inside_container() -> None:
    """Every tile lies within the container bounds for random weights."""

    rng = random.Random(7)
    for _ in range(100):
        weights = sorted((rng.uniform(0.1, 50) for _ in range(rng.randint(1, 25))), reverse=True)
        x0, y0, width, height = 10.0, 20.0, rng.uniform(50, 800), rng.uniform(50, 800)
        rects = squarify(weights, x0, y0, width, height)
        assert len(rects) == len(weights)
        for x, y, w, h in rects:
            assert x >= x0 - 1e-6 and y >= y0 - 1e-6
            assert x + w <= x0 + width + 1e-6
            assert y + h <= y0 + height + 1e-6
        assert sum(w * h for _x, _y, w, h in rects) == pytest.approx(width * height)


def test_squarify_rejects_non_positive_weights() -> None:
    """Zero or negative weights cannot occupy area."""

    with pytest.raises(ValueError):
        squarify([3, 0], 0, 0, 100, 100)


def test_squarify_returns_empty_for_no_weights() -> None:
    """No weights means no tiles."""

    assert squarify([], 0, 0, 100, 100) == []
