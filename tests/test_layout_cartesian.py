"""Unit tests for bar, column, line, area and scatter layouts."""

from __future__ import annotations

import pytest

from core.charting.layouts import layout_cartesian
from core.charting.scene import CircleShape, PathShape, RectShape
from core.charting.schema import AxisConfig, ChartConfiguration, SeriesConfig

pytestmark = pytest.mark.unit


def test_column_bars_sit_on_the_zero_baseline(column_config, quarter_rows) -> None:
    """Column bars rise from zero and their heights follow the value scale."""

    layout = layout_cartesian(column_config, quarter_rows)
    bars = layout.shapes_with_role("bar")
    assert len(bars) == 8
    value_scale = layout.scales["value"]
    zero_y = value_scale(0.0)
    for bar in bars:
        assert isinstance(bar, RectShape)
        assert bar.y + bar.height == pytest.approx(zero_y)
    first = bars[0]
    assert first.height == pytest.approx(zero_y - value_scale(120.0))


def test_bar_chart_is_horizontal(quarter_rows) -> None:
    """BAR charts lay bars out along x with categories down the y axis."""

    config = ChartConfiguration(type="BAR", x_axis=AxisConfig(field="quarter"), series=(SeriesConfig(field="revenue"),))
    layout = layout_cartesian(config, quarter_rows)
    bars = layout.shapes_with_role("bar")
    value_scale = layout.scales["value"]
    assert all(bar.x == pytest.approx(value_scale(0.0)) for bar in bars)
    ys = [bar.y for bar in bars]
    assert ys == sorted(ys)
    assert layout.spec is not None
    assert layout.spec["options"]["indexAxis"] == "y"


def test_stacked_series_extents_chain(quarter_rows) -> None:
    """Stacked series start where the previous series ended."""

    config = ChartConfiguration(
        type="COLUMN",
        x_axis=AxisConfig(field="quarter"),
        series=(SeriesConfig(field="cost"), SeriesConfig(field="revenue")),
        stacked=True,
    )
    layout = layout_cartesian(config, quarter_rows)
    cost = layout.meta["extents"]["cost"]
    revenue = layout.meta["extents"]["revenue"]
    assert cost[0] == (0.0, 80.0)
    assert revenue[0] == (80.0, 200.0)
    assert layout.spec["options"]["scales"]["y"]["stacked"] is True


def test_negative_values_stack_below_zero() -> None:
    """Negative values stack downward separately from positive ones."""

    rows = [{"x": "a", "p": 5, "n": -3, "m": -2}]
    config = ChartConfiguration(
        type="COLUMN",
        x_axis=AxisConfig(field="x"),
        series=(SeriesConfig(field="p"), SeriesConfig(field="n"), SeriesConfig(field="m")),
        stacked=True,
    )
    layout = layout_cartesian(config, rows)
    assert layout.meta["extents"]["p"] == ((0.0, 5.0),)
    assert layout.meta["extents"]["n"] == ((0.0, -3.0),)
    assert layout.meta["extents"]["m"] == ((-3.0, -5.0),)


def test_rows_sharing_an_x_value_are_aggregated() -> None:
    """Series aggregation combines rows in the same category."""

    rows = [{"x": "a", "v": 2}, {"x": "a", "v": 4}, {"x": "b", "v": 1}]
    config = ChartConfiguration(
        type="LINE",
        x_axis=AxisConfig(field="x"),
        series=(SeriesConfig(field="v", aggregation="avg"),),
    )
    layout = layout_cartesian(config, rows)
    assert layout.meta["labels"] == ("a", "b")
    assert layout.meta["values"]["v"] == (3.0, 1.0)


def test_line_and_area_emit_paths_and_points(quarter_rows) -> None:
    """Lines draw one path and one point per category; areas add a filled path."""

    config = ChartConfiguration(
        type="AREA",
        x_axis=AxisConfig(field="quarter"),
        series=(SeriesConfig(field="revenue"),),
        smooth=True,
    )
    layout = layout_cartesian(config, quarter_rows)
    areas = layout.shapes_with_role("area")
    lines = layout.shapes_with_role("line")
    points = layout.shapes_with_role("point")
    assert len(areas) == 1 and isinstance(areas[0], PathShape)
    assert areas[0].opacity == pytest.approx(0.3)
    assert areas[0].commands[-1] == ("Z", ())
    assert len(lines) == 1
    assert len(points) == 4
    assert layout.spec["type"] == "line"


def test_right_axis_series_use_their_own_scale(quarter_rows) -> None:
    """Series bound to the right axis get a separate value scale."""

    config = ChartConfiguration(
        type="LINE",
        x_axis=AxisConfig(field="quarter"),
        y_axis_right=AxisConfig(min=0, max=1000),
        series=(SeriesConfig(field="revenue"), SeriesConfig(field="cost", y_axis_id="right")),
    )
    layout = layout_cartesian(config, quarter_rows)
    assert layout.scales["value_right"].domain == (0, 1000)
    datasets = layout.spec["data"]["datasets"]
    assert [dataset["yAxisID"] for dataset in datasets] == ["y", "right"]


def test_horizontal_bars_label_the_right_axis_along_the_top(quarter_rows) -> None:
    """A BAR chart's secondary value axis is drawn above the plot area."""

    config = ChartConfiguration(
        type="BAR",
        x_axis=AxisConfig(field="quarter"),
        y_axis_right=AxisConfig(min=0, max=1000),
        series=(SeriesConfig(field="revenue"), SeriesConfig(field="cost", y_axis_id="right")),
    )
    layout = layout_cartesian(config, quarter_rows)
    right_scale = layout.scales["value_right"]
    plot_top = min(bar.y for bar in layout.shapes_with_role("bar"))
    top_labels = [label for label in layout.shapes_with_role("axis-label") if label.y < plot_top]
    assert top_labels
    assert {label.x for label in top_labels} == {right_scale(tick) for tick in right_scale.ticks(5)}


def test_axis_overrides_fix_the_value_domain(quarter_rows) -> None:
    """Explicit axis min/max replace the computed domain."""

    config = ChartConfiguration(
        type="COLUMN",
        x_axis=AxisConfig(field="quarter"),
        y_axis=AxisConfig(min=0, max=500),
        series=(SeriesConfig(field="revenue"),),
    )
    layout = layout_cartesian(config, quarter_rows)
    assert layout.scales["value"].domain == (0, 500)


def test_chartjs_payload_lists_labels_and_datasets(column_config, quarter_rows) -> None:
    """The declarative payload mirrors the aggregated values."""

    layout = layout_cartesian(column_config, quarter_rows)
    spec = layout.spec
    assert spec["type"] == "bar"
    assert spec["data"]["labels"] == ["Q1", "Q2", "Q3", "Q4"]
    assert spec["data"]["datasets"][0]["data"] == [120.0, 150.0, 170.0, 210.0]


def test_scatter_uses_linear_x_for_numeric_values() -> None:
    """Numeric x values are placed on a linear scale."""

    rows = [{"x": 1, "y": 10}, {"x": 5, "y": 20}, {"x": 3, "y": "bad"}]
    config = ChartConfiguration(type="SCATTER", x_axis=AxisConfig(field="x"), series=(SeriesConfig(field="y"),))
    layout = layout_cartesian(config, rows)
    points = layout.shapes_with_role("point")
    assert len(points) == 2
    assert all(isinstance(point, CircleShape) for point in points)
    assert layout.meta["points"]["y"] == ((1.0, 10.0), (5.0, 20.0))
    assert points[0].cx < points[1].cx


def test_scatter_falls_back_to_bands_for_text_x() -> None:
    """Non-numeric x values are placed in category bands."""

    rows = [{"x": "a", "y": 1}, {"x": "b", "y": 2}]
    config = ChartConfiguration(type="SCATTER", x_axis=AxisConfig(field="x"), series=(SeriesConfig(field="y"),))
    layout = layout_cartesian(config, rows)
    x_scale = layout.scales["x"]
    points = layout.shapes_with_role("point")
    assert points[0].cx == pytest.approx(x_scale.center("a"))
    assert points[1].cx == pytest.approx(x_scale.center("b"))
