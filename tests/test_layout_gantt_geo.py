"""Unit tests for gantt and geo layouts."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.charting.layouts import layout_gantt, layout_geo
from core.charting.layouts.geo import MAX_POINT_RADIUS, MIN_POINT_RADIUS, choropleth_regions, geo_points
from core.charting.scene import LinearGradient
from core.charting.schema import AxisConfig, ChartConfiguration

pytestmark = pytest.mark.unit

UTC = timezone.utc

TASKS = [
    {"task": "Design", "start": "2026-03-01", "end": "2026-03-05", "progress": 100},
    {"task": "Build", "startDate": "2026-03-09", "endDate": "2026-03-05", "progress": 40, "dependencies": "Design"},
    {"task": "Test", "start": "2026-03-10", "duration": 2},
    {"task": "Ship"},
]


def _gantt_config(**overrides: object) -> ChartConfiguration:
    return ChartConfiguration(type="GANTT", x_axis=AxisConfig(field="task"), **overrides)


def test_gantt_resolves_intervals_in_rule_order(fixed_now) -> None:
    """Each row uses the first interval rule that applies."""

    tasks = layout_gantt(_gantt_config(), TASKS, now=fixed_now).meta["intervals"]
    assert [task.source for task in tasks] == ["start_end", "start_date_end_date", "start_duration", "fallback"]
    design, build, test, ship = tasks
    assert (design.start, design.end) == (datetime(2026, 3, 1, tzinfo=UTC), datetime(2026, 3, 5, tzinfo=UTC))
    assert (build.start, build.end) == (datetime(2026, 3, 5, tzinfo=UTC), datetime(2026, 3, 9, tzinfo=UTC))
    assert test.end - test.start == timedelta(days=2)
    assert ship.start == fixed_now + timedelta(days=21)
    assert ship.end - ship.start == timedelta(days=5)


@pytest.mark.parametrize(
    "row",
    [
        {"task": "Forever", "start": "2024-01-01", "duration": 1e10},
        {"task": "Late", "start": "9999-12-30", "duration": 5},
    ],
)
def test_gantt_out_of_range_durations_fall_back(fixed_now, row) -> None:
    """A duration that leaves the supported date range uses the index fallback."""

    tasks = layout_gantt(_gantt_config(), [row, {"task": "Next"}], now=fixed_now).meta["intervals"]
    assert [task.source for task in tasks] == ["fallback", "fallback"]
    assert tasks[0].start == fixed_now


def test_gantt_is_deterministic_for_a_fixed_now(fixed_now) -> None:
    """The same rows and `now` always give the same intervals."""

    first = layout_gantt(_gantt_config(), TASKS, now=fixed_now)
    second = layout_gantt(_gantt_config(), TASKS, now=fixed_now)
    assert first.meta["intervals"] == second.meta["intervals"]
    assert first.shapes == second.shapes


def test_gantt_progress_today_and_dependencies(fixed_now) -> None:
    """Partial progress is shaded and dependencies draw when enabled."""

    layout = layout_gantt(_gantt_config(show_dependencies=True), TASKS, now=fixed_now)
    assert len(layout.shapes_with_role("task")) == 4
    assert len(layout.shapes_with_role("progress")) == 1
    assert len(layout.shapes_with_role("dependency")) == 1
    assert len(layout.shapes_with_role("today")) == 1
    plain = layout_gantt(_gantt_config(), TASKS, now=fixed_now)
    assert plain.shapes_with_role("dependency") == ()


def test_gantt_milestones_draw_as_diamonds(fixed_now) -> None:
    """Milestone rows are drawn as diamonds instead of bars."""

    rows = [
        {"task": "Kickoff", "start": "2026-03-01", "end": "2026-03-01", "tags": "planning, milestone"},
        {"task": "Work", "start": "2026-03-01", "end": "2026-03-04"},
    ]
    layout = layout_gantt(_gantt_config(), rows, now=fixed_now)
    assert layout.meta["intervals"][0].milestone is True
    assert len(layout.shapes_with_role("milestone")) == 1
    assert len(layout.shapes_with_role("task")) == 1


def test_gantt_clamps_progress(fixed_now) -> None:
    """Progress values are clamped to 0..100."""

    rows = [{"task": "a", "progress": 250}, {"task": "b", "progress": -5}]
    tasks = layout_gantt(_gantt_config(), rows, now=fixed_now).meta["intervals"]
    assert [task.progress for task in tasks] == [100.0, 0.0]


CITIES = [
    {"city": "Lisbon", "lat": 38.7, "lng": -9.1, "visitors": 10},
    {"city": "Oslo", "lat": 59.9, "lng": 10.7, "visitors": 30},
    {"city": "Nowhere", "lat": 200, "lng": 0, "visitors": 5},
    {"city": "Unknown", "visitors": 7},
]


def test_geo_points_skip_rows_without_usable_coordinates() -> None:
    """Out-of-range and missing coordinates are counted as skipped."""

    config = ChartConfiguration(type="MAP_POINT", value_field="visitors")
    points, skipped = geo_points(config, CITIES)
    assert [point.index for point in points] == [0, 1]
    assert skipped == 2


def test_point_map_sizes_markers_by_value() -> None:
    """Marker radii run from the minimum to the maximum radius."""

    config = ChartConfiguration(type="MAP_POINT", value_field="visitors", location_field="city")
    layout = layout_geo(config, CITIES)
    markers = layout.meta["markers"]
    assert [marker.label for marker in markers] == ["Lisbon", "Oslo"]
    assert [marker.radius for marker in markers] == [pytest.approx(MIN_POINT_RADIUS), pytest.approx(MAX_POINT_RADIUS)]
    assert layout.meta["skipped_rows"] == 2
    assert len(layout.shapes_with_role("marker")) == 2
    assert layout.shapes_with_role("map-background")


def test_heat_map_scales_intensity_to_the_peak() -> None:
    """The peak value gets the largest radius and the hottest color."""

    config = ChartConfiguration(type="MAP_HEAT", value_field="visitors")
    markers = layout_geo(config, CITIES).meta["markers"]
    assert markers[1].radius == pytest.approx(MAX_POINT_RADIUS)
    assert markers[0].radius < markers[1].radius
    assert markers[0].color != markers[1].color


def test_choropleth_uses_the_mean_coordinate_per_location() -> None:
    """Rows of one location collapse into one marker at their mean."""

    rows = [
        {"region": "North", "latitude": 50.0, "longitude": 10.0, "sales": 4},
        {"region": "North", "latitude": 52.0, "longitude": 12.0, "sales": 6},
        {"region": "South", "latitude": 40.0, "longitude": 14.0, "sales": 3},
    ]
    config = ChartConfiguration(type="MAP_CHOROPLETH", value_field="sales", location_field="region")
    points, _skipped = geo_points(config, rows)
    regions = choropleth_regions(config, points)
    assert regions["North"] == (pytest.approx(51.0), pytest.approx(11.0), pytest.approx(10.0))
    layout = layout_geo(config, rows)
    assert len(layout.shapes_with_role("marker")) == 2
    assert len(layout.shapes_with_role("marker-label")) == 2
    gradients = [shape for shape in layout.shapes if isinstance(shape, LinearGradient)]
    assert [gradient.id for gradient in gradients] == ["choropleth-legend"]


def test_map_center_drops_markers_outside_the_view() -> None:
    """A zoomed view centered away from a point leaves it undrawn."""

    config = ChartConfiguration(type="MAP_POINT", value_field="visitors", map_center=(-45.0, 120.0), map_zoom=4.0)
    layout = layout_geo(config, CITIES[:2])
    assert len(layout.meta["markers"]) == 2
    assert layout.shapes_with_role("marker") == ()
