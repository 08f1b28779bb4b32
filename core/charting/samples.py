"""Built-in sample charts for the gallery page, one per chart type."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from .schema import AxisConfig, CHART_TYPES, ChartConfiguration, DataRow, SeriesConfig


@dataclass(frozen=True, slots=True)
class SampleChart:
    """A configuration bundled with the rows it draws."""

    id: str
    config: ChartConfiguration
    rows: tuple[DataRow, ...]


_QUARTERS: Final[tuple[DataRow, ...]] = (
    {"quarter": "Q1", "revenue": 120, "cost": 80, "margin": 0.33},
    {"quarter": "Q2", "revenue": 150, "cost": 95, "margin": 0.37},
    {"quarter": "Q3", "revenue": 170, "cost": 110, "margin": 0.35},
    {"quarter": "Q4", "revenue": 210, "cost": 120, "margin": 0.43},
)

_CITIES: Final[tuple[DataRow, ...]] = (
    {"city": "London", "region": "Europe", "lat": 51.5074, "lng": -0.1278, "visitors": 420},
    {"city": "Paris", "region": "Europe", "lat": 48.8566, "lng": 2.3522, "visitors": 380},
    {"city": "New York", "region": "Americas", "lat": 40.7128, "lng": -74.006, "visitors": 510},
    {"city": "Sao Paulo", "region": "Americas", "lat": -23.5505, "lng": -46.6333, "visitors": 210},
    {"city": "Tokyo", "region": "Asia", "lat": 35.6762, "lng": 139.6503, "visitors": 460},
    {"city": "Sydney", "region": "Oceania", "lat": -33.8688, "lng": 151.2093, "visitors": 150},
)

_SPEND: Final[tuple[DataRow, ...]] = (
    {"department": "Engineering", "amount": 540},
    {"department": "Sales", "amount": 320},
    {"department": "Marketing", "amount": 210},
    {"department": "Support", "amount": 140},
    {"department": "Finance", "amount": 90},
)

SAMPLE_CHARTS: Final[tuple[SampleChart, ...]] = (
    SampleChart(
        id="bar",
        config=ChartConfiguration(
            type="BAR",
            title="Spend by department",
            x_axis=AxisConfig(field="department"),
            series=(SeriesConfig(field="amount", label="Spend"),),
            legend=False,
        ),
        rows=_SPEND,
    ),
    SampleChart(
        id="column",
        config=ChartConfiguration(
            type="COLUMN",
            title="Revenue and cost by quarter",
            x_axis=AxisConfig(field="quarter", label="Quarter"),
            y_axis=AxisConfig(label="USD (k)"),
            series=(SeriesConfig(field="revenue", label="Revenue"), SeriesConfig(field="cost", label="Cost")),
        ),
        rows=_QUARTERS,
    ),
    SampleChart(
        id="line",
        config=ChartConfiguration(
            type="LINE",
            title="Revenue with margin",
            description="Margin is plotted on the right-hand axis.",
            x_axis=AxisConfig(field="quarter"),
            y_axis_right=AxisConfig(label="Margin", min=0, max=1),
            series=(
                SeriesConfig(field="revenue", label="Revenue"),
                SeriesConfig(field="margin", label="Margin", y_axis_id="right"),
            ),
            smooth=True,
        ),
        rows=_QUARTERS,
    ),
    SampleChart(
        id="area",
        config=ChartConfiguration(
            type="AREA",
            title="Stacked revenue and cost",
            x_axis=AxisConfig(field="quarter"),
            series=(
                SeriesConfig(field="cost", label="Cost", stack_id="total"),
                SeriesConfig(field="revenue", label="Revenue", stack_id="total"),
            ),
            stacked=True,
        ),
        rows=_QUARTERS,
    ),
    SampleChart(
        id="pie",
        config=ChartConfiguration(
            type="PIE",
            title="Spend share",
            category_field="department",
            value_field="amount",
            inner_radius=0.5,
        ),
        rows=_SPEND,
    ),
    SampleChart(
        id="scatter",
        config=ChartConfiguration(
            type="SCATTER",
            title="Cost versus revenue",
            x_axis=AxisConfig(field="cost", label="Cost"),
            y_axis=AxisConfig(label="Revenue"),
            series=(SeriesConfig(field="revenue", label="Revenue"),),
        ),
        rows=_QUARTERS,
    ),
    SampleChart(
        id="table",
        config=ChartConfiguration(type="TABLE", title="Quarterly figures"),
        rows=_QUARTERS,
    ),
    SampleChart(
        id="heatmap",
        config=ChartConfiguration(
            type="HEATMAP",
            title="Tickets by weekday and hour",
            x_axis=AxisConfig(field="hour"),
            y_axis=AxisConfig(field="day"),
            series=(SeriesConfig(field="tickets"),),
        ),
        rows=tuple(
            {"day": day, "hour": f"{hour:02d}:00", "tickets": (d * 3 + h * 5) % 17}
            for d, day in enumerate(("Mon", "Tue", "Wed", "Thu", "Fri"))
            for h, hour in enumerate((9, 11, 13, 15, 17))
        ),
    ),
    SampleChart(
        id="treemap",
        config=ChartConfiguration(
            type="TREEMAP",
            title="Spend treemap",
            category_field="department",
            value_field="amount",
            padding=4.0,
        ),
        rows=_SPEND,
    ),
    SampleChart(
        id="waterfall",
        config=ChartConfiguration(
            type="WATERFALL",
            title="Running balance",
            x_axis=AxisConfig(field="cat"),
            series=(SeriesConfig(field="delta"),),
        ),
        rows=(
            {"cat": "start", "delta": 100},
            {"cat": "loss", "delta": -30},
            {"cat": "gain", "delta": 10},
        ),
    ),
    SampleChart(
        id="box_plot",
        config=ChartConfiguration(
            type="BOX_PLOT",
            title="Response time spread",
            x_axis=AxisConfig(field="group"),
            series=(SeriesConfig(field="value"),),
            show_mean=True,
        ),
        rows=(
            {"group": "A", "value": 1},
            {"group": "A", "value": 2},
            {"group": "A", "value": 3},
            {"group": "A", "value": 4},
            {"group": "A", "value": 100},
            {"group": "B", "value": 5},
            {"group": "B", "value": 7},
            {"group": "B", "value": 8},
            {"group": "B", "value": 9},
            {"group": "B", "value": 12},
        ),
    ),
    SampleChart(
        id="sankey",
        config=ChartConfiguration(
            type="SANKEY",
            title="Traffic sources to pages",
            x_axis=AxisConfig(field="source"),
            y_axis=AxisConfig(field="target"),
            series=(SeriesConfig(field="visits"),),
        ),
        rows=(
            {"source": "Search", "target": "Home", "visits": 500},
            {"source": "Search", "target": "Pricing", "visits": 180},
            {"source": "Social", "target": "Home", "visits": 240},
            {"source": "Email", "target": "Pricing", "visits": 90},
            {"source": "Email", "target": "Docs", "visits": 40},
        ),
    ),
    SampleChart(
        id="sunburst",
        config=ChartConfiguration(
            type="SUNBURST",
            title="Visitors by region",
            category_field="region",
            value_field="visitors",
            inner_radius=0.35,
        ),
        rows=_CITIES,
    ),
    SampleChart(
        id="gantt",
        config=ChartConfiguration(
            type="GANTT",
            title="Release plan",
            x_axis=AxisConfig(field="task"),
            show_dependencies=True,
        ),
        rows=(
            {"task": "Design", "start": "2026-01-05", "end": "2026-01-16", "progress": 100},
            {"task": "Build", "start": "2026-01-19", "duration": 21, "progress": 40, "dependencies": "Design"},
            {"task": "Test", "startDate": "2026-02-02", "endDate": "2026-02-20", "dependencies": "Build"},
            {"task": "Launch", "start": "2026-02-23", "end": "2026-02-23", "milestone": True, "dependencies": "Test"},
        ),
    ),
    SampleChart(
        id="map_choropleth",
        config=ChartConfiguration(
            type="MAP_CHOROPLETH",
            title="Visitors by region (approximate)",
            value_field="visitors",
            location_field="region",
        ),
        rows=_CITIES,
    ),
    SampleChart(
        id="map_point",
        config=ChartConfiguration(
            type="MAP_POINT",
            title="Visitors by city",
            value_field="visitors",
            location_field="city",
        ),
        rows=_CITIES,
    ),
    SampleChart(
        id="map_heat",
        config=ChartConfiguration(
            type="MAP_HEAT",
            title="Visitor density",
            value_field="visitors",
            map_center=(20.0, 0.0),
        ),
        rows=_CITIES,
    ),
)

SAMPLE_CHART_BY_ID: Final[dict[str, SampleChart]] = {sample.id: sample for sample in SAMPLE_CHARTS}


def samples_for_types(chart_types: Sequence[str] | None = None) -> tuple[SampleChart, ...]:
    """Return the samples for the given types (all samples when None)."""

    if chart_types is None:
        return SAMPLE_CHARTS
    wanted = {chart_type.upper() for chart_type in chart_types}
    return tuple(sample for sample in SAMPLE_CHARTS if sample.config.type in wanted)


_missing_samples = sorted(set(CHART_TYPES) - {sample.config.type for sample in SAMPLE_CHARTS})
if _missing_samples:
    raise RuntimeError(f"No sample chart for chart types: {', '.join(_missing_samples)}")
