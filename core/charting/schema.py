"""Schema types for declarative chart configuration.

Every chart is driven by a `ChartConfiguration` (what to draw) plus an ordered
sequence of data rows (the values). Configurations are immutable and carry no
data, so one configuration can be rendered against many datasets.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, Literal, get_args

from analysis.aggregations import Aggregation, DateHierarchy

ChartType = Literal[
    "BAR",
    "COLUMN",
    "LINE",
    "AREA",
    "PIE",
    "SCATTER",
    "TABLE",
    "HEATMAP",
    "TREEMAP",
    "WATERFALL",
    "BOX_PLOT",
    "SANKEY",
    "SUNBURST",
    "GANTT",
    "MAP_CHOROPLETH",
    "MAP_POINT",
    "MAP_HEAT",
]

CHART_TYPES: Final[tuple[str, ...]] = get_args(ChartType)

ChartFamily = Literal[
    "cartesian",
    "pie",
    "table",
    "heatmap",
    "treemap",
    "sunburst",
    "waterfall",
    "box_plot",
    "sankey",
    "gantt",
    "geo",
]

CARTESIAN_TYPES: Final[frozenset[str]] = frozenset({"BAR", "COLUMN", "LINE", "AREA", "SCATTER"})
GEO_TYPES: Final[frozenset[str]] = frozenset({"MAP_CHOROPLETH", "MAP_POINT", "MAP_HEAT"})

FAMILY_BY_TYPE: Final[dict[str, ChartFamily]] = {
    "BAR": "cartesian",
    "COLUMN": "cartesian",
    "LINE": "cartesian",
    "AREA": "cartesian",
    "SCATTER": "cartesian",
    "PIE": "pie",
    "TABLE": "table",
    "HEATMAP": "heatmap",
    "TREEMAP": "treemap",
    "SUNBURST": "sunburst",
    "WATERFALL": "waterfall",
    "BOX_PLOT": "box_plot",
    "SANKEY": "sankey",
    "GANTT": "gantt",
    "MAP_CHOROPLETH": "geo",
    "MAP_POINT": "geo",
    "MAP_HEAT": "geo",
}

ColorScaleKind = Literal["sequential", "diverging"]
SortOrder = Literal["asc", "desc"]
TopNKind = Literal["top", "bottom"]

DataRow = Mapping[str, object]


@dataclass(frozen=True, slots=True)
class AxisConfig:
    """A field binding for one axis.

    Args:
        field: Data column feeding the axis.
        label: Optional axis title.
        min: Optional lower bound override for numeric axes.
        max: Optional upper bound override for numeric axes.
    """

    field: str | None = None
    label: str | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True, slots=True)
class SeriesConfig:
    """A single plotted measure.

    Args:
        field: Data column holding the measure.
        label: Optional legend label (defaults to the field name).
        color: Optional fixed color (defaults to the palette color at the series index).
        stack_id: Series sharing a stack id are stacked together when `stacked` is on.
        y_axis_id: "right" plots the series against the right-hand axis.
        stroke_width: Line width for line/area series.
        fill_opacity: Fill opacity for area series.
        aggregation: How rows sharing an x value are combined.
    """

    field: str
    label: str | None = None
    color: str | None = None
    stack_id: str | None = None
    y_axis_id: str | None = None
    stroke_width: float | None = None
    fill_opacity: float | None = None
    aggregation: Aggregation = "sum"

    @property
    def display_label(self) -> str:
        return self.label or self.field


@dataclass(frozen=True, slots=True)
class Margin:
    """Pixel margins between the surface edge and the plot area."""

    top: float = 20
    right: float = 30
    bottom: float = 40
    left: float = 60


@dataclass(frozen=True, slots=True)
class SortConfig:
    """Row ordering applied before layout."""

    field: str
    order: SortOrder = "asc"


@dataclass(frozen=True, slots=True)
class TopNConfig:
    """Keep only the top (or bottom) N rows by a numeric field."""

    field: str
    n: int
    kind: TopNKind = "top"


@dataclass(frozen=True, slots=True)
class ChartConfiguration:
    """Declarative, data-independent description of a chart.

    Args:
        type: Chart type tag. Unknown tags are kept verbatim so the dispatcher
            can report them as unsupported.
        title: Title shown by the host shell and used for export filenames.
        description: Optional description shown under the title.
        x_axis: Category/x binding.
        y_axis: Value/y binding (the flow target for sankey charts).
        y_axis_right: Optional right-hand axis settings.
        series: Plotted measures; order drives palette assignment and z-order.
        category_field: Category column for pie/treemap/sunburst charts.
        value_field: Value column for pie/treemap/sunburst/geo charts.
        grid: Draw grid lines and tick labels.
        legend: Draw a legend.
        tooltip: Attach hover text to marks.
        animation: Passed through to the declarative payload.
        smooth: Use monotone curves for line/area series.
        stacked: Stack bar/column/area series.
        colors: Optional palette overriding the default palette.
        margin: Margins around the plot area.
        width: Surface width in pixels.
        height: Surface height in pixels.
        background_color: Optional surface background.
        inner_radius: Fraction (0-1) of the outer radius left empty (pie/sunburst).
        padding: Pixel padding between treemap cells.
        node_width: Sankey node width in pixels.
        node_padding: Vertical gap between sankey nodes in pixels.
        task_height: Gantt bar height in pixels.
        show_dependencies: Draw gantt dependency connectors.
        positive_color: Waterfall increase color.
        negative_color: Waterfall decrease color.
        total_color: Waterfall total (final) bar color.
        show_mean: Draw box-plot mean markers.
        show_outliers: Draw box-plot outlier points.
        color_scale: Heatmap/choropleth ramp kind.
        map_center: Optional `(latitude, longitude)` view center.
        map_zoom: Map zoom level (1 shows the whole world when centered).
        location_field: Choropleth location key.
        sort: Optional row ordering applied before layout.
        top_n: Optional top/bottom-N row filter applied before layout.
        date_hierarchy: Optional year/month/day grouping of date x values.
    """

    type: str
    title: str | None = None
    description: str | None = None
    x_axis: AxisConfig | None = None
    y_axis: AxisConfig | None = None
    y_axis_right: AxisConfig | None = None
    series: tuple[SeriesConfig, ...] = ()
    category_field: str | None = None
    value_field: str | None = None
    grid: bool = True
    legend: bool = True
    tooltip: bool = True
    animation: bool = False
    smooth: bool = False
    stacked: bool = False
    colors: tuple[str, ...] | None = None
    margin: Margin = Margin()
    width: int = 800
    height: int = 400
    background_color: str | None = None
    inner_radius: float = 0.0
    padding: float = 2.0
    node_width: float = 20.0
    node_padding: float = 10.0
    task_height: float = 24.0
    show_dependencies: bool = False
    positive_color: str = "#10b981"
    negative_color: str = "#ef4444"
    total_color: str = "#3b82f6"
    show_mean: bool = False
    show_outliers: bool = True
    color_scale: ColorScaleKind = "sequential"
    map_center: tuple[float, float] | None = None
    map_zoom: float = 1.0
    location_field: str | None = None
    sort: SortConfig | None = None
    top_n: TopNConfig | None = None
    date_hierarchy: DateHierarchy | None = None

    @property
    def family(self) -> ChartFamily | None:
        """Return the chart family for the declared type, or None when unsupported."""

        return FAMILY_BY_TYPE.get(self.type)

    @property
    def x_field(self) -> str | None:
        return self.x_axis.field if self.x_axis is not None else None

    @property
    def y_field(self) -> str | None:
        return self.y_axis.field if self.y_axis is not None else None

    @property
    def measure_field(self) -> str | None:
        """Return the first series field (the single measure of most families)."""

        return self.series[0].field if self.series else None
