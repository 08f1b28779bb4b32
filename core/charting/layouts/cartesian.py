"""Cartesian layouts: bar, column, line, area and scatter charts.

Rows are grouped by their x value and each series is aggregated per group.
Besides the positioned marks, the layout emits a Chart.js-style payload
(`labels` + `datasets`) so hosts that prefer a declarative plotting grammar
can hand the same chart to a client-side library.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypedDict

from analysis.aggregations import aggregate_values, group_key, group_rows
from analysis.curves import PathCommand, linear_path, monotone_path
from analysis.numeric import coerce_number, format_number
from analysis.palette import palette_color
from analysis.scales import BandScale, LinearScale, extent

from ..scene import CircleShape, LayoutResult, LegendEntry, LineShape, PathShape, RectShape, Shape
from ..schema import AxisConfig, ChartConfiguration, DataRow, SeriesConfig
from .common import (
    AXIS_COLOR,
    PlotArea,
    axis_title,
    category_axis,
    legend_shapes,
    plot_area,
    tooltip,
    value_axis,
)

STACKABLE_TYPES = frozenset({"BAR", "COLUMN", "AREA"})
CHARTJS_TYPES = {"BAR": "bar", "COLUMN": "bar", "LINE": "line", "AREA": "line", "SCATTER": "scatter"}

DEFAULT_STROKE_WIDTH = 2.0
DEFAULT_AREA_OPACITY = 0.3
POINT_RADIUS = 3.0
SCATTER_RADIUS = 4.0
BAR_GAP = 1.0


class ChartDataset(TypedDict, total=False):
    """A Chart.js dataset payload."""

    label: str
    field: str
    data: list[Any]
    borderColor: str
    backgroundColor: str
    borderWidth: float
    stack: str
    yAxisID: str
    fill: bool
    tension: float


class ChartData(TypedDict):
    """The Chart.js `data` payload (labels + datasets)."""

    labels: list[str]
    datasets: list[ChartDataset]


@dataclass(frozen=True, slots=True)
class SeriesExtent:
    """Aggregated values of one series with their stacked extents.

    Attributes:
        series: The series configuration.
        color: Resolved series color.
        values: Aggregated value per category label.
        extents: `(base, top)` per label; base is 0 unless the series is stacked.
        right_axis: Whether the series is plotted against the right axis.
        slot: Stack key used to place bars side by side.
    """

    series: SeriesConfig
    color: str
    values: tuple[float, ...]
    extents: tuple[tuple[float, float], ...]
    right_axis: bool
    slot: str


def layout_cartesian(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a bar, column, line, area or scatter chart.

    Args:
        config: Configuration with `x_axis.field` and at least one series.
        rows: Data rows.

    Returns:
        LayoutResult whose `spec` carries the Chart.js-style payload.
    """

    if config.type == "SCATTER":
        return _layout_scatter(config, rows)

    groups = group_rows(rows, field=config.x_field or "", date_hierarchy=config.date_hierarchy)
    labels = tuple(groups)
    stacked = config.stacked and config.type in STACKABLE_TYPES
    extents = _series_extents(config, labels, groups, stacked=stacked)

    area = plot_area(config, legend_rows=1 if config.legend else 0)
    horizontal = config.type == "BAR"
    value_range = (area.x, area.right) if horizontal else (area.bottom, area.y)
    band_range = (area.y, area.bottom) if horizontal else (area.x, area.right)
    left_scale = _value_scale([s for s in extents if not s.right_axis], config.y_axis, value_range)
    right_series = [s for s in extents if s.right_axis]
    right_scale = _value_scale(right_series, config.y_axis_right, value_range) if right_series else None
    bands = BandScale(domain=labels, range=band_range, padding_inner=0.2, padding_outer=0.1)

    shapes: list[Shape] = []
    shapes.extend(value_axis(left_scale, area, orientation="horizontal" if horizontal else "vertical", grid=config.grid))
    if right_scale is not None:
        shapes.extend(value_axis(right_scale, area, orientation="horizontal" if horizontal else "vertical", grid=False, side="right"))
    shapes.extend(category_axis(labels, bands, area, horizontal=horizontal))

    if config.type in ("BAR", "COLUMN"):
        shapes.extend(_bars(config, extents, labels, bands, left_scale, right_scale, horizontal=horizontal))
    else:
        for series_extent in extents:
            scale = right_scale if series_extent.right_axis and right_scale is not None else left_scale
            shapes.extend(_line_or_area(config, series_extent, labels, bands, scale))

    lo, hi = sorted(left_scale.domain)
    baseline = left_scale(min(max(0.0, lo), hi))
    if horizontal:
        shapes.append(LineShape(baseline, area.y, baseline, area.bottom, stroke=AXIS_COLOR, role="axis"))
    else:
        shapes.append(LineShape(area.x, baseline, area.right, baseline, stroke=AXIS_COLOR, role="axis"))
    shapes.extend(axis_title(config, area))

    legend = tuple(LegendEntry(label=s.series.display_label, color=s.color) for s in extents)
    shapes.extend(legend_shapes(legend, config))

    scales: dict[str, object] = {"category": bands, "value": left_scale}
    if right_scale is not None:
        scales["value_right"] = right_scale

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        scales=scales,
        legend=legend,
        meta={
            "labels": labels,
            "values": {s.series.field: s.values for s in extents},
            "extents": {s.series.field: s.extents for s in extents},
        },
        spec=_chartjs_spec(config, labels, extents, stacked=stacked),
    )


def _series_extents(
    config: ChartConfiguration,
    labels: tuple[str, ...],
    groups: dict[str, list[DataRow]],
    *,
    stacked: bool,
) -> list[SeriesExtent]:
    """Aggregate every series per label and compute stacked extents."""

    positive: dict[str, list[float]] = {}
    negative: dict[str, list[float]] = {}
    out: list[SeriesExtent] = []
    for idx, series in enumerate(config.series):
        values = tuple(
            aggregate_values((row.get(series.field) for row in groups[label]), aggregation=series.aggregation)
            for label in labels
        )
        slot = (series.stack_id or "__stack__") if stacked else f"__series_{idx}"
        pos = positive.setdefault(slot, [0.0] * len(labels))
        neg = negative.setdefault(slot, [0.0] * len(labels))
        extents: list[tuple[float, float]] = []
        for j, value in enumerate(values):
            if not stacked:
                extents.append((0.0, value))
            elif value >= 0:
                extents.append((pos[j], pos[j] + value))
                pos[j] += value
            else:
                extents.append((neg[j], neg[j] + value))
                neg[j] += value
        out.append(
            SeriesExtent(
                series=series,
                color=series.color or palette_color(idx, config.colors),
                values=values,
                extents=tuple(extents),
                right_axis=series.y_axis_id == "right",
                slot=slot,
            )
        )
    return out


def _value_scale(
    extents: Sequence[SeriesExtent],
    axis: AxisConfig | None,
    value_range: tuple[float, float],
) -> LinearScale:
    """Build a value scale covering every extent, honoring axis min/max overrides."""

    values = [v for s in extents for pair in s.extents for v in pair]
    lo, hi = extent(values, include_zero=True)
    if lo == hi:
        hi = lo + 1.0
    scale = LinearScale(domain=(lo, hi), range=value_range).nice()
    if axis is not None and (axis.min is not None or axis.max is not None):
        lo = axis.min if axis.min is not None else scale.domain[0]
        hi = axis.max if axis.max is not None else scale.domain[1]
        scale = LinearScale(domain=(lo, hi), range=value_range)
    return scale


def _bars(
    config: ChartConfiguration,
    extents: Sequence[SeriesExtent],
    labels: tuple[str, ...],
    bands: BandScale,
    left_scale: LinearScale,
    right_scale: LinearScale | None,
    *,
    horizontal: bool,
) -> list[Shape]:
    slots = list(dict.fromkeys(s.slot for s in extents))
    slot_size = bands.bandwidth / max(1, len(slots))
    shapes: list[Shape] = []
    for series_extent in extents:
        scale = right_scale if series_extent.right_axis and right_scale is not None else left_scale
        offset = slots.index(series_extent.slot) * slot_size
        thickness = max(0.0, slot_size - BAR_GAP)
        for label, value, (base, top) in zip(labels, series_extent.values, series_extent.extents):
            a, b = scale(base), scale(top)
            hover = tooltip(config, f"{series_extent.series.display_label} · {label}: {format_number(value)}")
            if horizontal:
                shapes.append(
                    RectShape(min(a, b), bands(label) + offset, abs(b - a), thickness, fill=series_extent.color, role="bar", tooltip=hover)
                )
            else:
                shapes.append(
                    RectShape(bands(label) + offset, min(a, b), thickness, abs(b - a), fill=series_extent.color, role="bar", tooltip=hover)
                )
    return shapes


def _curve(config: ChartConfiguration, points: Sequence[tuple[float, float]]) -> tuple[PathCommand, ...]:
    return monotone_path(points) if config.smooth else linear_path(points)


def _line_or_area(
    config: ChartConfiguration,
    series_extent: SeriesExtent,
    labels: tuple[str, ...],
    bands: BandScale,
    scale: LinearScale,
) -> list[Shape]:
    series = series_extent.series
    tops = [(bands.center(label), scale(top)) for label, (_base, top) in zip(labels, series_extent.extents)]
    shapes: list[Shape] = []
    if config.type == "AREA" and tops:
        bases = [(bands.center(label), scale(base)) for label, (base, _top) in zip(labels, series_extent.extents)]
        outline = list(_curve(config, tops))
        lower = list(_curve(config, list(reversed(bases))))
        if lower:
            lower[0] = ("L", lower[0][1])
        shapes.append(
            PathShape(
                commands=tuple(outline + lower + [("Z", ())]),
                fill=series_extent.color,
                opacity=series.fill_opacity if series.fill_opacity is not None else DEFAULT_AREA_OPACITY,
                role="area",
            )
        )
    shapes.append(
        PathShape(
            commands=_curve(config, tops),
            fill=None,
            stroke=series_extent.color,
            stroke_width=series.stroke_width or DEFAULT_STROKE_WIDTH,
            role="line",
        )
    )
    for label, value, (x, y) in zip(labels, series_extent.values, tops):
        shapes.append(
            CircleShape(
                x,
                y,
                POINT_RADIUS,
                fill=series_extent.color,
                role="point",
                tooltip=tooltip(config, f"{series.display_label} · {label}: {format_number(value)}"),
            )
        )
    return shapes


def _layout_scatter(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a scatter chart: one circle per row and series."""

    x_field = config.x_field or ""
    raw_x = [row.get(x_field) for row in rows]
    numeric_x = [coerce_number(value) for value in raw_x]
    present = [value for value in raw_x if value is not None and value != ""]
    use_linear = bool(present) and all(coerce_number(value) is not None for value in present)

    area = plot_area(config, legend_rows=1 if config.legend else 0)
    if use_linear:
        xs = [value for value in numeric_x if value is not None]
        lo, hi = extent(xs)
        if lo == hi:
            lo, hi = lo - 1.0, hi + 1.0
        x_scale: LinearScale | BandScale = LinearScale(domain=(lo, hi), range=(area.x, area.right)).nice()
    else:
        keys = tuple(dict.fromkeys(group_key(value) for value in raw_x))
        x_scale = BandScale(domain=keys, range=(area.x, area.right), padding_inner=0.2, padding_outer=0.1)

    points: list[list[tuple[object, float, float]]] = []
    left_values: list[float] = []
    right_values: list[float] = []
    for series in config.series:
        series_points: list[tuple[object, float, float]] = []
        for row, x_number, x_raw in zip(rows, numeric_x, raw_x):
            y = coerce_number(row.get(series.field))
            if y is None or (use_linear and x_number is None):
                continue
            series_points.append((x_raw, x_number if use_linear else 0.0, y))
            (right_values if series.y_axis_id == "right" else left_values).append(y)
        points.append(series_points)

    left_scale = _scatter_value_scale(left_values, config.y_axis, area)
    right_scale = _scatter_value_scale(right_values, config.y_axis_right, area) if right_values else None

    shapes: list[Shape] = []
    shapes.extend(value_axis(left_scale, area, orientation="vertical", grid=config.grid))
    if right_scale is not None:
        shapes.extend(value_axis(right_scale, area, orientation="vertical", grid=False, side="right"))
    if isinstance(x_scale, LinearScale):
        shapes.extend(value_axis(x_scale, area, orientation="horizontal", grid=config.grid))
    else:
        shapes.extend(category_axis(tuple(str(key) for key in x_scale.domain), x_scale, area, horizontal=False))
    shapes.append(LineShape(area.x, area.bottom, area.right, area.bottom, stroke=AXIS_COLOR, role="axis"))

    legend: list[LegendEntry] = []
    datasets: list[ChartDataset] = []
    for idx, (series, series_points) in enumerate(zip(config.series, points)):
        color = series.color or palette_color(idx, config.colors)
        legend.append(LegendEntry(label=series.display_label, color=color))
        scale = right_scale if series.y_axis_id == "right" and right_scale is not None else left_scale
        for x_raw, x_number, y in series_points:
            cx = x_scale(x_number) if isinstance(x_scale, LinearScale) else x_scale.center(group_key(x_raw))
            shapes.append(
                CircleShape(
                    cx,
                    scale(y),
                    SCATTER_RADIUS,
                    fill=color,
                    opacity=0.8,
                    role="point",
                    tooltip=tooltip(config, f"{series.display_label}: ({group_key(x_raw)}, {format_number(y)})"),
                )
            )
        datasets.append(
            ChartDataset(
                label=series.display_label,
                field=series.field,
                data=[{"x": x_number if use_linear else group_key(x_raw), "y": y} for x_raw, x_number, y in series_points],
                borderColor=color,
                backgroundColor=color,
                yAxisID="right" if series.y_axis_id == "right" else "y",
            )
        )
    shapes.extend(axis_title(config, area))
    shapes.extend(legend_shapes(legend, config))

    scales: dict[str, object] = {"x": x_scale, "value": left_scale}
    if right_scale is not None:
        scales["value_right"] = right_scale

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        scales=scales,
        legend=tuple(legend),
        meta={"points": {series.field: tuple((p[1], p[2]) for p in pts) for series, pts in zip(config.series, points)}},
        spec={
            "type": "scatter",
            "data": {"labels": [], "datasets": datasets},
            "options": _chartjs_options(config, stacked=False, horizontal=False, has_right=right_scale is not None),
        },
    )


def _scatter_value_scale(values: list[float], axis: AxisConfig | None, area: PlotArea) -> LinearScale:
    lo, hi = extent(values)
    if lo == hi:
        lo, hi = lo - 1.0, hi + 1.0
    scale = LinearScale(domain=(lo, hi), range=(area.bottom, area.y)).nice()
    if axis is not None and (axis.min is not None or axis.max is not None):
        scale = LinearScale(
            domain=(
                axis.min if axis.min is not None else scale.domain[0],
                axis.max if axis.max is not None else scale.domain[1],
            ),
            range=scale.range,
        )
    return scale


def _chartjs_options(config: ChartConfiguration, *, stacked: bool, horizontal: bool, has_right: bool) -> dict[str, Any]:
    scales: dict[str, Any] = {
        "x": {"stacked": stacked, "grid": {"display": config.grid}},
        "y": {"stacked": stacked, "grid": {"display": config.grid}},
    }
    if config.x_axis is not None and config.x_axis.label:
        scales["x"]["title"] = {"display": True, "text": config.x_axis.label}
    if config.y_axis is not None:
        if config.y_axis.label:
            scales["y"]["title"] = {"display": True, "text": config.y_axis.label}
        if config.y_axis.min is not None:
            scales["y"]["min"] = config.y_axis.min
        if config.y_axis.max is not None:
            scales["y"]["max"] = config.y_axis.max
    if has_right:
        scales["right"] = {"position": "right", "grid": {"drawOnChartArea": False}}
    return {
        "indexAxis": "y" if horizontal else "x",
        "animation": config.animation,
        "plugins": {"legend": {"display": config.legend}, "tooltip": {"enabled": config.tooltip}},
        "scales": scales,
    }


def _chartjs_spec(
    config: ChartConfiguration,
    labels: tuple[str, ...],
    extents: Sequence[SeriesExtent],
    *,
    stacked: bool,
) -> dict[str, Any]:
    datasets: list[ChartDataset] = []
    for s in extents:
        dataset = ChartDataset(
            label=s.series.display_label,
            field=s.series.field,
            data=list(s.values),
            borderColor=s.color,
            backgroundColor=s.color,
            borderWidth=s.series.stroke_width or (DEFAULT_STROKE_WIDTH if config.type in ("LINE", "AREA") else 0),
            yAxisID="right" if s.right_axis else "y",
            fill=config.type == "AREA",
            tension=0.4 if config.smooth else 0.0,
        )
        if stacked:
            dataset["stack"] = s.series.stack_id or "stack"
        datasets.append(dataset)
    data: ChartData = {"labels": list(labels), "datasets": datasets}
    return {
        "type": CHARTJS_TYPES[config.type],
        "data": data,
        "options": _chartjs_options(
            config,
            stacked=stacked,
            horizontal=config.type == "BAR",
            has_right=any(s.right_axis for s in extents),
        ),
    }
