"""Box plot layout.

One box per distinct x value. Statistics come from `analysis.quantiles`:
whiskers reach the most extreme observations inside the 1.5·IQR fences and
everything beyond them is drawn as an individual outlier point.
"""

from __future__ import annotations

from collections.abc import Sequence

from analysis.aggregations import group_rows
from analysis.curves import diamond
from analysis.numeric import format_number
from analysis.palette import palette_color
from analysis.quantiles import BoxStats, box_stats
from analysis.scales import BandScale, LinearScale, extent

from ..scene import CircleShape, LayoutResult, LineShape, PathShape, RectShape, Shape
from ..schema import ChartConfiguration, DataRow
from .common import AXIS_COLOR, axis_title, category_axis, plot_area, tooltip, value_axis

MEDIAN_COLOR = "#111827"
MEAN_COLOR = "#f59e0b"
OUTLIER_RADIUS = 3.0


def layout_box_plot(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a box plot.

    Groups with no numeric values produce no box. `meta["stats"]` maps each
    group label to its `BoxStats`.
    """

    measure = config.measure_field or ""
    groups = group_rows(rows, field=config.x_field or "", date_hierarchy=config.date_hierarchy)
    stats: dict[str, BoxStats] = {}
    for label, members in groups.items():
        summary = box_stats(row.get(measure) for row in members)
        if summary is not None:
            stats[label] = summary

    area = plot_area(config)
    values: list[float] = []
    for summary in stats.values():
        values.extend((summary.whisker_low, summary.whisker_high, summary.mean))
        if config.show_outliers:
            values.extend(summary.outliers)
    lo, hi = extent(values)
    if lo == hi:
        lo, hi = lo - 1.0, hi + 1.0
    y_scale = LinearScale(domain=(lo, hi), range=(area.bottom, area.y)).nice()
    labels = tuple(stats)
    bands = BandScale(domain=labels, range=(area.x, area.right), padding_inner=0.3, padding_outer=0.2)

    shapes: list[Shape] = []
    shapes.extend(value_axis(y_scale, area, orientation="vertical", grid=config.grid))
    shapes.extend(category_axis(labels, bands, area, horizontal=False))
    shapes.append(LineShape(area.x, area.bottom, area.right, area.bottom, stroke=AXIS_COLOR, role="axis"))

    series = config.series[0] if config.series else None
    for idx, (label, summary) in enumerate(stats.items()):
        color = (series.color if series is not None and series.color else None) or palette_color(idx, config.colors)
        left = bands(label)
        width = bands.bandwidth
        mid = left + width / 2.0
        cap = width / 4.0
        top, bottom = y_scale(summary.q3), y_scale(summary.q1)
        hover = tooltip(
            config,
            f"{label}: min {format_number(summary.whisker_low)}, Q1 {format_number(summary.q1)}, "
            f"median {format_number(summary.median)}, Q3 {format_number(summary.q3)}, "
            f"max {format_number(summary.whisker_high)}",
        )

        for whisker_value, box_edge in ((summary.whisker_high, top), (summary.whisker_low, bottom)):
            y = y_scale(whisker_value)
            shapes.append(LineShape(mid, box_edge, mid, y, stroke=AXIS_COLOR, role="whisker"))
            shapes.append(LineShape(mid - cap, y, mid + cap, y, stroke=AXIS_COLOR, role="whisker"))
        shapes.append(
            RectShape(left, min(top, bottom), width, abs(bottom - top), fill=color, stroke=color, stroke_width=1.0, opacity=0.7, role="box", tooltip=hover)
        )
        median_y = y_scale(summary.median)
        shapes.append(LineShape(left, median_y, left + width, median_y, stroke=MEDIAN_COLOR, stroke_width=2.0, role="median"))
        if config.show_mean:
            shapes.append(PathShape(commands=diamond(mid, y_scale(summary.mean), 8.0), fill=MEAN_COLOR, role="mean"))
        if config.show_outliers:
            for outlier in summary.outliers:
                shapes.append(
                    CircleShape(
                        mid,
                        y_scale(outlier),
                        OUTLIER_RADIUS,
                        fill=None,
                        stroke=color,
                        stroke_width=1.5,
                        role="outlier",
                        tooltip=tooltip(config, f"{label}: outlier {format_number(outlier)}"),
                    )
                )
    shapes.extend(axis_title(config, area))

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        scales={"category": bands, "value": y_scale},
        meta={"stats": stats},
    )
