"""Pie and donut layout."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from analysis.aggregations import sum_by_key
from analysis.curves import TAU, annular_sector, polar
from analysis.numeric import format_number
from analysis.palette import palette_color

from ..scene import LayoutResult, LegendEntry, PathShape, Shape, TextShape
from ..schema import ChartConfiguration, DataRow
from .common import legend_shapes, plot_area, tooltip

# Slices narrower than this (radians) get no percentage label.
MIN_LABEL_ANGLE = 0.25


@dataclass(frozen=True, slots=True)
class PieSlice:
    """One slice of a pie: its category, total and angular extent."""

    label: str
    value: float
    start_angle: float
    end_angle: float
    color: str

    @property
    def sweep(self) -> float:
        return self.end_angle - self.start_angle


def layout_pie(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a pie (or donut, when `inner_radius` > 0).

    Values are summed per category; categories whose total is zero or
    negative cannot occupy an angle and are skipped. Slices start at 12
    o'clock and run clockwise in first-seen category order.
    """

    totals = sum_by_key(rows, key_field=config.category_field or "", value_field=config.value_field or "")
    positive = [(label, value) for label, value in totals.items() if value > 0]
    grand_total = sum(value for _label, value in positive)

    area = plot_area(config, legend_rows=1 if config.legend else 0)
    cx, cy = area.center
    outer = max(0.0, min(area.width, area.height) / 2.0)
    inner = outer * config.inner_radius

    slices: list[PieSlice] = []
    angle = 0.0
    for idx, (label, value) in enumerate(positive):
        sweep = TAU * value / grand_total
        slices.append(PieSlice(label, value, angle, angle + sweep, palette_color(idx, config.colors)))
        angle += sweep

    shapes: list[Shape] = []
    for item in slices:
        share = item.value / grand_total
        shapes.append(
            PathShape(
                commands=annular_sector(cx, cy, inner, outer, item.start_angle, item.end_angle),
                fill=item.color,
                stroke="#ffffff",
                stroke_width=1.0,
                role="slice",
                tooltip=tooltip(config, f"{item.label}: {format_number(item.value)} ({share:.1%})"),
            )
        )
    for item in slices:
        if item.sweep < MIN_LABEL_ANGLE:
            continue
        radius = (inner + outer) / 2.0 if inner > 0 else outer * 0.65
        x, y = polar(cx, cy, radius, item.start_angle + item.sweep / 2.0)
        shapes.append(
            TextShape(x, y, f"{item.value / grand_total:.0%}", font_size=11, fill="#ffffff", anchor="middle", bold=True, role="slice-label")
        )

    legend = tuple(LegendEntry(label=item.label, color=item.color) for item in slices)
    shapes.extend(legend_shapes(legend, config))

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        legend=legend,
        meta={"slices": tuple(slices), "total": grand_total, "radius": (inner, outer)},
    )
