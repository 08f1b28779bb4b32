"""Sunburst layout: the category hierarchy as a polar partition."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from analysis.curves import TAU, annular_sector, polar
from analysis.hierarchy import rollup
from analysis.numeric import format_number
from analysis.palette import palette_color

from ..scene import LayoutResult, LegendEntry, PathShape, Shape, TextShape
from ..schema import ChartConfiguration, DataRow
from .common import legend_shapes, plot_area, tooltip

# Arcs sweeping less than this (radians) are left unlabeled.
MIN_LABEL_SWEEP = 0.15


@dataclass(frozen=True, slots=True)
class SunburstArc:
    """Angular and radial extent of one category ring segment."""

    name: str
    value: float
    start_angle: float
    end_angle: float
    inner_radius: float
    outer_radius: float

    @property
    def sweep(self) -> float:
        return self.end_angle - self.start_angle


def layout_sunburst(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a sunburst ring.

    Each category gets an angle proportional to its total; the ring spans
    `inner_radius * R` to `R`. The center shows the grand total.
    """

    root = rollup(rows, category_field=config.category_field or "", value_field=config.value_field or "")
    children = root.positive_children()
    area = plot_area(config, legend_rows=1 if config.legend else 0)
    cx, cy = area.center
    outer = max(0.0, min(area.width, area.height) / 2.0)
    inner = outer * config.inner_radius

    arcs: list[SunburstArc] = []
    angle = 0.0
    for child in children:
        sweep = TAU * child.value / root.value
        arcs.append(SunburstArc(child.name, child.value, angle, angle + sweep, inner, outer))
        angle += sweep

    shapes: list[Shape] = []
    legend: list[LegendEntry] = []
    for idx, arc in enumerate(arcs):
        color = palette_color(idx, config.colors)
        legend.append(LegendEntry(label=arc.name, color=color))
        shapes.append(
            PathShape(
                commands=annular_sector(cx, cy, arc.inner_radius, arc.outer_radius, arc.start_angle, arc.end_angle),
                fill=color,
                stroke="#ffffff",
                stroke_width=1.0,
                role="arc",
                tooltip=tooltip(config, f"{arc.name}: {format_number(arc.value)}"),
            )
        )
        if arc.sweep >= MIN_LABEL_SWEEP:
            x, y = polar(cx, cy, (arc.inner_radius + arc.outer_radius) / 2.0, arc.start_angle + arc.sweep / 2.0)
            shapes.append(TextShape(x, y, arc.name, font_size=10, fill="#ffffff", anchor="middle", role="arc-label"))

    if arcs:
        shapes.append(TextShape(cx, cy, format_number(root.value), font_size=14, anchor="middle", bold=True, role="total"))
    shapes.extend(legend_shapes(legend, config))

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        legend=tuple(legend),
        meta={"arcs": tuple(arcs), "total": root.value},
    )
