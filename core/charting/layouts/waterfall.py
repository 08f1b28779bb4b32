"""Waterfall layout: running totals drawn as floating bars."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from analysis.aggregations import group_key, running_totals
from analysis.numeric import coerce_number, format_number
from analysis.scales import BandScale, LinearScale, extent

from ..scene import LayoutResult, LegendEntry, LineShape, RectShape, Shape, TextShape
from ..schema import ChartConfiguration, DataRow
from .common import (
    AXIS_COLOR,
    MUTED_LABEL_COLOR,
    axis_title,
    legend_shapes,
    plot_area,
    thin_labels,
    tooltip,
    value_axis,
)

StepKind = Literal["increase", "decrease", "total"]


@dataclass(frozen=True, slots=True)
class WaterfallStep:
    """One bar of a waterfall.

    Attributes:
        label: Category label.
        delta: Signed change contributed by the row (0 when unreadable).
        start: Cumulative total before the row.
        end: Cumulative total after the row.
        kind: "total" for the final row, else by the sign of `delta`.
    """

    label: str
    delta: float
    start: float
    end: float
    kind: StepKind

    @property
    def span(self) -> tuple[float, float]:
        """The bar's extent as `(low, high)`."""

        return (min(self.start, self.end), max(self.start, self.end))


def waterfall_steps(labels: Sequence[str], deltas: Sequence[float]) -> tuple[WaterfallStep, ...]:
    """Build steps from row labels and deltas; the last row is the total bar."""

    pairs = running_totals(deltas)
    steps: list[WaterfallStep] = []
    for idx, (label, delta, (before, after)) in enumerate(zip(labels, deltas, pairs)):
        if idx == len(pairs) - 1:
            kind: StepKind = "total"
        else:
            kind = "increase" if delta >= 0 else "decrease"
        steps.append(WaterfallStep(label=label, delta=delta, start=before, end=after, kind=kind))
    return tuple(steps)


def layout_waterfall(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a waterfall chart in row order.

    Each row's bar spans from the running total before it to the running
    total after it. Connectors join the end of one bar to the start of the
    next. The final row keeps its own span but is colored as the total.
    """

    measure = config.measure_field or ""
    x_field = config.x_field or ""
    labels = [group_key(row.get(x_field)) for row in rows]
    deltas = [coerce_number(row.get(measure)) or 0.0 for row in rows]
    steps = waterfall_steps(labels, deltas)

    area = plot_area(config, legend_rows=1 if config.legend else 0)
    lo, hi = extent([value for step in steps for value in step.span], include_zero=True)
    if lo == hi:
        hi = lo + 1.0
    y_scale = LinearScale(domain=(lo, hi), range=(area.bottom, area.y)).nice()
    # Band keys are row positions because labels may repeat.
    bands = BandScale(domain=tuple(range(len(steps))), range=(area.x, area.right), padding_inner=0.2, padding_outer=0.1)
    colors = {"increase": config.positive_color, "decrease": config.negative_color, "total": config.total_color}

    shapes: list[Shape] = []
    shapes.extend(value_axis(y_scale, area, orientation="vertical", grid=config.grid))
    visible = thin_labels(labels, available=area.width)
    for idx, label in enumerate(labels):
        if idx in visible:
            shapes.append(
                TextShape(bands.center(idx), area.bottom + 14, label, font_size=10, fill=MUTED_LABEL_COLOR, anchor="middle", role="axis-label")
            )
    shapes.append(LineShape(area.x, y_scale(0.0), area.right, y_scale(0.0), stroke=AXIS_COLOR, role="axis"))

    for idx, step in enumerate(steps):
        low, high = step.span
        x = bands(idx)
        top = y_scale(high)
        shapes.append(
            RectShape(
                x,
                top,
                bands.bandwidth,
                max(y_scale(low) - top, 1.0),
                fill=colors[step.kind],
                role="bar",
                tooltip=tooltip(config, f"{step.label}: {format_number(step.delta)} (total {format_number(step.end)})"),
            )
        )
        if idx > 0:
            previous_end = y_scale(steps[idx - 1].end)
            shapes.append(
                LineShape(bands(idx - 1) + bands.bandwidth, previous_end, x, previous_end, stroke=AXIS_COLOR, dash=(3.0, 2.0), role="connector")
            )
    shapes.extend(axis_title(config, area))

    legend = (
        LegendEntry(label="Increase", color=config.positive_color),
        LegendEntry(label="Decrease", color=config.negative_color),
        LegendEntry(label="Total", color=config.total_color),
    )
    shapes.extend(legend_shapes(legend, config))

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        scales={"category": bands, "value": y_scale},
        legend=legend,
        meta={"spans": steps, "final_total": steps[-1].end if steps else 0.0},
    )
