"""Helpers shared by the chart-family layouts."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from analysis.numeric import format_number
from analysis.scales import BandScale, LinearScale

from ..scene import LegendEntry, LineShape, RectShape, Shape, TextShape
from ..schema import ChartConfiguration

AXIS_COLOR = "#9ca3af"
GRID_COLOR = "#e5e7eb"
LABEL_COLOR = "#374151"
MUTED_LABEL_COLOR = "#6b7280"

LEGEND_SWATCH = 10.0
LEGEND_ITEM_GAP = 16.0
LEGEND_CHAR_WIDTH = 6.5


@dataclass(frozen=True, slots=True)
class PlotArea:
    """The rectangle inside the margins where marks are placed."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def inset(self, amount: float) -> "PlotArea":
        """Return the area shrunk by `amount` on every side (never negative)."""

        width = max(0.0, self.width - 2 * amount)
        height = max(0.0, self.height - 2 * amount)
        return PlotArea(x=self.x + amount, y=self.y + amount, width=width, height=height)

    def contains(self, x: float, y: float, width: float = 0.0, height: float = 0.0, *, tolerance: float = 1e-6) -> bool:
        """Return True when the given rectangle lies inside this area."""

        return (
            x >= self.x - tolerance
            and y >= self.y - tolerance
            and x + width <= self.right + tolerance
            and y + height <= self.bottom + tolerance
        )


def plot_area(config: ChartConfiguration, *, legend_rows: int = 0) -> PlotArea:
    """Return the plot area for a configuration, reserving room for a legend row."""

    margin = config.margin
    top = margin.top + (18.0 * legend_rows)
    width = max(0.0, config.width - margin.left - margin.right)
    height = max(0.0, config.height - top - margin.bottom)
    return PlotArea(x=float(margin.left), y=float(top), width=width, height=height)


def distinct(values: Iterable[str]) -> tuple[str, ...]:
    """Return distinct values in first-seen order."""

    return tuple(dict.fromkeys(values))


def tooltip(config: ChartConfiguration, text: str) -> str | None:
    """Return hover text when tooltips are enabled."""

    return text if config.tooltip else None


def thin_labels(labels: Sequence[str], *, available: float, min_spacing: float = 40.0) -> set[int]:
    """Return the indexes of category labels that fit along an axis.

    Crowded axes keep every k-th label so tick text never overlaps.
    """

    if not labels:
        return set()
    per_label = available / len(labels)
    stride = max(1, math.ceil(min_spacing / per_label)) if per_label > 0 else len(labels)
    return set(range(0, len(labels), stride))


def value_axis(
    scale: LinearScale,
    area: PlotArea,
    *,
    orientation: str,
    grid: bool,
    side: str = "left",
    ticks: int = 5,
) -> list[Shape]:
    """Draw grid lines and tick labels for a numeric axis.

    Args:
        scale: The value scale (its range is in pixels).
        area: Plot area the grid spans.
        orientation: "vertical" when values grow upward, "horizontal" when they grow rightward.
        grid: Whether grid lines are drawn.
        side: "left" for the primary axis, "right" for the secondary one. A
            secondary horizontal axis is labeled along the top edge.
        ticks: Approximate tick count.
    """

    shapes: list[Shape] = []
    for value in scale.ticks(ticks):
        position = scale(value)
        text = format_number(value)
        if orientation == "vertical":
            if grid and side == "left":
                shapes.append(LineShape(area.x, position, area.right, position, stroke=GRID_COLOR, role="grid"))
            label_x = area.x - 6 if side == "left" else area.right + 6
            anchor = "end" if side == "left" else "start"
            shapes.append(
                TextShape(label_x, position, text, font_size=10, fill=MUTED_LABEL_COLOR, anchor=anchor, role="axis-label")
            )
        else:
            if grid and side == "left":
                shapes.append(LineShape(position, area.y, position, area.bottom, stroke=GRID_COLOR, role="grid"))
            label_y = area.bottom + 14 if side == "left" else area.y - 8
            shapes.append(
                TextShape(position, label_y, text, font_size=10, fill=MUTED_LABEL_COLOR, anchor="middle", role="axis-label")
            )
    return shapes


def category_axis(labels: Sequence[str], bands: BandScale, area: PlotArea, *, horizontal: bool) -> list[Shape]:
    """Draw band labels along the bottom edge (or the left edge when `horizontal`)."""

    visible = thin_labels(labels, available=area.height if horizontal else area.width, min_spacing=18 if horizontal else 40)
    shapes: list[Shape] = []
    for idx, label in enumerate(labels):
        if idx not in visible:
            continue
        if horizontal:
            x, y, anchor = area.x - 6, bands.center(label), "end"
        else:
            x, y, anchor = bands.center(label), area.bottom + 14, "middle"
        shapes.append(TextShape(x, y, label, font_size=10, fill=MUTED_LABEL_COLOR, anchor=anchor, role="axis-label"))
    return shapes


def axis_title(config: ChartConfiguration, area: PlotArea) -> list[Shape]:
    """Draw the x/y axis titles when labels are configured."""

    shapes: list[Shape] = []
    if config.x_axis is not None and config.x_axis.label:
        shapes.append(
            TextShape(area.x + area.width / 2, area.bottom + 30, config.x_axis.label, anchor="middle", role="axis-title")
        )
    if config.y_axis is not None and config.y_axis.label:
        shapes.append(
            TextShape(
                area.x - 44,
                area.y + area.height / 2,
                config.y_axis.label,
                anchor="middle",
                rotate=-90,
                role="axis-title",
            )
        )
    return shapes


def legend_shapes(entries: Sequence[LegendEntry], config: ChartConfiguration) -> list[Shape]:
    """Draw a single-row legend right-aligned in the top margin."""

    if not entries or not config.legend:
        return []
    widths = [LEGEND_SWATCH + 4 + len(entry.label) * LEGEND_CHAR_WIDTH for entry in entries]
    total = sum(widths) + LEGEND_ITEM_GAP * (len(entries) - 1)
    x = max(float(config.margin.left), config.width - config.margin.right - total)
    y = max(4.0, config.margin.top - 4.0)
    shapes: list[Shape] = []
    for entry, width in zip(entries, widths):
        shapes.append(RectShape(x, y, LEGEND_SWATCH, LEGEND_SWATCH, fill=entry.color, rx=2, role="legend"))
        shapes.append(TextShape(x + LEGEND_SWATCH + 4, y + LEGEND_SWATCH / 2, entry.label, font_size=10, role="legend"))
        x += width + LEGEND_ITEM_GAP
    return shapes
