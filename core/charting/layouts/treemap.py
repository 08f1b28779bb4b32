"""Treemap layout over a one-level category hierarchy."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from analysis.hierarchy import rollup
from analysis.numeric import format_number
from analysis.palette import palette_color
from analysis.tiling import squarify

from ..scene import LayoutResult, LegendEntry, RectShape, Shape, TextShape
from ..schema import ChartConfiguration, DataRow
from .common import plot_area, tooltip

MIN_LABEL_WIDTH = 40.0
MIN_LABEL_HEIGHT = 20.0
VALUE_LINE_HEIGHT = 34.0


@dataclass(frozen=True, slots=True)
class TreemapTile:
    """A tile before padding: tiles partition the container exactly."""

    name: str
    value: float
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


def layout_treemap(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a squarified treemap.

    The container is the plot area inset by `padding`. Tiles are computed on
    the container and each drawn cell is shrunk by half the padding on every
    side, leaving a uniform `padding` gap between neighbours. Categories with
    a non-positive total occupy no area.
    """

    root = rollup(rows, category_field=config.category_field or "", value_field=config.value_field or "")
    children = root.positive_children()
    container = plot_area(config).inset(config.padding)
    rects = squarify([child.value for child in children], container.x, container.y, container.width, container.height)
    tiles = tuple(
        TreemapTile(name=child.name, value=child.value, x=x, y=y, width=w, height=h)
        for child, (x, y, w, h) in zip(children, rects)
    )

    half = config.padding / 2.0
    shapes: list[Shape] = []
    legend: list[LegendEntry] = []
    for idx, tile in enumerate(tiles):
        color = palette_color(idx, config.colors)
        legend.append(LegendEntry(label=tile.name, color=color))
        width = max(0.0, tile.width - config.padding)
        height = max(0.0, tile.height - config.padding)
        shapes.append(
            RectShape(
                tile.x + half,
                tile.y + half,
                width,
                height,
                fill=color,
                stroke="#ffffff",
                stroke_width=1.0,
                rx=2.0,
                role="cell",
                tooltip=tooltip(config, f"{tile.name}: {format_number(tile.value)}"),
            )
        )
        if width >= MIN_LABEL_WIDTH and height >= MIN_LABEL_HEIGHT:
            shapes.append(TextShape(tile.x + half + 4, tile.y + half + 10, tile.name, font_size=11, fill="#ffffff", bold=True, role="cell-label"))
            if height >= VALUE_LINE_HEIGHT:
                shapes.append(
                    TextShape(tile.x + half + 4, tile.y + half + 24, format_number(tile.value), font_size=10, fill="#ffffff", role="cell-label")
                )

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        legend=tuple(legend),
        meta={"tiles": tiles, "container": container, "root": root},
    )
