"""Two-column sankey layout.

This is a simplified sankey: every source sits in the left column and every
target in the right column, and each column splits its height evenly between
its nodes. Band heights are not proportional to flow. Each data row becomes
one link whose stroke width is proportional to its value, never thinner than
`MIN_LINK_WIDTH`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from analysis.aggregations import group_key
from analysis.curves import flow_link
from analysis.numeric import coerce_number, format_number
from analysis.scales import OrdinalScale

from ..scene import LayoutResult, PathShape, RectShape, Shape, TextShape
from ..schema import ChartConfiguration, DataRow
from .common import distinct, plot_area, tooltip

MIN_LINK_WIDTH = 1.0
MIN_BAND_HEIGHT = 1.0
LINK_OPACITY = 0.4


@dataclass(frozen=True, slots=True)
class SankeyNode:
    """A node band in one of the two columns."""

    name: str
    column: int
    x: float
    y: float
    width: float
    height: float

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2.0


@dataclass(frozen=True, slots=True)
class SankeyLink:
    """One row's flow from a source band to a target band."""

    source: str
    target: str
    value: float
    width: float


def _column(names: tuple[str, ...], *, column: int, x: float, top: float, height: float, node_width: float, gap: float) -> list[SankeyNode]:
    if not names:
        return []
    band = max((height - gap * (len(names) - 1)) / len(names), MIN_BAND_HEIGHT)
    return [
        SankeyNode(name=name, column=column, x=x, y=top + i * (band + gap), width=node_width, height=band)
        for i, name in enumerate(names)
    ]


def layout_sankey(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a two-column sankey diagram.

    Rows whose value is unreadable are treated as zero-value links (drawn at
    the minimum width). Negative values are clamped to zero.
    """

    source_field = config.x_field or ""
    target_field = config.y_field or ""
    measure = config.measure_field or ""

    flows = [
        (group_key(row.get(source_field)), group_key(row.get(target_field)), max(0.0, coerce_number(row.get(measure)) or 0.0))
        for row in rows
    ]
    sources = distinct(source for source, _target, _value in flows)
    targets = distinct(target for _source, target, _value in flows)

    area = plot_area(config)
    node_width = min(config.node_width, area.width / 2.0)
    left = _column(sources, column=0, x=area.x, top=area.y, height=area.height, node_width=node_width, gap=config.node_padding)
    right = _column(
        targets, column=1, x=area.right - node_width, top=area.y, height=area.height, node_width=node_width, gap=config.node_padding
    )
    by_source = {node.name: node for node in left}
    by_target = {node.name: node for node in right}

    min_band = min((node.height for node in left + right), default=MIN_BAND_HEIGHT)
    largest = max((value for _s, _t, value in flows), default=0.0)
    links = tuple(
        SankeyLink(
            source=source,
            target=target,
            value=value,
            width=max(MIN_LINK_WIDTH, value / largest * min_band if largest > 0 else 0.0),
        )
        for source, target, value in flows
    )

    source_colors = OrdinalScale(domain=sources, colors=config.colors or ())
    shapes: list[Shape] = []
    for link in links:
        start = by_source[link.source]
        end = by_target[link.target]
        shapes.append(
            PathShape(
                commands=flow_link(start.x + start.width, start.mid_y, end.x, end.mid_y),
                fill=None,
                stroke=source_colors(link.source),
                stroke_width=link.width,
                opacity=LINK_OPACITY,
                role="link",
                tooltip=tooltip(config, f"{link.source} → {link.target}: {format_number(link.value)}"),
            )
        )
    for node in left + right:
        color = source_colors(node.name) if node.column == 0 else "#6b7280"
        shapes.append(RectShape(node.x, node.y, node.width, node.height, fill=color, role="node", tooltip=tooltip(config, node.name)))
        if node.column == 0:
            shapes.append(TextShape(node.x + node.width + 6, node.mid_y, node.name, font_size=11, role="node-label"))
        else:
            shapes.append(TextShape(node.x - 6, node.mid_y, node.name, font_size=11, anchor="end", role="node-label"))

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        meta={"nodes": tuple(left + right), "links": links},
    )
