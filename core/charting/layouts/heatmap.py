"""Heatmap layout: an x by y matrix colored on a continuous scale."""

from __future__ import annotations

from collections.abc import Sequence

from analysis.aggregations import group_key
from analysis.numeric import coerce_number, format_number
from analysis.palette import parse_hex
from analysis.scales import BandScale, DivergingColorScale, SequentialColorScale

from ..scene import GradientStop, LayoutResult, LinearGradient, RectShape, Shape, TextShape
from ..schema import ChartConfiguration, DataRow
from .common import MUTED_LABEL_COLOR, category_axis, distinct, plot_area, tooltip

MIN_VALUE_LABEL_WIDTH = 30.0
MIN_VALUE_LABEL_HEIGHT = 16.0
LEGEND_WIDTH = 160.0
LEGEND_HEIGHT = 10.0


def heat_matrix(
    rows: Sequence[DataRow],
    *,
    x_field: str,
    y_field: str,
    value_field: str,
) -> tuple[tuple[str, ...], tuple[str, ...], dict[tuple[str, str], float]]:
    """Build the full x by y matrix.

    Values landing on the same cell are summed. Combinations absent from the
    data, and unreadable values, count as 0.
    """

    xs = distinct(group_key(row.get(x_field)) for row in rows)
    ys = distinct(group_key(row.get(y_field)) for row in rows)
    cells = {(x, y): 0.0 for y in ys for x in xs}
    for row in rows:
        key = (group_key(row.get(x_field)), group_key(row.get(y_field)))
        cells[key] += coerce_number(row.get(value_field)) or 0.0
    return xs, ys, cells


def layout_heatmap(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a heatmap with a gradient legend spanning `[min, max]`.

    The diverging scale centers on the midpoint between min and max.
    """

    xs, ys, cells = heat_matrix(
        rows, x_field=config.x_field or "", y_field=config.y_field or "", value_field=config.measure_field or ""
    )
    values = list(cells.values())
    lo, hi = (min(values), max(values)) if values else (0.0, 0.0)
    if config.color_scale == "diverging":
        color_scale: SequentialColorScale | DivergingColorScale = DivergingColorScale(domain=(lo, (lo + hi) / 2.0, hi))
    else:
        color_scale = SequentialColorScale(domain=(lo, hi))

    area = plot_area(config, legend_rows=1 if config.legend else 0)
    x_bands = BandScale(domain=xs, range=(area.x, area.right), padding_inner=0.05, padding_outer=0.0)
    y_bands = BandScale(domain=ys, range=(area.y, area.bottom), padding_inner=0.05, padding_outer=0.0)

    shapes: list[Shape] = []
    for (x_key, y_key), value in cells.items():
        x, y = x_bands(x_key), y_bands(y_key)
        color = color_scale(value)
        shapes.append(
            RectShape(
                x,
                y,
                x_bands.bandwidth,
                y_bands.bandwidth,
                fill=color,
                role="cell",
                tooltip=tooltip(config, f"{x_key} × {y_key}: {format_number(value)}"),
            )
        )
        if x_bands.bandwidth >= MIN_VALUE_LABEL_WIDTH and y_bands.bandwidth >= MIN_VALUE_LABEL_HEIGHT:
            shapes.append(
                TextShape(
                    x + x_bands.bandwidth / 2.0,
                    y + y_bands.bandwidth / 2.0,
                    format_number(value),
                    font_size=10,
                    fill=_label_color(color),
                    anchor="middle",
                    role="cell-label",
                )
            )
    shapes.extend(category_axis(xs, x_bands, area, horizontal=False))
    shapes.extend(category_axis(ys, y_bands, area, horizontal=True))

    if config.legend:
        legend_x = config.width - config.margin.right - LEGEND_WIDTH
        legend_y = max(4.0, config.margin.top - 4.0)
        shapes.append(
            LinearGradient(
                id="heatmap-legend",
                x=legend_x,
                y=legend_y,
                width=LEGEND_WIDTH,
                height=LEGEND_HEIGHT,
                stops=tuple(GradientStop(offset, color) for offset, color in color_scale.stops()),
            )
        )
        mid_y = legend_y + LEGEND_HEIGHT / 2.0
        shapes.append(TextShape(legend_x - 4, mid_y, format_number(lo), font_size=10, fill=MUTED_LABEL_COLOR, anchor="end", role="legend"))
        shapes.append(
            TextShape(legend_x + LEGEND_WIDTH + 4, mid_y, format_number(hi), font_size=10, fill=MUTED_LABEL_COLOR, role="legend")
        )

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        scales={"x": x_bands, "y": y_bands, "color": color_scale},
        meta={"matrix": cells, "x_values": xs, "y_values": ys, "domain": (lo, hi)},
    )


def _label_color(fill: str) -> str:
    """Pick dark or light text for a cell fill by its luminance."""

    r, g, b = parse_hex(fill)
    return "#111827" if (0.299 * r + 0.587 * g + 0.114 * b) > 150 else "#ffffff"
