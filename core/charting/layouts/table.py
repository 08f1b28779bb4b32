"""Table layout: header and zebra-striped body rows as rect/text shapes."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from analysis.numeric import format_value

from ..bindings import table_columns
from ..scene import LayoutResult, LineShape, RectShape, Shape, TextShape
from ..schema import ChartConfiguration, DataRow
from .common import GRID_COLOR

ROW_HEIGHT = 24.0
HEADER_FILL = "#f3f4f6"
STRIPE_FILL = "#f9fafb"
CELL_PADDING = 8.0


def layout_table(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a table.

    Columns are the series fields when given, else the first row's keys.
    Numeric cells are right-aligned and formatted with thousands separators.
    The surface grows taller than `config.height` when the rows need it.
    """

    columns = table_columns(config, rows)
    headers = {series.field: series.display_label for series in config.series}
    margin = config.margin
    width = max(0.0, config.width - margin.left - margin.right)
    column_width = width / len(columns) if columns else width
    top = float(margin.top)
    height = max(float(config.height), top + ROW_HEIGHT * (len(rows) + 1) + margin.bottom)

    shapes: list[Shape] = []
    shapes.append(RectShape(margin.left, top, width, ROW_HEIGHT, fill=HEADER_FILL, role="header"))
    for col, column in enumerate(columns):
        shapes.append(
            TextShape(
                margin.left + col * column_width + CELL_PADDING,
                top + ROW_HEIGHT / 2.0,
                headers.get(column, column),
                bold=True,
                role="header",
            )
        )

    cells: list[tuple[str, ...]] = []
    for index, row in enumerate(rows):
        y = top + ROW_HEIGHT * (index + 1)
        if index % 2 == 1:
            shapes.append(RectShape(margin.left, y, width, ROW_HEIGHT, fill=STRIPE_FILL, role="stripe"))
        texts: list[str] = []
        for col, column in enumerate(columns):
            value = row.get(column)
            text = format_value(value)
            texts.append(text)
            numeric = isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)
            x0 = margin.left + col * column_width
            if numeric:
                shapes.append(TextShape(x0 + column_width - CELL_PADDING, y + ROW_HEIGHT / 2.0, text, anchor="end", role="cell"))
            else:
                shapes.append(TextShape(x0 + CELL_PADDING, y + ROW_HEIGHT / 2.0, text, role="cell"))
        cells.append(tuple(texts))
        shapes.append(LineShape(margin.left, y + ROW_HEIGHT, margin.left + width, y + ROW_HEIGHT, stroke=GRID_COLOR, role="grid"))

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        meta={"columns": columns, "cells": tuple(cells)},
    )
