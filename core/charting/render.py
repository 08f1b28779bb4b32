"""Chart dispatch: turn a configuration and rows into a render outcome.

`render` is the single entry point hosting pages call. It never raises for
bad input: empty data, unknown chart types, missing field bindings and
layout failures on malformed values all come back as outcome values the
host shell can display.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from functools import partial

from .bindings import validate_bindings
from .layouts import (
    layout_box_plot,
    layout_cartesian,
    layout_gantt,
    layout_geo,
    layout_heatmap,
    layout_pie,
    layout_sankey,
    layout_sunburst,
    layout_table,
    layout_treemap,
    layout_waterfall,
)
from .scene import LayoutResult
from .schema import CHART_TYPES, ChartConfiguration, DataRow
from .transforms import apply_row_transforms

logger = logging.getLogger(__name__)

LayoutFunction = Callable[[ChartConfiguration, Sequence[DataRow]], LayoutResult]


@dataclass(frozen=True, slots=True)
class Rendered:
    """A successfully laid out chart."""

    layout: LayoutResult
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ConfigError:
    """The configuration cannot be drawn as declared."""

    reason: str
    errors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class EmptyData:
    """A valid request with no rows to draw."""


@dataclass(frozen=True, slots=True)
class UnsupportedType:
    """The declared chart type has no layout."""

    chart_type: str


RenderOutcome = Rendered | ConfigError | EmptyData | UnsupportedType

LAYOUTS: dict[str, LayoutFunction] = {
    "BAR": layout_cartesian,
    "COLUMN": layout_cartesian,
    "LINE": layout_cartesian,
    "AREA": layout_cartesian,
    "SCATTER": layout_cartesian,
    "PIE": layout_pie,
    "TABLE": layout_table,
    "HEATMAP": layout_heatmap,
    "TREEMAP": layout_treemap,
    "SUNBURST": layout_sunburst,
    "WATERFALL": layout_waterfall,
    "BOX_PLOT": layout_box_plot,
    "SANKEY": layout_sankey,
    "GANTT": layout_gantt,
    "MAP_CHOROPLETH": layout_geo,
    "MAP_POINT": layout_geo,
    "MAP_HEAT": layout_geo,
}

_missing_layouts = sorted(set(CHART_TYPES) - set(LAYOUTS))
if _missing_layouts:
    raise RuntimeError(f"No layout registered for chart types: {', '.join(_missing_layouts)}")

# Exceptions a layout may raise on malformed values; anything else is a bug.
LAYOUT_ERRORS = (ValueError, TypeError, ZeroDivisionError, KeyError, OverflowError)


def render(
    config: ChartConfiguration,
    data: Sequence[DataRow] | None,
    *,
    now: datetime | None = None,
) -> RenderOutcome:
    """Render one chart.

    Guards run in a fixed order so "no data yet" is always reported before
    "misconfigured": empty data, then unsupported type, then field bindings.

    Args:
        config: Chart configuration.
        data: Data rows (None is treated as empty).
        now: Optional reference instant for time-dependent layouts (gantt).

    Returns:
        A RenderOutcome.
    """

    rows = tuple(data or ())
    if not rows:
        logger.debug("Render %s: no data", config.type)
        return EmptyData()

    layout_fn = LAYOUTS.get(config.type)
    if layout_fn is None:
        logger.debug("Render %s: unsupported chart type", config.type)
        return UnsupportedType(chart_type=config.type)

    validation = validate_bindings(config, rows)
    if not validation.is_valid:
        logger.debug("Render %s: invalid bindings: %s", config.type, validation.errors)
        return ConfigError(reason=" ".join(validation.errors), errors=validation.errors)

    transformed = apply_row_transforms(config, rows)
    if now is not None and layout_fn is layout_gantt:
        layout_fn = partial(layout_gantt, now=now)
    try:
        layout = layout_fn(config, transformed.rows)
    except LAYOUT_ERRORS as exc:
        logger.warning("Layout failed for %s chart %r", config.type, config.title, exc_info=True)
        return ConfigError(reason=f"The {config.type} layout could not use this data: {exc}")

    logger.debug("Render %s: %d rows, %d shapes", config.type, len(transformed.rows), len(layout.shapes))
    return Rendered(layout=layout, warnings=validation.warnings + transformed.warnings)


def render_many(
    charts: Iterable[tuple[ChartConfiguration, Sequence[DataRow] | None]],
    *,
    now: datetime | None = None,
) -> tuple[RenderOutcome, ...]:
    """Render several charts independently (one outcome per chart, in order)."""

    return tuple(render(config, data, now=now) for config, data in charts)
