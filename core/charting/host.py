"""Chart host shell: turn a render outcome into what the page displays.

The shell is deliberately thin. It maps each outcome to one of four display
states and a human-readable message, paints rendered layouts onto a fresh
surface, and lists the export formats offered for a drawn chart.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Literal

from .export import EXPORT_FORMATS
from .render import ConfigError, EmptyData, Rendered, RenderOutcome, UnsupportedType
from .schema import ChartConfiguration
from .surface import DrawingSurface, paint

HostStateKind = Literal["chart", "error", "empty", "loading"]

LOADING_MESSAGE = "Loading chart…"
EMPTY_MESSAGE = "No data available for this chart."


@dataclass(frozen=True, slots=True)
class HostState:
    """Everything a page needs to show one chart slot.

    Attributes:
        state: Display state.
        message: Human-readable status line (empty for drawn charts).
        title: Chart title, when configured.
        description: Chart description, when configured.
        surface: Painted surface for drawn charts.
        warnings: Non-fatal render warnings.
        export_formats: Export formats offered (only for drawn charts).
        meta: Family-specific values computed by the layout.
    """

    state: HostStateKind
    message: str = ""
    title: str | None = None
    description: str | None = None
    surface: DrawingSurface | None = None
    warnings: tuple[str, ...] = ()
    export_formats: tuple[str, ...] = ()
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def svg(self) -> str:
        """Inline SVG markup for drawn charts, else an empty string."""

        return self.surface.to_svg() if self.surface is not None else ""


def outcome_message(outcome: RenderOutcome) -> str:
    """Return the status message for a non-drawn outcome."""

    if isinstance(outcome, EmptyData):
        return EMPTY_MESSAGE
    if isinstance(outcome, ConfigError):
        return f"Chart configuration error: {outcome.reason}"
    if isinstance(outcome, UnsupportedType):
        return f"Unsupported chart type: {outcome.chart_type}"
    return ""


def build_host_state(
    outcome: RenderOutcome | None,
    *,
    config: ChartConfiguration | None = None,
    loading: bool = False,
    element_id: str = "chart",
) -> HostState:
    """Build the display state for one chart slot.

    Args:
        outcome: Render outcome (ignored while loading).
        config: Configuration the outcome came from; supplies title and description.
        loading: True while the data for the chart is still being fetched.
        element_id: Id prefix for the painted surface, unique per page slot.

    Returns:
        HostState for the slot.
    """

    title = config.title if config is not None else None
    description = config.description if config is not None else None
    if loading or outcome is None:
        return HostState(state="loading", message=LOADING_MESSAGE, title=title, description=description)
    if isinstance(outcome, Rendered):
        return HostState(
            state="chart",
            title=title,
            description=description,
            surface=paint(outcome.layout, element_id=element_id),
            warnings=outcome.warnings,
            export_formats=EXPORT_FORMATS,
            meta=dict(outcome.layout.meta),
        )
    if isinstance(outcome, EmptyData):
        return HostState(state="empty", message=outcome_message(outcome), title=title, description=description)
    return HostState(state="error", message=outcome_message(outcome), title=title, description=description)


def jsonable(value: object) -> Any:
    """Convert layout metadata into JSON-serializable values.

    Dataclasses become objects, tuples become lists, dates become ISO
    strings, tuple keys are joined with "|" and non-finite floats become
    None.
    """

    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return jsonable(float(value))
    if isinstance(value, date):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {item.name: jsonable(getattr(value, item.name)) for item in fields(value)}
    if isinstance(value, Mapping):
        return {
            "|".join(str(part) for part in key) if isinstance(key, tuple) else str(key): jsonable(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [jsonable(item) for item in value]
    return str(value)
