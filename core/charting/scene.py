"""Renderer-agnostic scene graph produced by chart layouts.

A layout never draws. It returns a `LayoutResult`: an immutable sequence of
positioned primitives (rectangles, paths, circles, lines, text, gradients)
plus the scales it used. Drawing backends (the SVG surface, the matplotlib
export replay) consume only these primitives.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from analysis.curves import PathCommand

TextAnchor = Literal["start", "middle", "end"]


@dataclass(frozen=True, slots=True)
class RectShape:
    """An axis-aligned rectangle."""

    x: float
    y: float
    width: float
    height: float
    fill: str | None
    stroke: str | None = None
    stroke_width: float = 0.0
    opacity: float = 1.0
    rx: float = 0.0
    role: str = "mark"
    tooltip: str | None = None


@dataclass(frozen=True, slots=True)
class PathShape:
    """An arbitrary path (see `analysis.curves` for the command set)."""

    commands: tuple[PathCommand, ...]
    fill: str | None
    stroke: str | None = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    role: str = "mark"
    tooltip: str | None = None


@dataclass(frozen=True, slots=True)
class CircleShape:
    """A circle marker."""

    cx: float
    cy: float
    r: float
    fill: str | None
    stroke: str | None = None
    stroke_width: float = 0.0
    opacity: float = 1.0
    role: str = "mark"
    tooltip: str | None = None


@dataclass(frozen=True, slots=True)
class LineShape:
    """A straight line segment."""

    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    stroke_width: float = 1.0
    dash: tuple[float, ...] | None = None
    opacity: float = 1.0
    role: str = "mark"


@dataclass(frozen=True, slots=True)
class TextShape:
    """A single-line text label anchored at `(x, y)` (vertically centered)."""

    x: float
    y: float
    text: str
    font_size: float = 11.0
    fill: str = "#374151"
    anchor: TextAnchor = "start"
    bold: bool = False
    rotate: float = 0.0
    role: str = "label"


@dataclass(frozen=True, slots=True)
class GradientStop:
    """A color stop at `offset` in [0, 1]."""

    offset: float
    color: str


@dataclass(frozen=True, slots=True)
class LinearGradient:
    """A rectangle filled with a linear gradient (used by color legends)."""

    id: str
    x: float
    y: float
    width: float
    height: float
    stops: tuple[GradientStop, ...]
    role: str = "legend"


Shape = RectShape | PathShape | CircleShape | LineShape | TextShape | LinearGradient


@dataclass(frozen=True, slots=True)
class LegendEntry:
    """A legend swatch."""

    label: str
    color: str


@dataclass(frozen=True, slots=True)
class LayoutResult:
    """The fully computed geometry for one chart render.

    Attributes:
        chart_type: Chart type tag that produced the layout.
        width: Surface width in pixels.
        height: Surface height in pixels.
        shapes: Draw commands in paint order.
        title: Optional chart title (used for export filenames).
        background_color: Optional background color.
        scales: Named scale objects used by the layout.
        legend: Legend entries (already included in `shapes` when drawn).
        meta: Family-specific computed values (statistics, spans, intervals).
        spec: Optional declarative payload (Chart.js-style) for cartesian charts.
    """

    chart_type: str
    width: float
    height: float
    shapes: tuple[Shape, ...]
    title: str | None = None
    background_color: str | None = None
    scales: Mapping[str, Any] = field(default_factory=dict)
    legend: tuple[LegendEntry, ...] = ()
    meta: Mapping[str, Any] = field(default_factory=dict)
    spec: Mapping[str, Any] | None = None

    def shapes_with_role(self, role: str) -> tuple[Shape, ...]:
        """Return the shapes tagged with `role`, in paint order."""

        return tuple(shape for shape in self.shapes if shape.role == role)
