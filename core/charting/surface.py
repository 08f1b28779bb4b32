"""Retained SVG drawing surface.

A `DrawingSurface` owns its element list and gradient definitions. `paint`
creates a fresh surface per layout and replays the layout's shapes onto it;
nothing here reads or writes module-level state, so any number of charts can
be painted side by side.
"""

from __future__ import annotations

from html import escape

from analysis.curves import fmt, path_to_svg

from .scene import CircleShape, LayoutResult, LinearGradient, LineShape, PathShape, RectShape, Shape, TextShape

FONT_FAMILY = "Inter, -apple-system, 'Segoe UI', Helvetica, Arial, sans-serif"


def _attrs(**values: object) -> str:
    """Serialize attributes, skipping None; underscores become dashes."""

    parts: list[str] = []
    for name, value in values.items():
        if value is None:
            continue
        if isinstance(value, float):
            value = fmt(value)
        parts.append(f'{name.rstrip("_").replace("_", "-")}="{escape(str(value), quote=True)}"')
    return " ".join(parts)


def _with_tooltip(tag: str, attrs: str, tooltip: str | None) -> str:
    if tooltip:
        return f"<{tag} {attrs}><title>{escape(tooltip)}</title></{tag}>"
    return f"<{tag} {attrs}/>"


class DrawingSurface:
    """An SVG surface that accumulates draw commands.

    Args:
        width: Surface width in pixels.
        height: Surface height in pixels.
        title: Optional accessible title.
        background_color: Optional background fill.
        element_id: Prefix for ids (gradients) so several surfaces can share a page.
    """

    def __init__(
        self,
        *,
        width: float,
        height: float,
        title: str | None = None,
        background_color: str | None = None,
        element_id: str = "chart",
    ) -> None:
        self.width = width
        self.height = height
        self.title = title
        self.background_color = background_color
        self.element_id = element_id
        self._shapes: list[Shape] = []
        self._elements: list[str] = []
        self._defs: list[str] = []

    @property
    def shapes(self) -> tuple[Shape, ...]:
        """Shapes drawn so far, in paint order."""

        return tuple(self._shapes)

    def draw(self, shape: Shape) -> None:
        """Append one shape to the surface."""

        element = self._element(shape)
        self._shapes.append(shape)
        self._elements.append(element)

    def _element(self, shape: Shape) -> str:
        if isinstance(shape, RectShape):
            attrs = _attrs(
                x=float(shape.x),
                y=float(shape.y),
                width=float(shape.width),
                height=float(shape.height),
                rx=float(shape.rx) if shape.rx else None,
                fill=shape.fill or "none",
                stroke=shape.stroke,
                stroke_width=float(shape.stroke_width) if shape.stroke else None,
                opacity=float(shape.opacity) if shape.opacity < 1 else None,
                data_role=shape.role,
            )
            return _with_tooltip("rect", attrs, shape.tooltip)
        if isinstance(shape, PathShape):
            attrs = _attrs(
                d=path_to_svg(shape.commands),
                fill=shape.fill or "none",
                stroke=shape.stroke,
                stroke_width=float(shape.stroke_width) if shape.stroke else None,
                opacity=float(shape.opacity) if shape.opacity < 1 else None,
                data_role=shape.role,
            )
            return _with_tooltip("path", attrs, shape.tooltip)
        if isinstance(shape, CircleShape):
            attrs = _attrs(
                cx=float(shape.cx),
                cy=float(shape.cy),
                r=float(shape.r),
                fill=shape.fill or "none",
                stroke=shape.stroke,
                stroke_width=float(shape.stroke_width) if shape.stroke else None,
                opacity=float(shape.opacity) if shape.opacity < 1 else None,
                data_role=shape.role,
            )
            return _with_tooltip("circle", attrs, shape.tooltip)
        if isinstance(shape, LineShape):
            attrs = _attrs(
                x1=float(shape.x1),
                y1=float(shape.y1),
                x2=float(shape.x2),
                y2=float(shape.y2),
                stroke=shape.stroke,
                stroke_width=float(shape.stroke_width),
                stroke_dasharray=" ".join(fmt(d) for d in shape.dash) if shape.dash else None,
                opacity=float(shape.opacity) if shape.opacity < 1 else None,
                data_role=shape.role,
            )
            return f"<line {attrs}/>"
        if isinstance(shape, TextShape):
            attrs = _attrs(
                x=float(shape.x),
                y=float(shape.y),
                font_size=float(shape.font_size),
                fill=shape.fill,
                text_anchor=shape.anchor,
                dominant_baseline="middle",
                font_weight="bold" if shape.bold else None,
                transform=f"rotate({fmt(shape.rotate)} {fmt(shape.x)} {fmt(shape.y)})" if shape.rotate else None,
                data_role=shape.role,
            )
            return f"<text {attrs}>{escape(shape.text)}</text>"
        if isinstance(shape, LinearGradient):
            gradient_id = f"{self.element_id}-{shape.id}"
            stops = "".join(f"<stop {_attrs(offset=float(stop.offset), stop_color=stop.color)}/>" for stop in shape.stops)
            direction = _attrs(x1="0", y1="0", x2="1", y2="0")
            self._defs.append(f'<linearGradient id="{escape(gradient_id)}" {direction}>{stops}</linearGradient>')
            attrs = _attrs(
                x=float(shape.x),
                y=float(shape.y),
                width=float(shape.width),
                height=float(shape.height),
                fill=f"url(#{gradient_id})",
                data_role=shape.role,
            )
            return f"<rect {attrs}/>"
        raise TypeError(f"Unsupported shape: {type(shape).__name__}")

    def to_svg(
        self,
        *,
        width: float | None = None,
        height: float | None = None,
        background_color: str | None = None,
    ) -> str:
        """Serialize the surface as a standalone SVG document.

        Args:
            width: Output width; the drawing is scaled via the viewBox.
            height: Output height.
            background_color: Overrides the surface background for this output only.
        """

        out_width = width or self.width
        out_height = height or self.height
        background_fill = background_color or self.background_color
        header = _attrs(
            xmlns="http://www.w3.org/2000/svg",
            width=float(out_width),
            height=float(out_height),
            viewBox=f"0 0 {fmt(self.width)} {fmt(self.height)}",
            font_family=FONT_FAMILY,
            role="img",
        )
        parts = [f"<svg {header}>"]
        if self.title:
            parts.append(f"<title>{escape(self.title)}</title>")
        if self._defs:
            parts.append(f"<defs>{''.join(self._defs)}</defs>")
        if background_fill:
            parts.append(f"<rect {_attrs(x='0', y='0', width=float(self.width), height=float(self.height), fill=background_fill)}/>")
        parts.extend(self._elements)
        parts.append("</svg>")
        return "".join(parts)


def paint(layout: LayoutResult, *, element_id: str = "chart") -> DrawingSurface:
    """Paint a layout onto a new surface.

    Args:
        layout: Computed layout.
        element_id: Id prefix, unique per chart on a page.

    Returns:
        The new DrawingSurface.
    """

    surface = DrawingSurface(
        width=layout.width,
        height=layout.height,
        title=layout.title,
        background_color=layout.background_color,
        element_id=element_id,
    )
    for shape in layout.shapes:
        surface.draw(shape)
    return surface
