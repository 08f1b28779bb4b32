"""Unit tests for the SVG drawing surface."""

from __future__ import annotations

import pytest

from core.charting.scene import (
    CircleShape,
    GradientStop,
    LayoutResult,
    LegendEntry,
    LinearGradient,
    LineShape,
    PathShape,
    RectShape,
    TextShape,
)
from core.charting.surface import DrawingSurface, paint

pytestmark = pytest.mark.unit


def test_surface_serializes_shapes_in_paint_order() -> None:
    """Each shape becomes one SVG element tagged with its role."""

    surface = DrawingSurface(width=200, height=100, title="Demo")
    surface.draw(RectShape(10, 20, 30, 40, fill="#ff0000", role="bar"))
    surface.draw(CircleShape(5, 5, 2, fill=None, stroke="#000000", stroke_width=1.5, role="point"))
    surface.draw(LineShape(0, 0, 10, 0, stroke="#cccccc", dash=(3.0, 2.0), role="connector"))
    surface.draw(PathShape(commands=(("M", (0, 0)), ("L", (5, 5))), fill=None, stroke="#00ff00", role="line"))
    svg = surface.to_svg()

    assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" width="200" height="100" viewBox="0 0 200 100"')
    assert svg.endswith("</svg>")
    assert "<title>Demo</title>" in svg
    assert '<rect x="10" y="20" width="30" height="40" fill="#ff0000" data-role="bar"/>' in svg
    assert 'fill="none" stroke="#000000" stroke-width="1.5" data-role="point"' in svg
    assert 'stroke-dasharray="3 2"' in svg
    assert 'd="M0,0L5,5"' in svg
    assert svg.index('data-role="bar"') < svg.index('data-role="point"') < svg.index('data-role="line"')
    assert len(surface.shapes) == 4


def test_text_and_tooltips_are_escaped() -> None:
    """Label and tooltip text is escaped for XML."""

    surface = DrawingSurface(width=10, height=10)
    surface.draw(TextShape(1, 2, "R&D <core>", anchor="middle", bold=True, rotate=-45))
    surface.draw(RectShape(0, 0, 1, 1, fill="#000000", tooltip='Q1 "best" & <all>'))
    svg = surface.to_svg()
    assert ">R&amp;D &lt;core&gt;</text>" in svg
    assert 'text-anchor="middle"' in svg
    assert 'font-weight="bold"' in svg
    assert 'transform="rotate(-45 1 2)"' in svg
    assert "<title>Q1 &quot;best&quot; &amp; &lt;all&gt;</title>" in svg


def test_gradient_ids_are_prefixed_with_the_element_id() -> None:
    """Two surfaces on one page never share gradient ids."""

    gradient = LinearGradient(
        id="legend",
        x=0,
        y=0,
        width=100,
        height=10,
        stops=(GradientStop(0.0, "#000000"), GradientStop(1.0, "#ffffff")),
    )
    first = DrawingSurface(width=100, height=20, element_id="chart-a")
    second = DrawingSurface(width=100, height=20, element_id="chart-b")
    first.draw(gradient)
    second.draw(gradient)
    assert '<linearGradient id="chart-a-legend"' in first.to_svg()
    assert 'fill="url(#chart-a-legend)"' in first.to_svg()
    assert '<linearGradient id="chart-b-legend"' in second.to_svg()
    assert "<defs>" in first.to_svg()


def test_background_override_applies_to_one_output_only() -> None:
    """`to_svg(background_color=...)` does not change the surface."""

    surface = DrawingSurface(width=50, height=40, background_color="#ffffff")
    assert 'fill="#ffffff"' in surface.to_svg()
    resized = surface.to_svg(width=100, height=80, background_color="#000000")
    assert 'width="100" height="80" viewBox="0 0 50 40"' in resized
    assert 'fill="#000000"' in resized
    assert surface.background_color == "#ffffff"
    assert 'fill="#000000"' not in surface.to_svg()


def test_unknown_shapes_are_rejected() -> None:
    """Only scene shapes can be drawn."""

    surface = DrawingSurface(width=10, height=10)
    with pytest.raises(TypeError):
        surface.draw(LegendEntry(label="x", color="#000000"))  # type: ignore[arg-type]
    assert surface.shapes == ()


def test_paint_builds_a_fresh_surface_per_layout() -> None:
    """Painting copies size, title and shapes onto a new surface."""

    layout = LayoutResult(
        chart_type="TABLE",
        width=300,
        height=120,
        shapes=(RectShape(0, 0, 10, 10, fill="#eeeeee", role="header"),),
        title="Orders",
        background_color="#fafafa",
    )
    first = paint(layout, element_id="one")
    second = paint(layout, element_id="two")
    assert first is not second
    assert (first.width, first.height, first.title) == (300, 120, "Orders")
    assert first.shapes == layout.shapes
    first.draw(RectShape(1, 1, 1, 1, fill="#000000"))
    assert len(second.shapes) == 1
