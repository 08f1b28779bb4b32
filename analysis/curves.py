"""Path construction: polylines, monotone curves, arcs and flow links.

Paths are tuples of `(command, coordinates)` using only four commands so every
drawing backend can replay them:

- `M x y` move to
- `L x y` line to
- `C x1 y1 x2 y2 x y` cubic Bézier to
- `Z` close the current sub-path

Angles follow the usual chart convention: 0 radians points at 12 o'clock and
angles grow clockwise.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

PathCommand = tuple[str, tuple[float, ...]]
Point = tuple[float, float]

TAU = 2 * math.pi


def linear_path(points: Sequence[Point]) -> tuple[PathCommand, ...]:
    """Return a polyline through the points."""

    if not points:
        return ()
    commands: list[PathCommand] = [("M", (points[0][0], points[0][1]))]
    commands.extend(("L", (x, y)) for x, y in points[1:])
    return tuple(commands)


def monotone_path(points: Sequence[Point]) -> tuple[PathCommand, ...]:
    """Return a monotone cubic interpolation through points sorted by x.

    Uses Fritsch-Carlson tangents, so the curve never overshoots between two
    data points (a smoothed line stays within the y-range of its neighbours).
    """

    count = len(points)
    if count < 3:
        return linear_path(points)

    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    dx = [xs[i + 1] - xs[i] for i in range(count - 1)]
    slopes = [(ys[i + 1] - ys[i]) / dx[i] if dx[i] else 0.0 for i in range(count - 1)]

    tangents = [0.0] * count
    tangents[0] = slopes[0]
    tangents[-1] = slopes[-1]
    for i in range(1, count - 1):
        if slopes[i - 1] * slopes[i] <= 0:
            tangents[i] = 0.0
        else:
            tangents[i] = (slopes[i - 1] + slopes[i]) / 2.0

    for i in range(count - 1):
        if slopes[i] == 0:
            tangents[i] = 0.0
            tangents[i + 1] = 0.0
            continue
        a = tangents[i] / slopes[i]
        b = tangents[i + 1] / slopes[i]
        magnitude = a * a + b * b
        if magnitude > 9:
            tau = 3.0 / math.sqrt(magnitude)
            tangents[i] = tau * a * slopes[i]
            tangents[i + 1] = tau * b * slopes[i]

    commands: list[PathCommand] = [("M", (xs[0], ys[0]))]
    for i in range(count - 1):
        third = dx[i] / 3.0
        commands.append(
            (
                "C",
                (
                    xs[i] + third,
                    ys[i] + third * tangents[i],
                    xs[i + 1] - third,
                    ys[i + 1] - third * tangents[i + 1],
                    xs[i + 1],
                    ys[i + 1],
                ),
            )
        )
    return tuple(commands)


def polar(cx: float, cy: float, radius: float, angle: float) -> Point:
    """Return the point at `angle` (0 = 12 o'clock, clockwise) on a circle."""

    return (cx + radius * math.sin(angle), cy - radius * math.cos(angle))


def _arc_segments(cx: float, cy: float, radius: float, start: float, end: float) -> list[PathCommand]:
    """Approximate a circular arc with cubic Béziers (at most 90 degrees each)."""

    sweep = end - start
    if radius <= 0 or sweep == 0:
        return []
    pieces = max(1, math.ceil(abs(sweep) / (math.pi / 2) - 1e-9))
    step = sweep / pieces
    k = 4.0 / 3.0 * math.tan(step / 4.0)
    commands: list[PathCommand] = []
    for piece in range(pieces):
        a0 = start + step * piece
        a1 = a0 + step
        x0, y0 = polar(cx, cy, radius, a0)
        x3, y3 = polar(cx, cy, radius, a1)
        x1 = x0 + k * radius * math.cos(a0)
        y1 = y0 + k * radius * math.sin(a0)
        x2 = x3 - k * radius * math.cos(a1)
        y2 = y3 - k * radius * math.sin(a1)
        commands.append(("C", (x1, y1, x2, y2, x3, y3)))
    return commands


def annular_sector(
    cx: float,
    cy: float,
    inner_radius: float,
    outer_radius: float,
    start_angle: float,
    end_angle: float,
) -> tuple[PathCommand, ...]:
    """Return a closed path for a pie slice (inner radius 0) or ring segment.

    Args:
        cx: Center x.
        cy: Center y.
        inner_radius: Inner radius; 0 draws a wedge from the center.
        outer_radius: Outer radius.
        start_angle: Start angle in radians.
        end_angle: End angle in radians (clockwise from start).
    """

    commands: list[PathCommand] = []
    if inner_radius <= 0:
        commands.append(("M", (cx, cy)))
        commands.append(("L", polar(cx, cy, outer_radius, start_angle)))
        commands.extend(_arc_segments(cx, cy, outer_radius, start_angle, end_angle))
        commands.append(("Z", ()))
        return tuple(commands)

    commands.append(("M", polar(cx, cy, outer_radius, start_angle)))
    commands.extend(_arc_segments(cx, cy, outer_radius, start_angle, end_angle))
    commands.append(("L", polar(cx, cy, inner_radius, end_angle)))
    commands.extend(_arc_segments(cx, cy, inner_radius, end_angle, start_angle))
    commands.append(("Z", ()))
    return tuple(commands)


def flow_link(x0: float, y0: float, x1: float, y1: float) -> tuple[PathCommand, ...]:
    """Return a horizontal S-shaped cubic link between two band midpoints."""

    mid = (x0 + x1) / 2.0
    return (("M", (x0, y0)), ("C", (mid, y0, mid, y1, x1, y1)))


def diamond(cx: float, cy: float, size: float) -> tuple[PathCommand, ...]:
    """Return a closed diamond marker centered on `(cx, cy)`."""

    half = size / 2.0
    return (
        ("M", (cx, cy - half)),
        ("L", (cx + half, cy)),
        ("L", (cx, cy + half)),
        ("L", (cx - half, cy)),
        ("Z", ()),
    )


def elbow(x0: float, y0: float, x1: float, y1: float, *, offset: float = 8.0) -> tuple[PathCommand, ...]:
    """Return a right-angled connector from `(x0, y0)` to `(x1, y1)`."""

    turn = x0 + offset
    return (("M", (x0, y0)), ("L", (turn, y0)), ("L", (turn, y1)), ("L", (x1, y1)))


def fmt(value: float) -> str:
    """Format a coordinate compactly (two decimals, trailing zeros trimmed)."""

    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def path_to_svg(commands: Sequence[PathCommand]) -> str:
    """Serialize path commands into an SVG `d` attribute."""

    parts: list[str] = []
    for command, coords in commands:
        if command == "Z":
            parts.append("Z")
            continue
        pairs = [f"{fmt(coords[i])},{fmt(coords[i + 1])}" for i in range(0, len(coords), 2)]
        parts.append(command + " ".join(pairs))
    return "".join(parts)
