"""Export a painted chart surface as PNG, SVG or PDF.

SVG output re-serializes the surface. PNG and PDF replay the surface's draw
commands on a matplotlib figure (Agg canvas) and capture it into memory. The
surface is only read: exporting never changes what is on screen, and a
failed or slow export raises `ExportError` without touching the surface.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Final, Literal, get_args

import matplotlib

matplotlib.use("Agg")

from django.conf import settings  # noqa: E402
from django.core.exceptions import SuspiciousFileOperation  # noqa: E402
from django.utils.text import get_valid_filename  # noqa: E402
from matplotlib.axes import Axes  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402
from matplotlib.lines import Line2D  # noqa: E402
from matplotlib.patches import Circle, PathPatch, Rectangle  # noqa: E402
from matplotlib.path import Path  # noqa: E402

from analysis.curves import PathCommand  # noqa: E402
from analysis.palette import interpolate_color  # noqa: E402

from .scene import CircleShape, GradientStop, LinearGradient, LineShape, PathShape, RectShape, Shape, TextShape  # noqa: E402
from .surface import DrawingSurface  # noqa: E402

logger = logging.getLogger(__name__)

ExportFormat = Literal["png", "svg", "pdf"]
EXPORT_FORMATS: Final[tuple[str, ...]] = get_args(ExportFormat)
CONTENT_TYPES: Final[dict[str, str]] = {
    "png": "image/png",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
}
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_DPI = 100
GRADIENT_STRIPS = 48
_ANCHORS = {"start": "left", "middle": "center", "end": "right"}


class ExportError(Exception):
    """Raised when a chart cannot be exported."""


@dataclass(frozen=True, slots=True)
class ExportArtifact:
    """An exported chart file held in memory."""

    format: str
    content: bytes
    filename: str
    content_type: str


def default_filename(title: str | None, fmt: str) -> str:
    """Return `<title or "chart">.<fmt>` reduced to a safe file name."""

    base = (title or "").strip() or "chart"
    try:
        safe = get_valid_filename(base)
    except SuspiciousFileOperation:
        safe = "chart"
    return f"{safe}.{fmt}"


def _resolve_filename(filename: str | None, title: str | None, fmt: str) -> str:
    if not filename or not filename.strip():
        return default_filename(title, fmt)
    name = filename.strip()
    if name.lower().endswith(f".{fmt}"):
        name = name[: -(len(fmt) + 1)]
    return default_filename(name, fmt)


def export(
    surface: DrawingSurface,
    fmt: str,
    filename: str | None = None,
    *,
    width: float | None = None,
    height: float | None = None,
    background_color: str | None = None,
    timeout: float | None = None,
) -> ExportArtifact:
    """Export a surface.

    Args:
        surface: Painted surface to capture (read only).
        fmt: "png", "svg" or "pdf".
        filename: Optional file name; defaults to the surface title.
        width: Output width in pixels (defaults to the surface width).
        height: Output height in pixels (defaults to the surface height).
        background_color: Background for this export only.
        timeout: Seconds to wait for the capture; defaults to
            `settings.CHART_EXPORT_TIMEOUT_SECONDS`.

    Returns:
        ExportArtifact with the file bytes.

    Raises:
        ExportError: On an unsupported format, invalid size, capture failure
            or timeout.
    """

    fmt = str(fmt or "").strip().lower()
    if fmt not in CONTENT_TYPES:
        raise ExportError(f"Unsupported export format: {fmt or '(none)'}. Use one of: {', '.join(EXPORT_FORMATS)}.")
    out_width = float(width or surface.width)
    out_height = float(height or surface.height)
    if out_width <= 0 or out_height <= 0:
        raise ExportError("Export width and height must be positive.")
    if timeout is None:
        timeout = float(getattr(settings, "CHART_EXPORT_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
    dpi = int(getattr(settings, "CHART_EXPORT_DPI", DEFAULT_DPI))

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chart-export")
    future = executor.submit(
        _capture,
        surface,
        fmt,
        width=out_width,
        height=out_height,
        background_color=background_color or surface.background_color,
        dpi=dpi,
    )
    try:
        content = future.result(timeout=timeout)
    except FutureTimeoutError as exc:
        future.cancel()
        logger.error("Export of %r as %s timed out after %ss", surface.title, fmt, timeout)
        raise ExportError(f"Export timed out after {timeout:g} seconds.") from exc
    except (ValueError, TypeError, RuntimeError, OSError) as exc:
        logger.error("Export of %r as %s failed", surface.title, fmt, exc_info=True)
        raise ExportError(f"Export failed: {exc}") from exc
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return ExportArtifact(
        format=fmt,
        content=content,
        filename=_resolve_filename(filename, surface.title, fmt),
        content_type=CONTENT_TYPES[fmt],
    )


def _capture(
    surface: DrawingSurface,
    fmt: str,
    *,
    width: float,
    height: float,
    background_color: str | None,
    dpi: int,
) -> bytes:
    if fmt == "svg":
        return surface.to_svg(width=width, height=height, background_color=background_color).encode("utf-8")
    return render_figure(
        surface.shapes,
        surface_size=(float(surface.width), float(surface.height)),
        size=(width, height),
        background_color=background_color,
        dpi=dpi,
        fmt=fmt,
    )


def render_figure(
    shapes: Sequence[Shape],
    *,
    surface_size: tuple[float, float],
    size: tuple[float, float],
    background_color: str | None,
    dpi: int,
    fmt: str,
) -> bytes:
    """Replay draw commands on a matplotlib figure and save it.

    The axes use the surface's pixel coordinates with y pointing down, so
    shapes replay without transformation. Line widths and font sizes are
    converted from pixels to points and scaled with the output size.
    """

    surface_width, surface_height = surface_size
    width, height = size
    fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    fig.patch.set_facecolor(background_color or "#ffffff")
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    ax.set_xlim(0, surface_width)
    ax.set_ylim(surface_height, 0)
    ax.set_axis_off()
    ax.patch.set_alpha(0.0)

    # Pixels in surface space to points on the output figure.
    points_per_px = 72.0 / dpi * (width / surface_width if surface_width else 1.0)
    for z, shape in enumerate(shapes):
        _replay(ax, shape, zorder=z, points_per_px=points_per_px)

    buffer = io.BytesIO()
    fig.savefig(buffer, format=fmt, dpi=dpi, facecolor=fig.get_facecolor())
    return buffer.getvalue()


def _mpl_path(commands: Sequence[PathCommand]) -> Path:
    vertices: list[tuple[float, float]] = []
    codes: list[int] = []
    for command, coords in commands:
        if command == "M":
            vertices.append((coords[0], coords[1]))
            codes.append(Path.MOVETO)
        elif command == "L":
            vertices.append((coords[0], coords[1]))
            codes.append(Path.LINETO)
        elif command == "C":
            vertices.extend([(coords[0], coords[1]), (coords[2], coords[3]), (coords[4], coords[5])])
            codes.extend([Path.CURVE4] * 3)
        elif command == "Z":
            vertices.append((0.0, 0.0))
            codes.append(Path.CLOSEPOLY)
        else:
            raise ValueError(f"Unknown path command: {command!r}")
    return Path(vertices, codes)


def _gradient_color(stops: Sequence[GradientStop], offset: float) -> str:
    if offset <= stops[0].offset:
        return stops[0].color
    for left, right in zip(stops, stops[1:]):
        if offset <= right.offset:
            span = right.offset - left.offset
            return interpolate_color(left.color, right.color, 0.0 if span <= 0 else (offset - left.offset) / span)
    return stops[-1].color


def _replay(ax: Axes, shape: Shape, *, zorder: int, points_per_px: float) -> None:
    if isinstance(shape, RectShape):
        ax.add_patch(
            Rectangle(
                (shape.x, shape.y),
                shape.width,
                shape.height,
                facecolor=shape.fill or "none",
                edgecolor=shape.stroke or "none",
                linewidth=shape.stroke_width * points_per_px if shape.stroke else 0.0,
                alpha=shape.opacity,
                zorder=zorder,
            )
        )
    elif isinstance(shape, PathShape):
        ax.add_patch(
            PathPatch(
                _mpl_path(shape.commands),
                facecolor=shape.fill or "none",
                edgecolor=shape.stroke or "none",
                linewidth=shape.stroke_width * points_per_px if shape.stroke else 0.0,
                alpha=shape.opacity,
                zorder=zorder,
            )
        )
    elif isinstance(shape, CircleShape):
        ax.add_patch(
            Circle(
                (shape.cx, shape.cy),
                shape.r,
                facecolor=shape.fill or "none",
                edgecolor=shape.stroke or "none",
                linewidth=shape.stroke_width * points_per_px if shape.stroke else 0.0,
                alpha=shape.opacity,
                zorder=zorder,
            )
        )
    elif isinstance(shape, LineShape):
        line = Line2D(
            [shape.x1, shape.x2],
            [shape.y1, shape.y2],
            color=shape.stroke,
            linewidth=shape.stroke_width * points_per_px,
            alpha=shape.opacity,
            zorder=zorder,
        )
        if shape.dash:
            line.set_dashes([length * points_per_px for length in shape.dash])
        ax.add_line(line)
    elif isinstance(shape, TextShape):
        ax.text(
            shape.x,
            shape.y,
            shape.text,
            fontsize=shape.font_size * points_per_px,
            color=shape.fill,
            ha=_ANCHORS.get(shape.anchor, "left"),
            va="center",
            fontweight="bold" if shape.bold else "normal",
            rotation=-shape.rotate,
            rotation_mode="anchor",
            zorder=zorder,
        )
    elif isinstance(shape, LinearGradient):
        if not shape.stops:
            return
        # Matplotlib patches have no gradient fill; draw thin strips instead.
        for i in range(GRADIENT_STRIPS):
            t0, t1 = i / GRADIENT_STRIPS, (i + 1) / GRADIENT_STRIPS
            color = _gradient_color(shape.stops, (t0 + t1) / 2.0)
            xy = (shape.x + shape.width * t0, shape.y)
            ax.add_patch(Rectangle(xy, shape.width / GRADIENT_STRIPS, shape.height, facecolor=color, edgecolor="none", linewidth=0.0, zorder=zorder))
    else:
        raise TypeError(f"Unsupported shape: {type(shape).__name__}")
