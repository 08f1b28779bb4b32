"""Color palettes and color interpolation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

DEFAULT_PALETTE: Final[tuple[str, ...]] = (
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#06b6d4",
    "#ec4899",
    "#84cc16",
    "#f97316",
    "#6366f1",
)

SEQUENTIAL_RAMP: Final[tuple[str, str]] = ("#eff6ff", "#1e3a8a")
DIVERGING_RAMP: Final[tuple[str, str, str]] = ("#2166ac", "#f7f7f7", "#b2182b")

# Heat overlay buckets, low to high intensity.
HEAT_RAMP: Final[tuple[str, ...]] = ("#3b82f6", "#06b6d4", "#10b981", "#eab308", "#ef4444")


def palette_color(index: int, colors: Sequence[str] | None = None) -> str:
    """Return the palette color for a series/category index.

    Args:
        index: Zero-based position of the series or category.
        colors: Configured palette; falls back to DEFAULT_PALETTE when empty.

    Returns:
        A color string, cycling through the palette.
    """

    palette = tuple(colors) if colors else DEFAULT_PALETTE
    return palette[index % len(palette)]


def parse_hex(color: str) -> tuple[int, int, int]:
    """Parse `#rgb` or `#rrggbb` into an RGB triple.

    Raises:
        ValueError: When the string is not a hex color.
    """

    text = color.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Not a hex color: {color!r}.")
    return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)


def to_hex(rgb: tuple[float, float, float]) -> str:
    """Format an RGB triple (0-255, clamped) as `#rrggbb`."""

    r, g, b = (max(0, min(255, round(channel))) for channel in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def interpolate_color(start: str, end: str, t: float) -> str:
    """Linearly interpolate two hex colors in RGB space.

    Args:
        start: Color at t=0.
        end: Color at t=1.
        t: Interpolation parameter, clamped to [0, 1].
    """

    t = max(0.0, min(1.0, t))
    a = parse_hex(start)
    b = parse_hex(end)
    return to_hex(tuple(a[i] + (b[i] - a[i]) * t for i in range(3)))  # type: ignore[arg-type]


def heat_color(intensity: float) -> str:
    """Return the five-bucket heat ramp color for an intensity in [0, 1]."""

    clamped = max(0.0, min(1.0, intensity))
    bucket = min(int(clamped * len(HEAT_RAMP)), len(HEAT_RAMP) - 1)
    return HEAT_RAMP[bucket]
