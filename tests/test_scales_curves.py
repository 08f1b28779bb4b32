"""Unit tests for scales, palettes and path construction."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from analysis.curves import TAU, annular_sector, diamond, fmt, linear_path, monotone_path, path_to_svg, polar
from analysis.palette import DEFAULT_PALETTE, heat_color, interpolate_color, palette_color, parse_hex
from analysis.scales import (
    BandScale,
    DivergingColorScale,
    LinearScale,
    OrdinalScale,
    SequentialColorScale,
    TimeScale,
    extent,
    linear_ticks,
)

pytestmark = pytest.mark.unit


def test_linear_scale_maps_and_inverts() -> None:
    """Domain endpoints map onto range endpoints and back."""

    scale = LinearScale(domain=(0, 100), range=(400, 0))
    assert scale(0) == 400
    assert scale(100) == 0
    assert scale(25) == 300
    assert scale.invert(300) == 25


def test_linear_scale_nice_extends_domain() -> None:
    """Nice domains round outward to tick boundaries."""

    scale = LinearScale(domain=(0, 97), range=(0, 1)).nice()
    assert scale.domain == (0, 100)
    assert linear_ticks(0, 100, 5) == [0, 20, 40, 60, 80, 100]


def test_band_scale_positions_are_evenly_spaced() -> None:
    """Bands share one width and are separated by a constant step."""

    bands = BandScale(domain=("a", "b", "c"), range=(0, 300), padding_inner=0.2, padding_outer=0.1)
    starts = [bands(key) for key in ("a", "b", "c")]
    assert starts[1] - starts[0] == pytest.approx(bands.step)
    assert starts[2] - starts[1] == pytest.approx(bands.step)
    assert bands.center("b") == pytest.approx(150)
    with pytest.raises(KeyError):
        bands("missing")


def test_time_scale_ticks_are_inside_domain() -> None:
    """Ticks are day-aligned and within the domain."""

    start = datetime(2026, 1, 1, tzinfo=UTC)
    end = datetime(2026, 1, 29, tzinfo=UTC)
    scale = TimeScale(domain=(start, end), range=(0, 280))
    ticks = scale.ticks()
    assert ticks[0] == start
    assert all(start <= tick <= end for tick in ticks)
    assert scale(datetime(2026, 1, 15, tzinfo=UTC)) == pytest.approx(140)


def test_time_scale_ticks_stop_at_the_last_representable_day() -> None:
    """A domain ending on the final calendar day yields ticks without overflowing."""

    start = datetime(9999, 12, 20, tzinfo=UTC)
    end = datetime(9999, 12, 31, 12, tzinfo=UTC)
    ticks = TimeScale(domain=(start, end), range=(0, 100)).ticks()
    assert ticks[0] == start
    assert ticks[-1] <= end
    assert TimeScale(domain=(end, datetime(9999, 12, 31, 23, tzinfo=UTC)), range=(0, 100)).ticks() == []


def test_color_scales_hit_ramp_endpoints() -> None:
    """Sequential and diverging ramps return their end colors at the domain ends."""

    sequential = SequentialColorScale(domain=(0, 10))
    assert sequential(0) == sequential.colors[0]
    assert sequential(10) == sequential.colors[1]
    diverging = DivergingColorScale(domain=(-5, 0, 5))
    assert diverging(-5) == diverging.colors[0]
    assert diverging(0) == diverging.colors[1]
    assert diverging(5) == diverging.colors[2]
    assert [offset for offset, _color in diverging.stops()] == [0.0, 0.25, 0.5, 0.75, 1.0]


def test_extent_handles_empty_and_zero_inclusion() -> None:
    """Empty input yields (0, 1); include_zero widens the extent."""

    assert extent([]) == (0.0, 1.0)
    assert extent([3, 7]) == (3, 7)
    assert extent([3, 7], include_zero=True) == (0.0, 7)


def test_palette_color_cycles_and_honors_overrides() -> None:
    """Indexes wrap around the palette; configured colors replace the default."""

    assert palette_color(0) == DEFAULT_PALETTE[0]
    assert palette_color(len(DEFAULT_PALETTE)) == DEFAULT_PALETTE[0]
    assert palette_color(3, ["#111111", "#222222"]) == "#222222"


def test_ordinal_scale_assigns_palette_colors_by_category() -> None:
    """Categories take palette colors in domain order; unknown keys come next."""

    scale = OrdinalScale(domain=("north", "south"), colors=("#111111", "#222222", "#333333"))
    assert scale("north") == "#111111"
    assert scale("south") == "#222222"
    assert scale("east") == "#333333"
    assert OrdinalScale(domain=("a",))("a") == DEFAULT_PALETTE[0]


def test_color_helpers() -> None:
    """Hex parsing, interpolation and heat buckets."""

    assert parse_hex("#fff") == (255, 255, 255)
    assert interpolate_color("#000000", "#ffffff", 0.5) == "#808080"
    assert heat_color(0.0) == "#3b82f6"
    assert heat_color(1.0) == "#ef4444"
    with pytest.raises(ValueError):
        parse_hex("blue")


def test_monotone_path_does_not_overshoot() -> None:
    """Control points stay within the y-range of the segment they bend."""

    points = [(0.0, 0.0), (10.0, 10.0), (20.0, 10.0), (30.0, 0.0)]
    commands = monotone_path(points)
    assert commands[0] == ("M", (0.0, 0.0))
    ys = [coords[i] for command, coords in commands if command == "C" for i in (1, 3, 5)]
    assert min(ys) >= 0.0
    assert max(ys) <= 10.0


def test_short_paths_fall_back_to_polylines() -> None:
    """Fewer than three points produce a straight polyline."""

    assert monotone_path([(0, 0), (1, 1)]) == linear_path([(0, 0), (1, 1)])
    assert linear_path([]) == ()


def test_polar_and_annular_sector_geometry() -> None:
    """Angle zero points up; sectors are closed paths."""

    x, y = polar(100, 100, 50, 0)
    assert (x, y) == pytest.approx((100, 50))
    x, y = polar(100, 100, 50, TAU / 4)
    assert (x, y) == pytest.approx((150, 100))
    sector = annular_sector(100, 100, 20, 50, 0, TAU / 4)
    assert sector[0][0] == "M"
    assert sector[-1] == ("Z", ())


def test_path_serialization() -> None:
    """Commands serialize into a compact SVG path string."""

    assert path_to_svg(diamond(10, 10, 4)) == "M10,8L12,10L10,12L8,10Z"
    assert fmt(1.005) in {"1", "1.01"}
    assert fmt(-0.001) == "0"
