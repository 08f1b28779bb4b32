"""Scale objects mapping data values onto pixel or color ranges.

Scales are small immutable value objects so layouts can return them alongside
the shapes they positioned (the host and tests can reuse the exact mapping).
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .palette import DIVERGING_RAMP, SEQUENTIAL_RAMP, interpolate_color, palette_color

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def tick_step(start: float, stop: float, count: int) -> float:
    """Return a "nice" tick step (1, 2 or 5 times a power of ten)."""

    span = abs(stop - start)
    if span == 0 or count <= 0:
        return 0.0
    raw = span / count
    power = 10 ** math.floor(math.log10(raw))
    error = raw / power
    if error >= _E10:
        power *= 10
    elif error >= _E5:
        power *= 5
    elif error >= _E2:
        power *= 2
    return power


def linear_ticks(start: float, stop: float, count: int = 5) -> list[float]:
    """Return nicely rounded tick values covering [start, stop].

    Args:
        start: Domain start.
        stop: Domain end.
        count: Approximate number of ticks wanted.

    Returns:
        Ascending tick values that fall within the domain.
    """

    lo, hi = min(start, stop), max(start, stop)
    if lo == hi:
        return [lo]
    step = tick_step(lo, hi, count)
    if step <= 0 or not math.isfinite(step):
        return [lo, hi]
    first = math.ceil(lo / step - 1e-9)
    last = math.floor(hi / step + 1e-9)
    return [round(i * step, 10) for i in range(first, last + 1)]


def nice_domain(start: float, stop: float, count: int = 5) -> tuple[float, float]:
    """Extend a numeric domain outward to nice tick boundaries."""

    lo, hi = min(start, stop), max(start, stop)
    if lo == hi:
        return (lo, hi)
    for _ in range(2):
        step = tick_step(lo, hi, count)
        if step <= 0:
            break
        lo = math.floor(lo / step) * step
        hi = math.ceil(hi / step) * step
    return (round(lo, 10), round(hi, 10))


@dataclass(frozen=True, slots=True)
class LinearScale:
    """Continuous linear mapping from a numeric domain to a numeric range."""

    domain: tuple[float, float]
    range: tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2.0
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, position: float) -> float:
        """Map a range position back into the domain."""

        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return (d0 + d1) / 2.0
        return d0 + (position - r0) / (r1 - r0) * (d1 - d0)

    def ticks(self, count: int = 5) -> list[float]:
        """Return nice tick values within the domain."""

        return linear_ticks(self.domain[0], self.domain[1], count)

    def nice(self, count: int = 5) -> "LinearScale":
        """Return a copy whose domain is extended to nice tick boundaries."""

        lo, hi = nice_domain(self.domain[0], self.domain[1], count)
        if self.domain[0] > self.domain[1]:
            lo, hi = hi, lo
        return LinearScale(domain=(lo, hi), range=self.range)


@dataclass(frozen=True, slots=True)
class BandScale:
    """Discrete mapping from categories to evenly spaced bands.

    Attributes:
        domain: Ordered category keys.
        range: Pixel extent the bands fill.
        padding_inner: Fraction of a step left empty between bands.
        padding_outer: Fraction of a step left empty before the first/after the last band.
    """

    domain: tuple[Hashable, ...]
    range: tuple[float, float]
    padding_inner: float = 0.1
    padding_outer: float = 0.1
    _index: dict[Hashable, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[Hashable, int] = {}
        for position, key in enumerate(self.domain):
            index.setdefault(key, position)
        object.__setattr__(self, "_index", index)

    @property
    def step(self) -> float:
        """Distance between the starts of adjacent bands."""

        r0, r1 = self.range
        count = len(self.domain)
        return (r1 - r0) / max(1.0, count - self.padding_inner + self.padding_outer * 2)

    @property
    def bandwidth(self) -> float:
        """Width of a single band."""

        return self.step * (1 - self.padding_inner)

    @property
    def offset(self) -> float:
        r0, r1 = self.range
        count = len(self.domain)
        return r0 + (r1 - r0 - self.step * (count - self.padding_inner)) * 0.5

    def __call__(self, key: Hashable) -> float:
        """Return the start of the band for `key`.

        Raises:
            KeyError: When `key` is not in the domain.
        """

        return self.offset + self.step * self._index[key]

    def center(self, key: Hashable) -> float:
        """Return the midpoint of the band for `key`."""

        return self(key) + self.bandwidth / 2.0


@dataclass(frozen=True, slots=True)
class TimeScale:
    """Linear mapping from a datetime domain to a numeric range."""

    domain: tuple[datetime, datetime]
    range: tuple[float, float]

    def __call__(self, value: datetime) -> float:
        start, end = self.domain
        r0, r1 = self.range
        span = (end - start).total_seconds()
        if span == 0:
            return (r0 + r1) / 2.0
        return r0 + (value - start).total_seconds() / span * (r1 - r0)

    def ticks(self, count: int = 6) -> list[datetime]:
        """Return day-aligned ticks at a readable interval (1 day .. 1 year)."""

        start, end = self.domain
        span_days = (end - start).total_seconds() / 86400.0
        if span_days <= 0:
            return [start]
        step = next(
            (days for days in (1, 2, 7, 14, 30, 90, 180, 365) if span_days / days <= count),
            math.ceil(span_days / count),
        )
        first = start.replace(hour=0, minute=0, second=0, microsecond=0)
        if first < start:
            if end - first < timedelta(days=1):
                return []
            first += timedelta(days=1)
        # Counting ticks up front never steps past `end` (or datetime.max).
        tick_count = int((end - first) / timedelta(days=step)) + 1
        return [first + timedelta(days=step * i) for i in range(tick_count)]


@dataclass(frozen=True, slots=True)
class OrdinalScale:
    """Discrete mapping from categories to palette colors."""

    domain: tuple[Hashable, ...]
    colors: tuple[str, ...] = ()

    def __call__(self, key: Hashable) -> str:
        try:
            index = self.domain.index(key)
        except ValueError:
            index = len(self.domain)
        return palette_color(index, self.colors)


@dataclass(frozen=True, slots=True)
class SequentialColorScale:
    """Single-hue continuous color ramp over [min, max]."""

    domain: tuple[float, float]
    colors: tuple[str, str] = SEQUENTIAL_RAMP

    def __call__(self, value: float) -> str:
        lo, hi = self.domain
        t = 0.5 if hi == lo else (value - lo) / (hi - lo)
        return interpolate_color(self.colors[0], self.colors[1], t)

    def stops(self, count: int = 5) -> list[tuple[float, str]]:
        """Return `(offset, color)` gradient stops for a legend."""

        return [(i / (count - 1), interpolate_color(self.colors[0], self.colors[1], i / (count - 1))) for i in range(count)]


@dataclass(frozen=True, slots=True)
class DivergingColorScale:
    """Two-hue continuous color ramp centered on a midpoint."""

    domain: tuple[float, float, float]
    colors: tuple[str, str, str] = DIVERGING_RAMP

    def __call__(self, value: float) -> str:
        lo, mid, hi = self.domain
        low_color, mid_color, high_color = self.colors
        if value < mid:
            t = 1.0 if mid == lo else (value - lo) / (mid - lo)
            return interpolate_color(low_color, mid_color, t)
        t = 0.0 if hi == mid else (value - mid) / (hi - mid)
        return interpolate_color(mid_color, high_color, t)

    def stops(self, count: int = 5) -> list[tuple[float, str]]:
        """Return `(offset, color)` gradient stops for a legend."""

        lo, _mid, hi = self.domain
        out: list[tuple[float, str]] = []
        for i in range(count):
            offset = i / (count - 1)
            out.append((offset, self(lo + (hi - lo) * offset)))
        return out


def extent(values: Sequence[float], *, include_zero: bool = False) -> tuple[float, float]:
    """Return `(min, max)` of values, optionally widened to include zero.

    Returns `(0.0, 1.0)` for an empty sequence.
    """

    if not values:
        return (0.0, 1.0)
    lo, hi = min(values), max(values)
    if include_zero:
        lo, hi = min(lo, 0.0), max(hi, 0.0)
    return (lo, hi)
