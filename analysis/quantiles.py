"""Quantile statistics for box plots."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from statistics import fmean, quantiles

from .numeric import numeric_values

FENCE_FACTOR = 1.5


def quartiles(values: Sequence[float]) -> tuple[float, float, float]:
    """Return `(q1, median, q3)` using linear interpolation between ranks.

    The "inclusive" method of `statistics.quantiles` is the type 7 definition
    (the default in R, NumPy and d3). A single value is its own quartiles.

    Raises:
        ValueError: When `values` is empty.
    """

    if not values:
        raise ValueError("quartiles() requires at least one value.")
    if len(values) == 1:
        return values[0], values[0], values[0]
    q1, median, q3 = quantiles(values, n=4, method="inclusive")
    return q1, median, q3


@dataclass(frozen=True, slots=True)
class BoxStats:
    """Five-number summary plus fences for one box-plot group.

    Attributes:
        count: Number of numeric observations.
        minimum: Smallest observation.
        q1: First quartile.
        median: Second quartile.
        q3: Third quartile.
        maximum: Largest observation.
        iqr: Inter-quartile range (`q3 - q1`).
        lower_fence: `q1 - 1.5 * iqr`.
        upper_fence: `q3 + 1.5 * iqr`.
        whisker_low: Smallest observation not below the lower fence.
        whisker_high: Largest observation not above the upper fence.
        mean: Arithmetic mean.
        outliers: Observations strictly outside the fences, ascending.
    """

    count: int
    minimum: float
    q1: float
    median: float
    q3: float
    maximum: float
    iqr: float
    lower_fence: float
    upper_fence: float
    whisker_low: float
    whisker_high: float
    mean: float
    outliers: tuple[float, ...]


def box_stats(values: Iterable[object]) -> BoxStats | None:
    """Compute box-plot statistics for raw values.

    Non-numeric entries are ignored (the same coercion used by sum roll-ups).

    Args:
        values: Raw values for one group.

    Returns:
        BoxStats, or None when the group has no numeric values.
    """

    ordered = sorted(numeric_values(values))
    if not ordered:
        return None

    q1, median, q3 = quartiles(ordered)
    iqr = q3 - q1
    lower_fence = q1 - FENCE_FACTOR * iqr
    upper_fence = q3 + FENCE_FACTOR * iqr
    inside = [v for v in ordered if lower_fence <= v <= upper_fence]
    outliers = tuple(v for v in ordered if v < lower_fence or v > upper_fence)

    return BoxStats(
        count=len(ordered),
        minimum=ordered[0],
        q1=q1,
        median=median,
        q3=q3,
        maximum=ordered[-1],
        iqr=iqr,
        lower_fence=lower_fence,
        upper_fence=upper_fence,
        whisker_low=inside[0],
        whisker_high=inside[-1],
        mean=fmean(ordered),
        outliers=outliers,
    )
