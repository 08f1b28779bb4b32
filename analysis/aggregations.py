"""Aggregation helpers for chart layouts.

This module provides deterministic, reusable aggregation functions used by the
layouts (grouping rows by category, rolling sums) without introducing Django
dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Literal

from .numeric import coerce_datetime, coerce_number, is_date_like

Aggregation = Literal["sum", "avg", "min", "max", "count"]
DateHierarchy = Literal["year", "month", "day"]

AGGREGATIONS: frozenset[str] = frozenset({"sum", "avg", "min", "max", "count"})


def aggregate_values(values: Iterable[object], *, aggregation: Aggregation = "sum") -> float:
    """Aggregate raw cell values into a single number.

    Args:
        values: Raw values for one field within one group.
        aggregation: `sum`, `avg`, `min`, `max`, or `count`. `count` counts
            distinct non-empty values; the others ignore non-numeric entries.

    Returns:
        The aggregated value rounded to two decimals, or 0.0 when no usable
        values exist.
    """

    raw = list(values)
    if aggregation == "count":
        distinct = {str(value) for value in raw if value is not None and value != ""}
        return float(len(distinct))

    numbers = [n for n in (coerce_number(value) for value in raw) if n is not None]
    if not numbers:
        return 0.0
    if aggregation == "avg":
        result = sum(numbers) / len(numbers)
    elif aggregation == "min":
        result = min(numbers)
    elif aggregation == "max":
        result = max(numbers)
    else:
        result = sum(numbers)
    return round(result, 2)


def group_key(value: object, *, date_hierarchy: DateHierarchy | None = None) -> str:
    """Return the category label used to group a row on its x value.

    Args:
        value: Raw x value.
        date_hierarchy: Optional date grouping level applied to date-like values.

    Returns:
        A string key; dates are truncated to the requested hierarchy level.
    """

    if value is None:
        return ""
    if date_hierarchy is not None and is_date_like(value):
        moment = coerce_datetime(value)
        if moment is not None:
            return _date_part(moment, date_hierarchy)
    if isinstance(value, datetime):
        return value.date().isoformat() if value.time() == datetime.min.time() else value.isoformat()
    if hasattr(value, "isoformat"):
        return value.isoformat()  # type: ignore[union-attr]
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _date_part(moment: datetime, level: DateHierarchy) -> str:
    if level == "year":
        return f"{moment.year}"
    if level == "month":
        return f"{moment.year}-{moment.month:02d}"
    return moment.date().isoformat()


def group_rows(
    rows: Iterable[Mapping[str, object]],
    *,
    field: str,
    date_hierarchy: DateHierarchy | None = None,
) -> dict[str, list[Mapping[str, object]]]:
    """Group rows by their value in `field`, preserving first-seen order.

    Args:
        rows: Data rows.
        field: Column whose value defines the group.
        date_hierarchy: Optional date grouping level.

    Returns:
        Ordered mapping of group label -> rows in that group.
    """

    groups: dict[str, list[Mapping[str, object]]] = {}
    for row in rows:
        key = group_key(row.get(field), date_hierarchy=date_hierarchy)
        groups.setdefault(key, []).append(row)
    return groups


def sum_by_key(
    rows: Iterable[Mapping[str, object]],
    *,
    key_field: str,
    value_field: str,
) -> dict[str, float]:
    """Sum `value_field` per distinct `key_field`, preserving first-seen order.

    Non-numeric values are skipped exactly like `analysis.quantiles` skips them,
    so a key whose values are all unreadable still appears with a total of 0.

    Args:
        rows: Data rows.
        key_field: Column identifying the group.
        value_field: Column holding the measure.

    Returns:
        Ordered mapping of key -> total.
    """

    totals: dict[str, float] = {}
    for row in rows:
        key = group_key(row.get(key_field))
        number = coerce_number(row.get(value_field))
        totals[key] = totals.get(key, 0.0) + (number if number is not None else 0.0)
    return totals


def running_totals(deltas: Sequence[float], *, start: float = 0.0) -> list[tuple[float, float]]:
    """Return `(before, after)` cumulative pairs for a sequence of deltas.

    Args:
        deltas: Signed changes applied in order.
        start: Initial cumulative value.

    Returns:
        One `(before, after)` pair per delta; `after` of step i equals `before`
        of step i+1.
    """

    pairs: list[tuple[float, float]] = []
    cumulative = start
    for delta in deltas:
        before = cumulative
        cumulative = before + delta
        pairs.append((before, cumulative))
    return pairs
