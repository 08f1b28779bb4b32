"""Value coercion shared by every chart family.

Data rows arrive from external collaborators as loosely-typed scalars. Every
layout reads numbers and dates through these helpers so that a malformed value
degrades the same way everywhere (skipped or treated as zero by the caller),
instead of aborting a render.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import UTC, date, datetime
from decimal import Decimal

_NON_NUMERIC_CHARS = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)")

# Epoch-millisecond timestamps between 2000-01-01 and 2100-01-01.
_EPOCH_MS_MIN = 946_684_800_000
_EPOCH_MS_MAX = 4_102_444_800_000

_DATE_FORMATS = ("%Y/%m/%d", "%m/%d/%Y", "%d-%m-%Y", "%Y-%m-%d %H:%M:%S")


def coerce_number(value: object) -> float | None:
    """Return a float for numeric-looking values, or None.

    Args:
        value: Raw cell value (number, numeric string, Decimal, or anything else).

    Returns:
        The parsed float. Strings are first parsed directly; when that fails,
        everything except digits, `.` and `-` is stripped (so "$1,200" reads as
        1200.0) and the leading number is used. Booleans, NaN, infinities and
        unparseable values return None, as do integers too large for a float.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        cleaned = _NON_NUMERIC_CHARS.sub("", text)
        match = _LEADING_NUMBER.match(cleaned)
        if match is None:
            return None
        number = float(match.group(0))
    return number if math.isfinite(number) else None


def numeric_values(values: Iterable[object]) -> list[float]:
    """Coerce an iterable of raw values, dropping the unreadable ones."""

    out: list[float] = []
    for raw in values:
        number = coerce_number(raw)
        if number is not None:
            out.append(number)
    return out


def coerce_datetime(value: object) -> datetime | None:
    """Return a timezone-aware (UTC) datetime for date-like values, or None.

    Args:
        value: A datetime, date, ISO-8601 string, common `Y/m/d` or `m/d/Y`
            string, or an epoch-millisecond number in the 2000-2100 range.

    Returns:
        An aware datetime. Naive inputs are assumed to be UTC.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, (int, float)):
        if _EPOCH_MS_MIN < value < _EPOCH_MS_MAX:
            return datetime.fromtimestamp(value / 1000.0, tz=UTC)
        return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


def is_date_like(value: object) -> bool:
    """Return True when a value should be treated as a date on a category axis."""

    if isinstance(value, (datetime, date)):
        return True
    return _looks_like_iso_date(value) and coerce_datetime(value) is not None


def _looks_like_iso_date(value: object) -> bool:
    return isinstance(value, str) and bool(re.match(r"^\d{4}[-/]\d{1,2}[-/]\d{1,2}", value.strip()))


def format_number(value: float, *, decimals: int = 2) -> str:
    """Format a number with thousands separators and trimmed trailing zeros."""

    if float(value).is_integer():
        return f"{int(value):,}"
    text = f"{value:,.{decimals}f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def format_value(value: object) -> str:
    """Format an arbitrary cell value for display in labels and tables."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        number = coerce_number(value)
        return "" if number is None else format_number(number)
    if isinstance(value, datetime):
        return value.date().isoformat() if value.time() == datetime.min.time() else value.isoformat(timespec="minutes")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
