"""Row transforms applied before a layout runs (top-N, sort, row cap)."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from django.conf import settings

from analysis.numeric import coerce_number

from .schema import ChartConfiguration, DataRow, SortConfig, TopNConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS = 10_000


@dataclass(frozen=True, slots=True)
class TransformedRows:
    """Rows after transforms plus any warnings raised along the way."""

    rows: tuple[DataRow, ...]
    warnings: tuple[str, ...] = ()


def apply_top_n(rows: Sequence[DataRow], top_n: TopNConfig) -> list[DataRow]:
    """Keep the N rows with the largest (or smallest) value in `top_n.field`.

    Unreadable values rank as 0. The kept rows retain their original order.
    """

    ranked = sorted(
        range(len(rows)),
        key=lambda i: coerce_number(rows[i].get(top_n.field)) or 0.0,
        reverse=top_n.kind == "top",
    )
    keep = set(ranked[: max(0, top_n.n)])
    return [row for i, row in enumerate(rows) if i in keep]


def apply_sort(rows: Sequence[DataRow], sort: SortConfig) -> list[DataRow]:
    """Sort rows by `sort.field`.

    Two values compare numerically when both are numeric, else as
    case-insensitive text. Missing values always sort last.
    """

    present = [row for row in rows if row.get(sort.field) not in (None, "")]
    missing = [row for row in rows if row.get(sort.field) in (None, "")]
    numbers = [coerce_number(row.get(sort.field)) for row in present]
    if all(number is not None for number in numbers):
        order = sorted(range(len(present)), key=lambda i: numbers[i] or 0.0, reverse=sort.order == "desc")
        ordered = [present[i] for i in order]
    else:
        ordered = sorted(present, key=lambda row: str(row.get(sort.field)).casefold(), reverse=sort.order == "desc")
    return ordered + missing


def apply_row_transforms(config: ChartConfiguration, rows: Sequence[DataRow]) -> TransformedRows:
    """Apply top-N, then sort, then the configured row cap.

    Args:
        config: Chart configuration carrying `top_n` / `sort`.
        rows: Data rows in their original order.

    Returns:
        TransformedRows with the rows to lay out.
    """

    warnings: list[str] = []
    out = list(rows)
    if config.top_n is not None:
        out = apply_top_n(out, config.top_n)
    if config.sort is not None:
        out = apply_sort(out, config.sort)

    max_rows = int(getattr(settings, "CHART_MAX_ROWS", DEFAULT_MAX_ROWS))
    if max_rows > 0 and len(out) > max_rows:
        logger.warning("Truncating %s chart from %d to %d rows", config.type, len(out), max_rows)
        warnings.append(f"Only the first {max_rows} of {len(out)} rows are shown.")
        out = out[:max_rows]
    return TransformedRows(rows=tuple(out), warnings=tuple(warnings))
