"""Gantt layout: one horizontal bar per task on a shared timeline.

Each row resolves to an interval through the first rule that applies:

1. `start` and `end`
2. `startDate` and `endDate`
3. `start` plus `duration` (days)
4. a synthesized fallback from the row index: task i starts 7·i days after
   `now` and lasts 5 days

The fallback keeps rows without usable dates on the chart. With a fixed
`now`, the same rows always produce the same intervals.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal

from analysis.aggregations import group_key
from analysis.curves import diamond, elbow
from analysis.numeric import coerce_datetime, coerce_number
from analysis.palette import palette_color
from analysis.scales import BandScale, TimeScale

from ..scene import LayoutResult, LineShape, PathShape, RectShape, Shape, TextShape
from ..schema import ChartConfiguration, DataRow
from .common import AXIS_COLOR, GRID_COLOR, MUTED_LABEL_COLOR, plot_area, tooltip

IntervalSource = Literal["start_end", "start_date_end_date", "start_duration", "fallback"]

FALLBACK_SPACING_DAYS = 7
FALLBACK_LENGTH_DAYS = 5
# Bars never get narrower than this fraction of the timeline.
MIN_BAR_FRACTION = 0.02
TODAY_COLOR = "#ef4444"
MILESTONE_COLOR = "#eab308"
PROGRESS_SHADE = "#000000"


@dataclass(frozen=True, slots=True)
class GanttTask:
    """A task's resolved interval and how it was resolved."""

    label: str
    start: datetime
    end: datetime
    source: IntervalSource
    progress: float | None = None
    milestone: bool = False
    dependencies: tuple[str, ...] = ()


def _dependencies(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, (list, tuple)):
        return tuple(str(part) for part in value if part not in (None, ""))
    return ()


def _is_milestone(row: DataRow) -> bool:
    if row.get("milestone") is True:
        return True
    tags = row.get("tags")
    if isinstance(tags, str):
        tags = [part.strip() for part in tags.split(",")]
    return isinstance(tags, (list, tuple)) and any(str(tag).lower() == "milestone" for tag in tags)


def _shift(moment: datetime, days: float) -> datetime | None:
    """Return `moment` moved by `days`, or None when the result is out of range."""

    try:
        return moment + timedelta(days=days)
    except OverflowError:
        return None


def resolve_interval(row: DataRow, index: int, *, now: datetime) -> tuple[datetime, datetime, IntervalSource]:
    """Resolve one row's `(start, end)` interval.

    Args:
        row: Data row.
        index: Position of the row (drives the fallback offset).
        now: Reference instant for the fallback.

    Returns:
        `(start, end, source)`; when end precedes start the two are swapped.
    """

    start = coerce_datetime(row.get("start"))
    end = coerce_datetime(row.get("end"))
    source: IntervalSource = "start_end"
    if start is None or end is None:
        start = coerce_datetime(row.get("startDate"))
        end = coerce_datetime(row.get("endDate"))
        source = "start_date_end_date"
    if start is None or end is None:
        start = coerce_datetime(row.get("start"))
        duration = coerce_number(row.get("duration"))
        end = _shift(start, duration) if start is not None and duration is not None else None
        source = "start_duration"
    if start is None or end is None:
        start = now + timedelta(days=FALLBACK_SPACING_DAYS * index)
        end = start + timedelta(days=FALLBACK_LENGTH_DAYS)
        source = "fallback"
    if end < start:
        start, end = end, start
    return start, end, source


def layout_gantt(config: ChartConfiguration, rows: Sequence[DataRow], *, now: datetime | None = None) -> LayoutResult:
    """Lay out a gantt chart.

    Args:
        config: Configuration; `x_axis.field` names the task label column.
        rows: One row per task.
        now: Reference instant for the fallback intervals and today marker.
            Defaults to the current UTC time.
    """

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    label_field = config.x_field or ""

    tasks: list[GanttTask] = []
    for index, row in enumerate(rows):
        start, end, source = resolve_interval(row, index, now=now)
        progress = coerce_number(row.get("progress"))
        tasks.append(
            GanttTask(
                label=group_key(row.get(label_field)) or f"Task {index + 1}",
                start=start,
                end=end,
                source=source,
                progress=max(0.0, min(100.0, progress)) if progress is not None else None,
                milestone=_is_milestone(row),
                dependencies=_dependencies(row.get("dependencies")),
            )
        )

    domain_start = min((task.start for task in tasks), default=now)
    domain_end = max((task.end for task in tasks), default=now + timedelta(days=FALLBACK_LENGTH_DAYS))
    area = plot_area(config)
    time_scale = TimeScale(domain=(domain_start, domain_end), range=(area.x, area.right))
    keys = tuple(range(len(tasks)))
    bands = BandScale(domain=keys, range=(area.y, area.bottom), padding_inner=0.2, padding_outer=0.1)
    bar_height = min(config.task_height, bands.bandwidth)
    min_width = area.width * MIN_BAR_FRACTION

    shapes: list[Shape] = []
    for tick in time_scale.ticks():
        x = time_scale(tick)
        if config.grid:
            shapes.append(LineShape(x, area.y, x, area.bottom, stroke=GRID_COLOR, role="grid"))
        shapes.append(
            TextShape(x, area.bottom + 14, tick.strftime("%b %d"), font_size=10, fill=MUTED_LABEL_COLOR, anchor="middle", role="axis-label")
        )
    shapes.append(LineShape(area.x, area.bottom, area.right, area.bottom, stroke=AXIS_COLOR, role="axis"))

    positions: dict[str, tuple[float, float, float]] = {}
    for index, task in enumerate(tasks):
        color = palette_color(index, config.colors)
        center = bands.center(index)
        y = center - bar_height / 2.0
        x0 = time_scale(task.start)
        width = max(time_scale(task.end) - x0, min_width)
        x0 = min(x0, area.right - width)
        positions.setdefault(task.label, (x0, x0 + width, center))
        hover = tooltip(config, f"{task.label}: {task.start.date().isoformat()} → {task.end.date().isoformat()}")
        shapes.append(TextShape(area.x - 6, center, task.label, font_size=10, anchor="end", role="task-label"))
        if task.milestone:
            shapes.append(PathShape(commands=diamond(x0, center, bar_height), fill=MILESTONE_COLOR, role="milestone", tooltip=hover))
            continue
        shapes.append(RectShape(x0, y, width, bar_height, fill=color, rx=3.0, role="task", tooltip=hover))
        if task.progress is not None and task.progress < 100:
            done = width * task.progress / 100.0
            shapes.append(RectShape(x0 + done, y, width - done, bar_height, fill=PROGRESS_SHADE, opacity=0.2, rx=3.0, role="progress"))

    if config.show_dependencies:
        for task in tasks:
            if task.label not in positions:
                continue
            start_x, _end_x, to_y = positions[task.label]
            for dependency in task.dependencies:
                if dependency not in positions:
                    continue
                _dep_start, dep_end, from_y = positions[dependency]
                shapes.append(
                    PathShape(
                        commands=elbow(dep_end, from_y, start_x, to_y),
                        fill=None,
                        stroke=AXIS_COLOR,
                        stroke_width=1.5,
                        role="dependency",
                    )
                )

    if domain_start <= now <= domain_end:
        x = time_scale(now)
        shapes.append(LineShape(x, area.y, x, area.bottom, stroke=TODAY_COLOR, stroke_width=1.5, dash=(4.0, 3.0), role="today"))

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        scales={"time": time_scale, "task": bands},
        meta={"intervals": tuple(tasks), "now": now},
    )
