"""Pytest fixtures shared across chart tests."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

import pytest

from core.charting.schema import AxisConfig, ChartConfiguration, SeriesConfig


@pytest.fixture
def fixed_now() -> datetime:
    """Return a fixed reference instant for time-dependent layouts."""

    return datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def box_plot_config() -> ChartConfiguration:
    """Return the single-group box plot configuration."""

    return ChartConfiguration(type="BOX_PLOT", x_axis=AxisConfig(field="group"), series=(SeriesConfig(field="value"),))


@pytest.fixture
def box_plot_rows() -> list[dict[str, object]]:
    """Return rows whose only outlier is 100."""

    return [{"group": "A", "value": value} for value in (1, 2, 3, 4, 100)]


@pytest.fixture
def waterfall_config() -> ChartConfiguration:
    """Return a waterfall configuration over `cat`/`delta` rows."""

    return ChartConfiguration(type="WATERFALL", x_axis=AxisConfig(field="cat"), series=(SeriesConfig(field="delta"),))


@pytest.fixture
def waterfall_rows() -> list[dict[str, object]]:
    """Return start/loss/gain rows ending at a cumulative 80."""

    return [
        {"cat": "start", "delta": 100},
        {"cat": "loss", "delta": -30},
        {"cat": "gain", "delta": 10},
    ]


@pytest.fixture
def column_config() -> ChartConfiguration:
    """Return a two-series column chart configuration."""

    return ChartConfiguration(
        type="COLUMN",
        title="Revenue",
        x_axis=AxisConfig(field="quarter"),
        series=(SeriesConfig(field="revenue"), SeriesConfig(field="cost")),
    )


@pytest.fixture
def quarter_rows() -> list[dict[str, object]]:
    """Return four quarters of revenue and cost."""

    return [
        {"quarter": "Q1", "revenue": 120, "cost": 80},
        {"quarter": "Q2", "revenue": 150, "cost": 95},
        {"quarter": "Q3", "revenue": 170, "cost": 110},
        {"quarter": "Q4", "revenue": 210, "cost": 120},
    ]


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests (analysis helpers, layouts, codec, surface).
    - `integration`: tests touching Django views, commands, or file IO.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
