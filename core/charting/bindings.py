"""Field-binding validation for chart configurations.

A configuration is only valid for its declared type when the field bindings
that family needs are present. Incomplete bindings are reported as errors
(a configuration problem the user must fix), never as a crash during layout.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from analysis.aggregations import AGGREGATIONS

from .schema import ChartConfiguration, DataRow

LATITUDE_FIELDS: Final[tuple[str, ...]] = ("latitude", "lat", "y")
LONGITUDE_FIELDS: Final[tuple[str, ...]] = ("longitude", "lng", "x", "lon")


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of validating a chart configuration against its data."""

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def resolve_field(rows: Sequence[DataRow], candidates: Sequence[str]) -> str | None:
    """Return the first candidate column present in any row.

    Args:
        rows: Data rows.
        candidates: Column names in priority order.

    Returns:
        The first candidate that appears as a key in at least one row.
    """

    for candidate in candidates:
        if any(candidate in row for row in rows):
            return candidate
    return None


def resolve_coordinate_fields(rows: Sequence[DataRow]) -> tuple[str | None, str | None]:
    """Resolve latitude/longitude columns using the fixed fallback order.

    Latitude: `latitude`, `lat`, `y`. Longitude: `longitude`, `lng`, `x`, `lon`.
    """

    return resolve_field(rows, LATITUDE_FIELDS), resolve_field(rows, LONGITUDE_FIELDS)


def table_columns(config: ChartConfiguration, rows: Sequence[DataRow]) -> tuple[str, ...]:
    """Return table columns: series fields when given, else the first row's keys."""

    if config.series:
        return tuple(series.field for series in config.series)
    if rows:
        return tuple(str(key) for key in rows[0].keys())
    return ()


def validate_bindings(config: ChartConfiguration, rows: Sequence[DataRow]) -> ValidationResult:
    """Validate that a configuration binds every field its family needs.

    Args:
        config: Configuration to validate. Its type must already be supported.
        rows: Data rows (used for the geo coordinate fallback and warnings).

    Returns:
        ValidationResult containing errors and warnings.
    """

    errors: list[str] = []
    warnings: list[str] = []
    family = config.family
    label = config.type

    if family == "cartesian":
        _require_x(config, errors)
        if not config.series:
            errors.append(f"series must contain at least one entry for {label} charts.")
    elif family in ("pie", "treemap", "sunburst"):
        if not config.category_field:
            errors.append(f"categoryField is required for {label} charts.")
        if not config.value_field:
            errors.append(f"valueField is required for {label} charts.")
    elif family == "heatmap":
        _require_x(config, errors)
        _require_y(config, errors, purpose="")
        _require_measure(config, errors)
    elif family in ("waterfall", "box_plot"):
        _require_x(config, errors)
        _require_measure(config, errors)
    elif family == "sankey":
        _require_x(config, errors)
        _require_y(config, errors, purpose=" (flow target)")
        _require_measure(config, errors)
    elif family == "gantt":
        _require_x(config, errors)
    elif family == "geo":
        lat_field, lng_field = resolve_coordinate_fields(rows)
        if lat_field is None:
            errors.append(f"A latitude column (one of {', '.join(LATITUDE_FIELDS)}) is required for {label} charts.")
        if lng_field is None:
            errors.append(f"A longitude column (one of {', '.join(LONGITUDE_FIELDS)}) is required for {label} charts.")
        if lat_field and lng_field and not any(lat_field in row and lng_field in row for row in rows):
            errors.append(f"No row carries both {lat_field!r} and {lng_field!r} for {label} charts.")

    for idx, series in enumerate(config.series):
        if not series.field:
            errors.append(f"series[{idx}].field must be a non-empty string.")
        if series.aggregation not in AGGREGATIONS:
            errors.append(f"series[{idx}].aggregation is not a supported value: {series.aggregation!r}.")

    if config.color_scale not in ("sequential", "diverging"):
        errors.append(f"colorScale is not a supported value: {config.color_scale!r}.")
    if config.top_n is not None and config.top_n.n < 1:
        errors.append("topN.n must be at least 1.")
    if config.top_n is not None and config.top_n.kind not in ("top", "bottom"):
        errors.append(f"topN.type is not a supported value: {config.top_n.kind!r}.")
    if config.sort is not None and config.sort.order not in ("asc", "desc"):
        errors.append(f"sort.order is not a supported value: {config.sort.order!r}.")
    if config.width <= 0 or config.height <= 0:
        errors.append("width and height must be positive.")
    if not 0.0 <= config.inner_radius < 1.0:
        errors.append("innerRadius must be a fraction in [0, 1).")

    if not errors:
        for bound in _bound_fields(config):
            if not any(bound in row for row in rows):
                warnings.append(f"Field {bound!r} does not appear in any data row.")

    return ValidationResult(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))


def _require_x(config: ChartConfiguration, errors: list[str]) -> None:
    if not config.x_field:
        errors.append(f"xAxis.field is required for {config.type} charts.")


def _require_y(config: ChartConfiguration, errors: list[str], *, purpose: str) -> None:
    if not config.y_field:
        errors.append(f"yAxis.field{purpose} is required for {config.type} charts.")


def _require_measure(config: ChartConfiguration, errors: list[str]) -> None:
    if not config.measure_field:
        errors.append(f"series[0].field is required for {config.type} charts.")


def _bound_fields(config: ChartConfiguration) -> list[str]:
    """Return the data columns a configuration reads, in binding order."""

    fields: list[str] = []
    family = config.family
    if family in ("pie", "treemap", "sunburst"):
        candidates = [config.category_field, config.value_field]
    elif family == "geo":
        candidates = [config.value_field, config.location_field]
    elif family == "table":
        candidates = []
    else:
        candidates = [config.x_field]
        if family in ("heatmap", "sankey"):
            candidates.append(config.y_field)
        if family != "gantt":
            candidates.extend(series.field for series in config.series)
    for candidate in candidates:
        if candidate and candidate not in fields:
            fields.append(candidate)
    return fields
