"""JSON encoding/decoding helpers for ChartConfiguration payloads.

Payloads use the camelCase keys of the dashboard contract (`xAxis`,
`categoryField`, `stackId`, ...). Decoding is strict about structure (a
config must be a mapping, `series` must be a list) and lenient about
scalars, which are parsed best-effort.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

from .schema import AxisConfig, ChartConfiguration, DataRow, Margin, SeriesConfig, SortConfig, TopNConfig

# camelCase payload key -> ChartConfiguration attribute, for plain scalars.
_STRING_KEYS = {
    "title": "title",
    "description": "description",
    "categoryField": "category_field",
    "valueField": "value_field",
    "backgroundColor": "background_color",
    "positiveColor": "positive_color",
    "negativeColor": "negative_color",
    "totalColor": "total_color",
    "colorScale": "color_scale",
    "locationField": "location_field",
    "dateHierarchy": "date_hierarchy",
}
_BOOL_KEYS = {
    "grid": "grid",
    "legend": "legend",
    "tooltip": "tooltip",
    "animation": "animation",
    "smooth": "smooth",
    "stacked": "stacked",
    "showDependencies": "show_dependencies",
    "showMean": "show_mean",
    "showOutliers": "show_outliers",
}
_FLOAT_KEYS = {
    "innerRadius": "inner_radius",
    "padding": "padding",
    "nodeWidth": "node_width",
    "nodePadding": "node_padding",
    "taskHeight": "task_height",
    "mapZoom": "map_zoom",
}
_INT_KEYS = {"width": "width", "height": "height"}


def decode_chart_configuration(payload: object) -> ChartConfiguration:
    """Decode a ChartConfiguration from a JSON payload.

    Args:
        payload: Mapping previously produced by `encode_chart_configuration`
            or supplied by a hosting dashboard.

    Returns:
        ChartConfiguration instance. Unknown chart types are kept (upper-cased)
        so the dispatcher can report them.

    Raises:
        ValueError: When the payload is structurally invalid.
    """

    if not isinstance(payload, Mapping):
        raise ValueError("Chart configuration must be a JSON object.")
    chart_type = str(payload.get("type") or "").strip().upper()
    if not chart_type:
        raise ValueError("Chart configuration requires a type.")

    series_raw = payload.get("series") or []
    if not isinstance(series_raw, list):
        raise ValueError("series must be a list.")
    series = tuple(_decode_series(item, index) for index, item in enumerate(series_raw))

    x_axis = _decode_axis(payload.get("xAxis"), "xAxis")
    values: dict[str, Any] = {
        "type": chart_type,
        "x_axis": x_axis,
        "y_axis": _decode_axis(payload.get("yAxis"), "yAxis"),
        "y_axis_right": _decode_axis(payload.get("yAxisRight"), "yAxisRight"),
        "series": series,
    }
    for key, attr in _STRING_KEYS.items():
        if payload.get(key) not in (None, ""):
            values[attr] = str(payload[key])
    for key, attr in _BOOL_KEYS.items():
        if key in payload and payload[key] is not None:
            values[attr] = _parse_bool(payload[key])
    for key, attr in _FLOAT_KEYS.items():
        number = _parse_float(payload.get(key))
        if number is not None:
            values[attr] = number
    for key, attr in _INT_KEYS.items():
        number = _parse_float(payload.get(key))
        if number is not None:
            values[attr] = int(number)

    if "date_hierarchy" not in values and isinstance(payload.get("xAxis"), Mapping):
        level = cast(Mapping[str, Any], payload["xAxis"]).get("dateHierarchyLevel")
        if level:
            values["date_hierarchy"] = str(level)

    colors = payload.get("colors")
    if colors is not None:
        if not isinstance(colors, list):
            raise ValueError("colors must be a list.")
        values["colors"] = tuple(str(color) for color in colors) or None

    if payload.get("margin") is not None:
        values["margin"] = _decode_margin(payload["margin"])
    if payload.get("mapCenter") is not None:
        values["map_center"] = _decode_center(payload["mapCenter"])
    if payload.get("sort") is not None:
        values["sort"] = _decode_sort(payload["sort"])
    if payload.get("topN") is not None:
        values["top_n"] = _decode_top_n(payload["topN"])

    return ChartConfiguration(**values)


def encode_chart_configuration(config: ChartConfiguration) -> dict[str, Any]:
    """Encode a ChartConfiguration into a JSON-serializable dictionary.

    Only values that differ from the defaults are written, so encoded
    payloads stay as small as the ones dashboards author by hand.
    """

    defaults = ChartConfiguration(type=config.type)
    payload: dict[str, Any] = {"type": config.type}
    for key, attr in (*_STRING_KEYS.items(), *_BOOL_KEYS.items(), *_FLOAT_KEYS.items(), *_INT_KEYS.items()):
        value = getattr(config, attr)
        if value != getattr(defaults, attr):
            payload[key] = value
    for key, axis in (("xAxis", config.x_axis), ("yAxis", config.y_axis), ("yAxisRight", config.y_axis_right)):
        if axis is not None:
            payload[key] = {
                name: value
                for name, value in (("field", axis.field), ("label", axis.label), ("min", axis.min), ("max", axis.max))
                if value is not None
            }
    if config.series:
        payload["series"] = [_encode_series(series) for series in config.series]
    if config.colors:
        payload["colors"] = list(config.colors)
    if config.margin != defaults.margin:
        payload["margin"] = {
            "top": config.margin.top,
            "right": config.margin.right,
            "bottom": config.margin.bottom,
            "left": config.margin.left,
        }
    if config.map_center is not None:
        payload["mapCenter"] = list(config.map_center)
    if config.sort is not None:
        payload["sort"] = {"field": config.sort.field, "order": config.sort.order}
    if config.top_n is not None:
        payload["topN"] = {"type": config.top_n.kind, "n": config.top_n.n, "field": config.top_n.field}
    return payload


def _decode_axis(value: object, name: str) -> AxisConfig | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValueError(f"{name} must be an object.")
    return AxisConfig(
        field=_parse_str(value.get("field")),
        label=_parse_str(value.get("label")),
        min=_parse_float(value.get("min")),
        max=_parse_float(value.get("max")),
    )


def _decode_series(value: object, index: int) -> SeriesConfig:
    if not isinstance(value, Mapping):
        raise ValueError(f"series[{index}] must be an object.")
    return SeriesConfig(
        field=str(value.get("field") or ""),
        label=_parse_str(value.get("label")),
        color=_parse_str(value.get("color")),
        stack_id=_parse_str(value.get("stackId")),
        y_axis_id=_parse_str(value.get("yAxisId")),
        stroke_width=_parse_float(value.get("strokeWidth")),
        fill_opacity=_parse_float(value.get("fillOpacity")),
        aggregation=str(value.get("aggregation") or "sum"),  # type: ignore[arg-type]
    )


def _encode_series(series: SeriesConfig) -> dict[str, Any]:
    payload: dict[str, Any] = {"field": series.field}
    for key, value in (
        ("label", series.label),
        ("color", series.color),
        ("stackId", series.stack_id),
        ("yAxisId", series.y_axis_id),
        ("strokeWidth", series.stroke_width),
        ("fillOpacity", series.fill_opacity),
    ):
        if value is not None:
            payload[key] = value
    if series.aggregation != "sum":
        payload["aggregation"] = series.aggregation
    return payload


def _decode_margin(value: object) -> Margin:
    number = _parse_float(value)
    if number is not None:
        return Margin(top=number, right=number, bottom=number, left=number)
    if not isinstance(value, Mapping):
        raise ValueError("margin must be a number or an object.")
    default = Margin()
    sides: dict[str, float] = {}
    for side in ("top", "right", "bottom", "left"):
        number = _parse_float(value.get(side))
        sides[side] = getattr(default, side) if number is None else number
    return Margin(**sides)


def _decode_center(value: object) -> tuple[float, float]:
    if isinstance(value, Mapping):
        lat = _parse_float(value.get("lat", value.get("latitude")))
        lng = _parse_float(value.get("lng", value.get("longitude")))
    elif isinstance(value, list) and len(value) == 2:
        lat, lng = _parse_float(value[0]), _parse_float(value[1])
    else:
        lat = lng = None
    if lat is None or lng is None:
        raise ValueError("mapCenter must be [latitude, longitude] or {lat, lng}.")
    return (lat, lng)


def _decode_sort(value: object) -> SortConfig:
    if not isinstance(value, Mapping) or not value.get("field"):
        raise ValueError("sort must be an object with a field.")
    return SortConfig(field=str(value["field"]), order=str(value.get("order") or "asc").lower())  # type: ignore[arg-type]


def _decode_top_n(value: object) -> TopNConfig:
    if not isinstance(value, Mapping) or not value.get("field"):
        raise ValueError("topN must be an object with a field.")
    n = _parse_float(value.get("n"))
    if n is None:
        raise ValueError("topN.n must be a number.")
    return TopNConfig(field=str(value["field"]), n=int(n), kind=str(value.get("type") or "top").lower())  # type: ignore[arg-type]


def _parse_str(value: object) -> str | None:
    """Best-effort optional string parsing."""

    if value is None or value == "":
        return None
    return str(value)


def _parse_float(value: object) -> float | None:
    """Best-effort float parsing for payload scalars."""

    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value))
    except ValueError:
        return None


def _parse_bool(value: object) -> bool:
    """Best-effort bool parsing for payload flags."""

    if isinstance(value, bool):
        return value
    if value is None:
        return False
    normalized = str(value).strip().casefold()
    return normalized in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class ChartRequest:
    """A decoded `{config, data}` request body."""

    config: ChartConfiguration
    rows: tuple[DataRow, ...]
    loading: bool = False


def decode_chart_request(payload: object) -> ChartRequest:
    """Decode a `{config, data, loading}` request body.

    Args:
        payload: Decoded JSON body.

    Returns:
        ChartRequest. A missing `data` key means no rows.

    Raises:
        ValueError: When the body, config or data are structurally invalid.
    """

    if not isinstance(payload, Mapping):
        raise ValueError("Request body must be a JSON object.")
    config = decode_chart_configuration(payload.get("config"))
    data = payload.get("data")
    if data is None:
        data = []
    if not isinstance(data, list):
        raise ValueError("data must be a list of rows.")
    for index, row in enumerate(data):
        if not isinstance(row, Mapping):
            raise ValueError(f"data[{index}] must be a JSON object.")
    return ChartRequest(config=config, rows=tuple(data), loading=_parse_bool(payload.get("loading")))
