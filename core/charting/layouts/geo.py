"""Geo overlays: point, heat and choropleth markers on a flat projection.

Coordinates are projected equirectangularly into the plot area. Without a
`map_center` the view fits the data bounds; with one, the view is centered
there and spans the whole world at `map_zoom` 1 (half of it at zoom 2).

Choropleth maps are point-approximated: there is no boundary geometry, so
each location is drawn as one marker at the mean coordinate of its rows.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from analysis.aggregations import group_key
from analysis.numeric import coerce_number, format_number
from analysis.palette import heat_color, palette_color
from analysis.scales import LinearScale, SequentialColorScale

from ..bindings import resolve_coordinate_fields
from ..scene import CircleShape, GradientStop, LayoutResult, LinearGradient, LineShape, RectShape, Shape, TextShape
from ..schema import ChartConfiguration, DataRow
from .common import MUTED_LABEL_COLOR, PlotArea, plot_area, tooltip

MIN_POINT_RADIUS = 5.0
MAX_POINT_RADIUS = 25.0
HEAT_OPACITY = 0.6
CHOROPLETH_RADIUS = 12.0
MAP_BACKGROUND = "#eef2f7"
GRATICULE_COLOR = "#d1d9e6"
GRATICULE_STEP = 30.0
FIT_PADDING = 0.1


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A row's resolved coordinate and value."""

    index: int
    latitude: float
    longitude: float
    value: float | None
    row: DataRow


@dataclass(frozen=True, slots=True)
class GeoMarker:
    """A drawn marker: label, position, value, size and color."""

    label: str
    latitude: float
    longitude: float
    value: float
    x: float
    y: float
    radius: float
    color: str


@dataclass(frozen=True, slots=True)
class GeoProjection:
    """Equirectangular projection from (latitude, longitude) to pixels."""

    longitude_scale: LinearScale
    latitude_scale: LinearScale

    def __call__(self, latitude: float, longitude: float) -> tuple[float, float]:
        return self.longitude_scale(longitude), self.latitude_scale(latitude)


def fit_projection(
    points: Sequence[GeoPoint],
    area: PlotArea,
    *,
    center: tuple[float, float] | None = None,
    zoom: float = 1.0,
) -> GeoProjection:
    """Return a projection centered on `center`, or fitted to the points."""

    if center is not None:
        zoom = max(zoom, 1e-6)
        lat_c, lng_c = center
        lat_domain = (lat_c - 90.0 / zoom, lat_c + 90.0 / zoom)
        lng_domain = (lng_c - 180.0 / zoom, lng_c + 180.0 / zoom)
    elif points:
        lats = [p.latitude for p in points]
        lngs = [p.longitude for p in points]
        lat_pad = max((max(lats) - min(lats)) * FIT_PADDING, 1.0)
        lng_pad = max((max(lngs) - min(lngs)) * FIT_PADDING, 1.0)
        lat_domain = (min(lats) - lat_pad, max(lats) + lat_pad)
        lng_domain = (min(lngs) - lng_pad, max(lngs) + lng_pad)
    else:
        lat_domain, lng_domain = (-90.0, 90.0), (-180.0, 180.0)
    return GeoProjection(
        longitude_scale=LinearScale(domain=lng_domain, range=(area.x, area.right)),
        latitude_scale=LinearScale(domain=lat_domain, range=(area.bottom, area.y)),
    )


def geo_points(config: ChartConfiguration, rows: Sequence[DataRow]) -> tuple[list[GeoPoint], int]:
    """Resolve coordinates for every row.

    Returns:
        `(points, skipped)` where skipped counts rows without a usable
        latitude/longitude pair.
    """

    lat_field, lng_field = resolve_coordinate_fields(rows)
    value_field = config.value_field or config.measure_field
    points: list[GeoPoint] = []
    skipped = 0
    for index, row in enumerate(rows):
        lat = coerce_number(row.get(lat_field)) if lat_field else None
        lng = coerce_number(row.get(lng_field)) if lng_field else None
        if lat is None or lng is None or not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
            skipped += 1
            continue
        value = coerce_number(row.get(value_field)) if value_field else None
        points.append(GeoPoint(index=index, latitude=lat, longitude=lng, value=value, row=row))
    return points, skipped


def _graticule(projection: GeoProjection, area: PlotArea) -> list[Shape]:
    shapes: list[Shape] = [RectShape(area.x, area.y, area.width, area.height, fill=MAP_BACKGROUND, role="map-background")]
    lng_lo, lng_hi = sorted(projection.longitude_scale.domain)
    lat_lo, lat_hi = sorted(projection.latitude_scale.domain)
    lng = math.ceil(lng_lo / GRATICULE_STEP) * GRATICULE_STEP
    while lng <= lng_hi:
        x = projection.longitude_scale(lng)
        shapes.append(LineShape(x, area.y, x, area.bottom, stroke=GRATICULE_COLOR, role="graticule"))
        lng += GRATICULE_STEP
    lat = math.ceil(lat_lo / GRATICULE_STEP) * GRATICULE_STEP
    while lat <= lat_hi:
        y = projection.latitude_scale(lat)
        shapes.append(LineShape(area.x, y, area.right, y, stroke=GRATICULE_COLOR, role="graticule"))
        lat += GRATICULE_STEP
    return shapes


def _point_markers(config: ChartConfiguration, points: Sequence[GeoPoint], projection: GeoProjection) -> list[GeoMarker]:
    values = [p.value for p in points if p.value is not None]
    size = LinearScale(domain=(min(values), max(values)) if values else (0.0, 1.0), range=(MIN_POINT_RADIUS, MAX_POINT_RADIUS))
    label_field = config.location_field or config.category_field
    markers: list[GeoMarker] = []
    for point in points:
        x, y = projection(point.latitude, point.longitude)
        markers.append(
            GeoMarker(
                label=group_key(point.row.get(label_field)) if label_field else f"{point.latitude}, {point.longitude}",
                latitude=point.latitude,
                longitude=point.longitude,
                value=point.value or 0.0,
                x=x,
                y=y,
                radius=size(point.value) if point.value is not None else MIN_POINT_RADIUS,
                color=palette_color(point.index, config.colors),
            )
        )
    return markers


def _heat_markers(config: ChartConfiguration, points: Sequence[GeoPoint], projection: GeoProjection) -> list[GeoMarker]:
    peak = max((p.value for p in points if p.value is not None), default=0.0)
    markers: list[GeoMarker] = []
    for point in points:
        value = point.value or 0.0
        intensity = max(0.0, min(1.0, value / peak)) if peak > 0 else 0.0
        x, y = projection(point.latitude, point.longitude)
        markers.append(
            GeoMarker(
                label=f"{point.latitude}, {point.longitude}",
                latitude=point.latitude,
                longitude=point.longitude,
                value=value,
                x=x,
                y=y,
                radius=MIN_POINT_RADIUS + (MAX_POINT_RADIUS - MIN_POINT_RADIUS) * intensity,
                color=heat_color(intensity),
            )
        )
    return markers


def choropleth_regions(config: ChartConfiguration, points: Sequence[GeoPoint]) -> dict[str, tuple[float, float, float]]:
    """Group points by location and return `{location: (lat, lng, total)}`.

    The coordinate is the mean of the location's rows. Without a location or
    category field, each distinct coordinate is its own location.
    """

    key_field = config.location_field or config.category_field
    grouped: dict[str, list[GeoPoint]] = {}
    for point in points:
        key = group_key(point.row.get(key_field)) if key_field else f"{point.latitude:.4f},{point.longitude:.4f}"
        grouped.setdefault(key, []).append(point)
    return {
        key: (
            sum(p.latitude for p in members) / len(members),
            sum(p.longitude for p in members) / len(members),
            sum(p.value or 0.0 for p in members),
        )
        for key, members in grouped.items()
    }


def layout_geo(config: ChartConfiguration, rows: Sequence[DataRow]) -> LayoutResult:
    """Lay out a MAP_POINT, MAP_HEAT or MAP_CHOROPLETH chart.

    Rows without usable coordinates are skipped and counted in
    `meta["skipped_rows"]`.
    """

    points, skipped = geo_points(config, rows)
    area = plot_area(config, legend_rows=1 if config.legend and config.type == "MAP_CHOROPLETH" else 0)
    projection = fit_projection(points, area, center=config.map_center, zoom=config.map_zoom)

    shapes: list[Shape] = []
    shapes.extend(_graticule(projection, area))
    color_scale: SequentialColorScale | None = None

    if config.type == "MAP_HEAT":
        markers = _heat_markers(config, points, projection)
        opacity = HEAT_OPACITY
    elif config.type == "MAP_CHOROPLETH":
        regions = choropleth_regions(config, points)
        totals = [total for _lat, _lng, total in regions.values()]
        color_scale = SequentialColorScale(domain=(min(totals), max(totals)) if totals else (0.0, 1.0))
        markers = []
        for label, (lat, lng, total) in regions.items():
            x, y = projection(lat, lng)
            markers.append(
                GeoMarker(label=label, latitude=lat, longitude=lng, value=total, x=x, y=y, radius=CHOROPLETH_RADIUS, color=color_scale(total))
            )
        opacity = 0.9
    else:
        markers = _point_markers(config, points, projection)
        opacity = 0.75

    for marker in markers:
        if not area.contains(marker.x, marker.y):
            continue
        shapes.append(
            CircleShape(
                marker.x,
                marker.y,
                marker.radius,
                fill=marker.color,
                stroke="#ffffff",
                stroke_width=1.0,
                opacity=opacity,
                role="marker",
                tooltip=tooltip(config, f"{marker.label}: {format_number(marker.value)}"),
            )
        )
        if config.type == "MAP_CHOROPLETH":
            shapes.append(
                TextShape(marker.x, marker.y + marker.radius + 8, marker.label, font_size=10, fill=MUTED_LABEL_COLOR, anchor="middle", role="marker-label")
            )

    if color_scale is not None and config.legend:
        legend_x = config.width - config.margin.right - 160.0
        legend_y = max(4.0, config.margin.top - 4.0)
        shapes.append(
            LinearGradient(
                id="choropleth-legend",
                x=legend_x,
                y=legend_y,
                width=160.0,
                height=10.0,
                stops=tuple(GradientStop(offset, color) for offset, color in color_scale.stops()),
            )
        )
        lo, hi = color_scale.domain
        shapes.append(TextShape(legend_x - 4, legend_y + 5, format_number(lo), font_size=10, fill=MUTED_LABEL_COLOR, anchor="end", role="legend"))
        shapes.append(TextShape(legend_x + 164, legend_y + 5, format_number(hi), font_size=10, fill=MUTED_LABEL_COLOR, role="legend"))

    scales: dict[str, object] = {"projection": projection}
    if color_scale is not None:
        scales["color"] = color_scale

    return LayoutResult(
        chart_type=config.type,
        width=config.width,
        height=config.height,
        shapes=tuple(shapes),
        title=config.title,
        background_color=config.background_color,
        scales=scales,
        meta={"markers": tuple(markers), "skipped_rows": skipped},
    )
