"""Views for the chart host shell."""

from __future__ import annotations

import json
import logging
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.http import require_GET, require_POST

from core.charting.codec import ChartRequest, decode_chart_request, encode_chart_configuration
from core.charting.export import ExportError, export
from core.charting.host import HostState, build_host_state, jsonable, outcome_message
from core.charting.render import Rendered, render_many
from core.charting.render import render as render_chart
from core.charting.samples import SAMPLE_CHARTS
from core.charting.surface import paint
from core.forms import ExportOptionsForm

logger = logging.getLogger(__name__)


class BadChartRequest(ValueError):
    """Raised when a request body cannot be decoded into a chart request."""


def _load_json(request: HttpRequest) -> Any:
    try:
        return json.loads(request.body or b"{}")
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BadChartRequest(f"Request body is not valid JSON: {exc}") from exc


def _decode_request(request: HttpRequest) -> tuple[ChartRequest, Any]:
    """Decode the JSON body of a chart request.

    Returns:
        `(chart_request, raw_payload)`.

    Raises:
        BadChartRequest: When the body is not a valid chart request.
    """

    payload = _load_json(request)
    try:
        return decode_chart_request(payload), payload
    except ValueError as exc:
        raise BadChartRequest(str(exc)) from exc


def _host_state(chart_request: ChartRequest, *, element_id: str = "chart") -> HostState:
    if chart_request.loading:
        return build_host_state(None, config=chart_request.config, loading=True, element_id=element_id)
    outcome = render_chart(chart_request.config, chart_request.rows)
    return build_host_state(outcome, config=chart_request.config, element_id=element_id)


def _bad_request(message: str) -> HttpResponse:
    return HttpResponse(message, status=400, content_type="text/plain; charset=utf-8")


@require_GET
def gallery(request: HttpRequest) -> HttpResponse:
    """Render the sample gallery: one chart per supported type."""

    slots: list[dict[str, object]] = []
    outcomes = render_many((sample.config, sample.rows) for sample in SAMPLE_CHARTS)
    for sample, outcome in zip(SAMPLE_CHARTS, outcomes):
        host = build_host_state(outcome, config=sample.config, element_id=f"chart-{sample.id}")
        payload = {"config": encode_chart_configuration(sample.config), "data": list(sample.rows)}
        slots.append(
            {
                "id": sample.id,
                "chart_type": sample.config.type,
                "host": host,
                "payload": payload,
                "payload_id": f"payload-{sample.id}",
            }
        )
    return render(request, "core/gallery.html", {"slots": slots})


@require_POST
def render_fragment(request: HttpRequest) -> HttpResponse:
    """Render one chart slot as an HTML fragment.

    The body is `{config, data, loading}` JSON. Configuration errors and
    empty data are displayed in the fragment; only undecodable bodies are
    rejected with 400.
    """

    try:
        chart_request, _payload = _decode_request(request)
    except BadChartRequest as exc:
        return _bad_request(str(exc))
    host = _host_state(chart_request, element_id=str(request.GET.get("element_id") or "chart"))
    return render(request, "core/chart_host.html", {"host": host, "slot_id": "chart"})


@require_POST
def layout_json(request: HttpRequest) -> JsonResponse:
    """Return the render outcome as JSON: state, message, svg and meta."""

    try:
        chart_request, _payload = _decode_request(request)
    except BadChartRequest as exc:
        return JsonResponse({"state": "error", "message": str(exc)}, status=400)
    host = _host_state(chart_request)
    return JsonResponse(
        {
            "state": host.state,
            "message": host.message,
            "title": host.title,
            "svg": host.svg,
            "warnings": list(host.warnings),
            "exportFormats": list(host.export_formats),
            "meta": jsonable(host.meta),
        }
    )


@require_POST
def export_chart(request: HttpRequest) -> HttpResponse:
    """Export a chart as an attachment.

    The body is `{config, data, export: {format, filename, width, height,
    backgroundColor}}`. Anything that prevents a file from being produced
    answers 400 with a plain-text message.
    """

    try:
        chart_request, payload = _decode_request(request)
    except BadChartRequest as exc:
        return _bad_request(str(exc))

    form = ExportOptionsForm.from_payload(payload.get("export"))
    if not form.is_valid():
        return _bad_request(f"Invalid export options. {form.error_message()}")

    outcome = render_chart(chart_request.config, chart_request.rows)
    if not isinstance(outcome, Rendered):
        return _bad_request(f"Nothing to export. {outcome_message(outcome)}")

    surface = paint(outcome.layout)
    options = form.cleaned_data
    try:
        artifact = export(
            surface,
            options["format"],
            options.get("filename") or None,
            width=options.get("width"),
            height=options.get("height"),
            background_color=options.get("background_color") or None,
        )
    except ExportError as exc:
        return _bad_request(str(exc))

    logger.info("Exported %s chart as %s (%d bytes)", chart_request.config.type, artifact.format, len(artifact.content))
    response = HttpResponse(artifact.content, content_type=artifact.content_type)
    response["Content-Disposition"] = f'attachment; filename="{artifact.filename}"'
    return response
