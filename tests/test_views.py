"""Integration tests for the chart host views."""

from __future__ import annotations

import json

import pytest
from django.urls import reverse

pytestmark = pytest.mark.integration

COLUMN_PAYLOAD = {
    "config": {
        "type": "COLUMN",
        "title": "Revenue",
        "xAxis": {"field": "quarter"},
        "series": [{"field": "revenue"}],
    },
    "data": [
        {"quarter": "Q1", "revenue": 120},
        {"quarter": "Q2", "revenue": 150},
    ],
}


def _post(client, name: str, payload: object):
    body = payload if isinstance(payload, str) else json.dumps(payload)
    return client.post(reverse(name), data=body, content_type="application/json")


def test_gallery_renders_every_sample(client) -> None:
    """The gallery shows one drawn slot per chart type with export buttons."""

    response = client.get(reverse("core:gallery"))
    assert response.status_code == 200
    content = response.content.decode()
    assert content.count('data-state="chart"') == 17
    assert 'id="payload-box_plot"' in content
    assert 'data-format="pdf"' in content
    assert 'linearGradient id="chart-heatmap-heatmap-legend"' in content
    assert "csrfmiddlewaretoken" in content


def test_gallery_rejects_post(client) -> None:
    """The gallery is read-only."""

    assert client.post(reverse("core:gallery")).status_code == 405


def test_render_fragment_draws_the_chart(client) -> None:
    """A valid request renders an SVG fragment."""

    response = _post(client, "core:render_chart", COLUMN_PAYLOAD)
    assert response.status_code == 200
    content = response.content.decode()
    assert 'data-state="chart"' in content
    assert "<svg" in content
    assert "Revenue" in content


@pytest.mark.parametrize(
    ("payload", "state", "message"),
    [
        ({"config": {"type": "COLUMN"}, "data": []}, "empty", "No data available for this chart."),
        ({"config": {"type": "RADAR"}, "data": [{"a": 1}]}, "error", "Unsupported chart type: RADAR"),
        ({"config": {"type": "TABLE"}, "data": [{"a": 1}], "loading": True}, "loading", "Loading chart"),
    ],
)
def test_render_fragment_shows_status_messages(client, payload, state: str, message: str) -> None:
    """Non-drawn outcomes render a status message instead of a chart."""

    response = _post(client, "core:render_chart", payload)
    assert response.status_code == 200
    content = response.content.decode()
    assert f'data-state="{state}"' in content
    assert message in content
    assert "<svg" not in content


def test_render_fragment_rejects_invalid_json(client) -> None:
    """Undecodable bodies answer 400 with a plain-text reason."""

    response = _post(client, "core:render_chart", "{not json")
    assert response.status_code == 400
    assert response["Content-Type"].startswith("text/plain")
    assert "not valid JSON" in response.content.decode()


def test_layout_json_returns_svg_and_meta(client) -> None:
    """The JSON endpoint exposes state, SVG and serializable metadata."""

    response = _post(client, "core:layout_chart", COLUMN_PAYLOAD)
    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "chart"
    assert body["title"] == "Revenue"
    assert body["svg"].startswith("<svg")
    assert body["exportFormats"] == ["png", "svg", "pdf"]
    assert body["meta"]["labels"] == ["Q1", "Q2"]
    assert body["meta"]["values"] == {"revenue": [120.0, 150.0]}


def test_layout_json_reports_config_errors(client) -> None:
    """Configuration errors come back as an error state with status 200."""

    response = _post(client, "core:layout_chart", {"config": {"type": "PIE"}, "data": [{"a": 1}]})
    assert response.status_code == 200
    body = response.json()
    assert body["state"] == "error"
    assert body["message"].startswith("Chart configuration error: categoryField is required")
    assert body["exportFormats"] == []


def test_layout_json_rejects_bad_structure(client) -> None:
    """Structurally invalid requests answer 400 with an error state."""

    response = _post(client, "core:layout_chart", {"config": {"type": "TABLE"}, "data": "rows"})
    assert response.status_code == 400
    assert response.json() == {"state": "error", "message": "data must be a list of rows."}


def test_export_returns_an_attachment(client) -> None:
    """Exports download with the requested file name."""

    payload = dict(COLUMN_PAYLOAD, export={"format": "svg", "filename": "q-report"})
    response = _post(client, "core:export_chart", payload)
    assert response.status_code == 200
    assert response["Content-Type"] == "image/svg+xml"
    assert response["Content-Disposition"] == 'attachment; filename="q-report.svg"'
    assert response.content.startswith(b"<svg")


def test_export_png_defaults_to_the_title(client) -> None:
    """PNG exports are named after the chart title."""

    payload = dict(COLUMN_PAYLOAD, export={"format": "png", "width": 320, "height": 160})
    response = _post(client, "core:export_chart", payload)
    assert response.status_code == 200
    assert response["Content-Disposition"] == 'attachment; filename="Revenue.png"'
    assert response.content.startswith(b"\x89PNG")


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        (dict(COLUMN_PAYLOAD, export={"format": "gif"}), "Invalid export options. format:"),
        ({"config": {"type": "COLUMN"}, "data": [], "export": "png"}, "Nothing to export. No data available"),
    ],
)
def test_export_rejects_unusable_requests(client, payload, message: str) -> None:
    """Bad export options and undrawable charts answer 400."""

    response = _post(client, "core:export_chart", payload)
    assert response.status_code == 400
    assert response.content.decode().startswith(message)


def test_chart_endpoints_require_post(client) -> None:
    """Render, layout and export only accept POST."""

    for name in ("core:render_chart", "core:layout_chart", "core:export_chart"):
        assert client.get(reverse(name)).status_code == 405
