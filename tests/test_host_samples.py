"""Unit tests for the host shell states and the sample gallery charts."""

from __future__ import annotations

import math
from datetime import date
from decimal import Decimal

import pytest

from core.charting.export import EXPORT_FORMATS, export
from core.charting.host import EMPTY_MESSAGE, LOADING_MESSAGE, build_host_state, jsonable, outcome_message
from core.charting.render import ConfigError, EmptyData, Rendered, UnsupportedType, render
from core.charting.samples import SAMPLE_CHART_BY_ID, SAMPLE_CHARTS, samples_for_types
from core.charting.schema import CHART_TYPES
from core.charting.surface import paint
from core.forms import ExportOptionsForm

pytestmark = pytest.mark.unit


def test_outcome_messages() -> None:
    """Each non-drawn outcome has a readable message."""

    assert outcome_message(EmptyData()) == EMPTY_MESSAGE
    assert outcome_message(ConfigError(reason="xAxis.field is required.")) == (
        "Chart configuration error: xAxis.field is required."
    )
    assert outcome_message(UnsupportedType(chart_type="RADAR")) == "Unsupported chart type: RADAR"


def test_loading_state_ignores_the_outcome(column_config, quarter_rows) -> None:
    """A loading slot shows the loading message and nothing else."""

    state = build_host_state(render(column_config, quarter_rows), config=column_config, loading=True)
    assert state.state == "loading"
    assert state.message == LOADING_MESSAGE
    assert state.title == "Revenue"
    assert state.svg == ""
    assert state.export_formats == ()
    assert build_host_state(None).state == "loading"


def test_rendered_state_offers_exports(column_config, quarter_rows) -> None:
    """Drawn charts get an SVG with slot-specific ids and export formats."""

    state = build_host_state(render(column_config, quarter_rows), config=column_config, element_id="slot-1")
    assert state.state == "chart"
    assert state.message == ""
    assert state.svg.startswith("<svg")
    assert state.surface.element_id == "slot-1"
    assert state.export_formats == EXPORT_FORMATS
    assert state.meta["labels"] == ("Q1", "Q2", "Q3", "Q4")


@pytest.mark.parametrize(
    ("outcome", "expected_state"),
    [
        (EmptyData(), "empty"),
        (ConfigError(reason="bad"), "error"),
        (UnsupportedType(chart_type="RADAR"), "error"),
    ],
)
def test_non_drawn_states(outcome, expected_state: str) -> None:
    """Empty data and errors show a message without exports."""

    state = build_host_state(outcome)
    assert state.state == expected_state
    assert state.message == outcome_message(outcome)
    assert state.surface is None
    assert state.export_formats == ()


def test_jsonable_converts_layout_metadata(waterfall_config, waterfall_rows) -> None:
    """Metadata becomes plain JSON values."""

    outcome = render(waterfall_config, waterfall_rows)
    assert isinstance(outcome, Rendered)
    meta = jsonable(outcome.layout.meta)
    assert meta["final_total"] == 80.0
    assert meta["spans"][0] == {"label": "start", "delta": 100.0, "start": 0.0, "end": 100.0, "kind": "increase"}
    assert jsonable({("a", "b"): math.inf, "d": date(2026, 1, 2), "n": Decimal("1.5")}) == {
        "a|b": None,
        "d": "2026-01-02",
        "n": 1.5,
    }


def test_every_chart_type_has_one_sample() -> None:
    """The gallery covers each chart type exactly once."""

    assert sorted(sample.config.type for sample in SAMPLE_CHARTS) == sorted(CHART_TYPES)
    assert len(SAMPLE_CHART_BY_ID) == len(SAMPLE_CHARTS)
    assert [sample.id for sample in samples_for_types(["pie", "TABLE"])] == ["pie", "table"]


@pytest.mark.parametrize("sample", SAMPLE_CHARTS, ids=lambda sample: sample.id)
def test_every_sample_renders_and_exports(sample) -> None:
    """Each sample draws and can be captured as a PNG."""

    outcome = render(sample.config, sample.rows)
    assert isinstance(outcome, Rendered), outcome
    assert outcome.layout.shapes
    artifact = export(paint(outcome.layout), "png", width=400, height=200)
    assert artifact.content.startswith(b"\x89PNG")


def test_box_plot_sample_flags_its_outlier() -> None:
    """The box plot sample includes the 100 outlier."""

    sample = SAMPLE_CHART_BY_ID["box_plot"]
    outcome = render(sample.config, sample.rows)
    assert isinstance(outcome, Rendered)
    assert 100.0 in outcome.layout.meta["stats"]["A"].outliers


def test_export_options_form_accepts_aliases() -> None:
    """The export block binds with camelCase aliases."""

    form = ExportOptionsForm.from_payload({"format": "PDF", "width": 300, "backgroundColor": "#fff"})
    assert form.is_valid(), form.errors
    assert form.cleaned_data["format"] == "pdf"
    assert form.cleaned_data["width"] == 300
    assert form.cleaned_data["height"] is None
    assert form.cleaned_data["background_color"] == "#fff"
    assert ExportOptionsForm.from_payload("svg").is_valid()


def test_export_options_form_reports_errors() -> None:
    """Bad formats, sizes and colors are reported on one line."""

    form = ExportOptionsForm.from_payload({"format": "gif", "width": -5, "backgroundColor": "url(javascript:x)"})
    assert not form.is_valid()
    assert set(form.errors) == {"format", "width", "background_color"}
    message = form.error_message()
    assert message.startswith("format: ")
    assert "background_color: Use a hex color" in message
