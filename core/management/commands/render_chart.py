"""Render a chart request file and write the exported image."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from django.core.management.base import BaseCommand, CommandError

from core.charting.codec import decode_chart_request
from core.charting.export import EXPORT_FORMATS, ExportError, export
from core.charting.host import outcome_message
from core.charting.render import Rendered, render
from core.charting.surface import paint


def load_request_file(path: Path) -> object:
    """Load a `{config, data}` request from a YAML or JSON file.

    JSON is a subset of YAML, so `.json` files are parsed with the JSON
    decoder only to give better error messages.
    """

    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(raw)
    return yaml.safe_load(raw) or {}


class Command(BaseCommand):
    """Render a chart described in a YAML/JSON file."""

    help = "Render a chart request file ({config, data}) and write it as PNG, SVG or PDF."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("path", help="YAML or JSON file containing {config, data}.")
        parser.add_argument(
            "--format",
            choices=EXPORT_FORMATS,
            default="png",
            help="Export format (default: png).",
        )
        parser.add_argument(
            "--output",
            default=None,
            help="Output file path (default: <title or chart>.<format> in the current directory).",
        )
        parser.add_argument("--width", type=int, default=None, help="Output width in pixels.")
        parser.add_argument("--height", type=int, default=None, help="Output height in pixels.")
        parser.add_argument("--background", default=None, help="Background color for this export.")

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        path = Path(options["path"])
        fmt: str = options["format"]
        if not path.is_file():
            raise CommandError(f"File not found: {path}")

        try:
            payload = load_request_file(path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise CommandError(f"Could not read {path}: {exc}") from exc
        try:
            chart_request = decode_chart_request(payload)
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        outcome = render(chart_request.config, chart_request.rows)
        if not isinstance(outcome, Rendered):
            raise CommandError(outcome_message(outcome))
        for warning in outcome.warnings:
            self.stderr.write(self.style.WARNING(warning))

        output = Path(options["output"]) if options["output"] else None
        try:
            artifact = export(
                paint(outcome.layout),
                fmt,
                output.name if output is not None else None,
                width=options["width"],
                height=options["height"],
                background_color=options["background"],
            )
        except ExportError as exc:
            raise CommandError(str(exc)) from exc

        target = output if output is not None else Path(artifact.filename)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(artifact.content)
        self.stdout.write(self.style.SUCCESS(f"Wrote {target} ({len(artifact.content)} bytes, {artifact.content_type})."))
        return None
