"""Forms for chart studio request payloads."""

from __future__ import annotations

import re

from django import forms

from core.charting.export import EXPORT_FORMATS

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_NAMED_COLOR_RE = re.compile(r"^[a-zA-Z]+$")


class ExportOptionsForm(forms.Form):
    """Validate the `export` block of an export request.

    The form is bound to the decoded JSON object rather than POST data:
    `backgroundColor` is accepted as an alias for `background_color`.
    """

    format = forms.ChoiceField(choices=[(fmt, fmt.upper()) for fmt in EXPORT_FORMATS])
    filename = forms.CharField(required=False, max_length=200)
    width = forms.IntegerField(required=False, min_value=1, max_value=10000)
    height = forms.IntegerField(required=False, min_value=1, max_value=10000)
    background_color = forms.CharField(required=False, max_length=32)

    @classmethod
    def from_payload(cls, payload: object) -> ExportOptionsForm:
        """Bind the form to an `export` JSON object.

        Args:
            payload: Decoded `export` value (a mapping, or a bare format string).

        Returns:
            A bound ExportOptionsForm.
        """

        if isinstance(payload, str):
            payload = {"format": payload}
        if not isinstance(payload, dict):
            payload = {}
        data = {
            "format": str(payload.get("format") or "").strip().lower(),
            "filename": payload.get("filename") or "",
            "width": payload.get("width") or "",
            "height": payload.get("height") or "",
            "background_color": payload.get("backgroundColor") or payload.get("background_color") or "",
        }
        return cls(data=data)

    def clean_background_color(self) -> str:
        """Accept hex colors (#rgb or #rrggbb) and plain color names."""

        value = (self.cleaned_data.get("background_color") or "").strip()
        if value and not (_HEX_COLOR_RE.match(value) or _NAMED_COLOR_RE.match(value)):
            raise forms.ValidationError("Use a hex color such as #ffffff or a color name.")
        return value

    def error_message(self) -> str:
        """Return the validation errors as one line of plain text."""

        return " ".join(f"{field}: {' '.join(messages)}" for field, messages in self.errors.items())
