"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path("", views.gallery, name="gallery"),
    path("charts/render/", views.render_fragment, name="render_chart"),
    path("charts/layout/", views.layout_json, name="layout_chart"),
    path("charts/export/", views.export_chart, name="export_chart"),
]
