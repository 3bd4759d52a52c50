"""URL configuration for core views."""

from __future__ import annotations

from django.urls import path

from core import views

app_name = "core"

urlpatterns = [
    path("api/attack-reports/parse/", views.parse_attack_report_api, name="parse_attack_report_api"),
]
