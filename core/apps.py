"""App configuration for the attack report ingestion app."""

from __future__ import annotations

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuration for the `core` app, which hosts the attack report parser."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Attack reports"
