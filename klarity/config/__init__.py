"""Configuration package."""

from klarity.config.settings import (
    AppSettings,
    MetricsSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "MetricsSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
