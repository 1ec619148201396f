"""Configuration package."""

from splitter.config.settings import (
    AppSettings,
    Settings,
    SharingSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "SharingSettings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
