"""Configuration package."""

from tripsplit.config.settings import (
    AppSettings,
    LoggingSettings,
    Settings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]
