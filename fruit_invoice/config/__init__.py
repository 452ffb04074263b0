"""Configuration package."""

from fruit_invoice.config.logging import configure_logging, get_logger
from fruit_invoice.config.settings import (
    AppSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "StorageSettings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "validate_all_settings",
]
