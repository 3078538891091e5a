"""Configuration for modelprops."""

from .loader import get_config, load_settings, reload_config, reset_config, setup_logging
from .models import (
    AppSettings,
    I18nSettings,
    LoggingSettings,
    PropertySettings,
    Settings,
    StructureSettings,
    UploadSettings,
)

__all__ = [
    "AppSettings",
    "I18nSettings",
    "LoggingSettings",
    "PropertySettings",
    "Settings",
    "StructureSettings",
    "UploadSettings",
    "get_config",
    "load_settings",
    "reload_config",
    "reset_config",
    "setup_logging",
]
