"""Configuration models for modelprops."""

from .app_settings import AppSettings, LoggingSettings
from .property_settings import (
    I18nSettings,
    PropertySettings,
    StructureSettings,
    UploadSettings,
)
from .settings import Settings

__all__ = [
    "AppSettings",
    "I18nSettings",
    "LoggingSettings",
    "PropertySettings",
    "Settings",
    "StructureSettings",
    "UploadSettings",
]
