"""Application and logging configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from modelprops.shared.constants import Application


class AppSettings(BaseModel):
    """Application configuration."""

    name: str = Field(default=Application.NAME, description="Application name")
    version: str = Field(default=Application.VERSION, description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")


class LoggingSettings(BaseModel):
    """Logging configuration.

    Only applied when an application calls ``setup_logging()``; the
    library itself stays silent by default.
    """

    level: str = Field(default="INFO", description="Logging level")
    file: str | None = Field(default=None, description="Optional JSON log file path")
    console_output: bool = Field(default=True, description="Enable console logging")
    use_rich: bool = Field(default=True, description="Use Rich for console output")


__all__ = [
    "AppSettings",
    "LoggingSettings",
]
