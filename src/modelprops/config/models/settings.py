"""modelprops Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from modelprops.config.models.app_settings import AppSettings, LoggingSettings
from modelprops.config.models.property_settings import (
    I18nSettings,
    PropertySettings,
    StructureSettings,
    UploadSettings,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Settings facade providing unified configuration access.

    Every section can be overridden from the environment, e.g.
    ``MODELPROPS_UPLOAD__MAX_FILESIZE=1024``.
    """

    model_config = SettingsConfigDict(
        env_prefix="MODELPROPS_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    properties: PropertySettings = Field(default_factory=PropertySettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    structure: StructureSettings = Field(default_factory=StructureSettings)
    i18n: I18nSettings = Field(default_factory=I18nSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""

        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        logger.debug("Loaded configuration from %s", file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file."""

        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude_none=True)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)
