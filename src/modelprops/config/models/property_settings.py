"""Property-level configuration models.

Defaults the property factory applies to every property it builds.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from modelprops.shared.constants import (
    I18nDefaults,
    PropertyDefaults,
    StructureDefaults,
    UploadDefaults,
)


class PropertySettings(BaseModel):
    """Defaults shared by all property variants."""

    multiple_separator: str = Field(
        default=PropertyDefaults.MULTIPLE_SEPARATOR,
        min_length=1,
        description="Separator splitting multiple values given as a string",
    )
    datetime_format: str = Field(
        default=PropertyDefaults.DATETIME_FORMAT,
        description="strftime pattern used to display date-time values",
    )
    default_display_type: str = Field(
        default=PropertyDefaults.DISPLAY_TYPE,
        description="Display type used when the metadata does not define one",
    )


class UploadSettings(BaseModel):
    """File upload configuration."""

    base_path: str = Field(
        default="",
        description="Base directory upload paths are resolved against (cwd when empty)",
    )
    upload_path: str = Field(default=UploadDefaults.UPLOAD_PATH, description="Upload directory")
    max_filesize: int = Field(
        default=UploadDefaults.MAX_FILESIZE,
        ge=0,
        description="Maximum file size in bytes (0 = unbounded)",
    )
    overwrite: bool = Field(default=UploadDefaults.OVERWRITE, description="Overwrite existing files")

    @field_validator("upload_path")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        """Upload paths always end with a slash."""
        return v.rstrip("/") + "/"


class StructureSettings(BaseModel):
    """Structured property configuration."""

    max_depth: int = Field(
        default=StructureDefaults.MAX_DEPTH,
        ge=1,
        description="Maximum nesting depth of structured properties",
    )
    metadata_paths: list[str] = Field(
        default_factory=list,
        description="Directories holding structure interface files (.json/.toml)",
    )


class I18nSettings(BaseModel):
    """Localization configuration."""

    default_locale: str = Field(default=I18nDefaults.DEFAULT_LOCALE, min_length=2)
    locales: list[str] = Field(default_factory=lambda: list(I18nDefaults.LOCALES))

    @field_validator("locales")
    @classmethod
    def validate_locales(cls, v: list[str]) -> list[str]:
        """Locales must not be empty."""
        if not v:
            msg = "At least one locale is required"
            raise ValueError(msg)
        return v


__all__ = [
    "I18nSettings",
    "PropertySettings",
    "StructureSettings",
    "UploadSettings",
]
