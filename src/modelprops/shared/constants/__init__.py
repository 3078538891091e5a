"""modelprops Constants Module

Centralized constants for the property layer: SQL type names, the named
color table, filename rules, validation check names and defaults.
"""

from .colors import NAMED_COLORS
from .defaults import Application, I18nDefaults, PropertyDefaults, StructureDefaults
from .filenames import (
    FILENAME_BLACKLIST,
    FILENAME_REPLACEMENT,
    UploadDefaults,
    UploadErrorCodes,
)
from .sql import PdoType, SqlTypes
from .validation import CheckMessages, CheckNames

__all__ = [
    "FILENAME_BLACKLIST",
    "FILENAME_REPLACEMENT",
    "NAMED_COLORS",
    "Application",
    "CheckMessages",
    "CheckNames",
    "I18nDefaults",
    "PdoType",
    "PropertyDefaults",
    "SqlTypes",
    "StructureDefaults",
    "UploadDefaults",
    "UploadErrorCodes",
]
