"""Default values for property options and configuration."""


class Application:
    """Application metadata."""

    NAME = "modelprops"
    VERSION = "0.1.0"


class PropertyDefaults:
    """Defaults shared by every property variant."""

    MULTIPLE_SEPARATOR = ","
    DISPLAY_TYPE = "text"
    DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

    # Fixed layout used by date-time input and storage values
    DATETIME_STORAGE_FORMAT = "%Y-%m-%d %H:%M:%S"

    # JSON indentation for non-scalar input values
    JSON_INDENT = 4

    STRING_MAX_LENGTH = 255
    BOOLEAN_TRUE_LABEL = "True"
    BOOLEAN_FALSE_LABEL = "False"


class StructureDefaults:
    """Defaults for structured properties."""

    MAX_DEPTH = 8
    METADATA_PREFIX = "property/structure"


class I18nDefaults:
    """Localization defaults."""

    DEFAULT_LOCALE = "en"
    LOCALES = ("en", "fr")
