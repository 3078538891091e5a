"""String and HTML properties."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator

from modelprops.core.properties.base import AbstractProperty, PropertyOptions, Setter
from modelprops.core.validation import ValidationHandler
from modelprops.shared.constants import CheckMessages, CheckNames, PropertyDefaults, SqlTypes
from modelprops.shared.errors import ErrorCode, create_invalid_value_error

_REGEXP_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,
}
_DELIMITED_REGEXP = re.compile(r"^/(?P<pattern>.*)/(?P<flags>[imsxu]*)$", re.DOTALL)


def compile_regexp(regexp: str) -> re.Pattern[str]:
    """Compile a pattern, accepting ``/pattern/flags`` delimiters.

    Example:
        >>> compile_regexp("/^[a-z]+$/i").match("ABC") is not None
        True
    """
    match = _DELIMITED_REGEXP.match(regexp)
    if match is None:
        return re.compile(regexp)
    flags = 0
    for flag in match.group("flags"):
        flags |= _REGEXP_FLAGS[flag]
    return re.compile(match.group("pattern"), flags)


class StringOptions(PropertyOptions):
    min_length: int = Field(default=0, ge=0)
    max_length: int = Field(default=PropertyDefaults.STRING_MAX_LENGTH, ge=0)
    regexp: str = ""
    allow_empty: bool = True

    @field_validator("regexp")
    @classmethod
    def validate_regexp(cls, v: str) -> str:
        """Patterns must compile."""
        if v:
            try:
                compile_regexp(v)
            except re.error as e:
                msg = f"Invalid regular expression: {e}"
                raise ValueError(msg) from e
        return v


class StringProperty(AbstractProperty):
    """Text value with length and pattern constraints.

    An empty string is kept as a value while ``allow_empty`` is on;
    otherwise it is treated like null.
    """

    type_ident = "string"
    options_class = StringOptions

    _options: StringOptions

    def default_options(self) -> dict[str, Any]:
        return {**super().default_options(), "max_length": self.default_max_length()}

    def default_max_length(self) -> int:
        return PropertyDefaults.STRING_MAX_LENGTH

    def setters(self) -> dict[str, Setter]:
        return {
            **super().setters(),
            "min_length": self.set_min_length,
            "max_length": self.set_max_length,
            "regexp": self.set_regexp,
            "allow_empty": self.set_allow_empty,
        }

    @property
    def min_length(self) -> int:
        return self._options.min_length

    def set_min_length(self, min_length: int) -> StringProperty:
        self._set_option("min_length", min_length)
        return self

    @property
    def max_length(self) -> int:
        return self._options.max_length

    def set_max_length(self, max_length: int) -> StringProperty:
        self._set_option("max_length", max_length)
        return self

    @property
    def regexp(self) -> str:
        return self._options.regexp

    def set_regexp(self, regexp: str) -> StringProperty:
        self._set_option("regexp", regexp)
        return self

    @property
    def allow_empty(self) -> bool:
        return self._options.allow_empty

    def set_allow_empty(self, allow_empty: Any) -> StringProperty:
        self._set_option("allow_empty", bool(allow_empty))
        return self

    def _coerce(self, val: Any) -> Any:
        if isinstance(val, str) and val == "" and self.allow_empty and not self.multiple:
            return val
        return super()._coerce(val)

    def parse_one(self, val: Any) -> Any:
        if val is None or isinstance(val, str):
            return val
        if isinstance(val, (int, float)):
            return str(val)
        return val

    def length(self) -> int:
        """Number of characters of the current value.

        Raises:
            InvalidValueError: If no value is set
        """
        val = self.val()
        if val is None:
            raise create_invalid_value_error(
                "Can not get length of an empty value.",
                ident=self.ident,
                code=ErrorCode.INVALID_VALUE,
                operation="length",
            )
        if isinstance(val, Mapping):
            val = val.get(self.current_locale(), "")
        if isinstance(val, list):
            return len(self.input_val(val))
        return len(str(val))

    def sql_type(self) -> str:
        max_length = self.max_length
        if self.multiple or max_length == 0 or max_length > SqlTypes.DEFAULT_VARCHAR_LENGTH:
            return SqlTypes.TEXT
        return SqlTypes.varchar(max_length)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validation_methods(self) -> list[str]:
        return [
            *super().validation_methods(),
            CheckNames.MIN_LENGTH,
            CheckNames.MAX_LENGTH,
            CheckNames.REGEXP,
        ]

    def validation_handlers(self) -> dict[str, ValidationHandler]:
        return {
            **super().validation_handlers(),
            CheckNames.MIN_LENGTH: self.validate_min_length,
            CheckNames.MAX_LENGTH: self.validate_max_length,
            CheckNames.REGEXP: self.validate_regexp,
        }

    def _string_values(self) -> list[Any]:
        """Flatten the value into its individual strings."""
        val = self.val()
        values = list(val.values()) if self.l10n and isinstance(val, Mapping) else [val]
        flat: list[Any] = []
        for v in values:
            if isinstance(v, list):
                flat.extend(v)
            else:
                flat.append(v)
        return flat

    def validate_min_length(self) -> bool:
        min_length = self.min_length
        if not min_length:
            return True

        for val in self._string_values():
            if val is None or (val == "" and not self.allow_empty):
                valid = False
            elif val == "":
                valid = True
            else:
                valid = len(str(val)) >= min_length
            if not valid:
                self.validator().error(
                    CheckMessages.MIN_LENGTH.format(min_length=min_length),
                    CheckNames.MIN_LENGTH,
                )
                return False
        return True

    def validate_max_length(self) -> bool:
        max_length = self.max_length
        if not max_length:
            return True

        for val in self._string_values():
            if val is not None and len(str(val)) > max_length:
                self.validator().error(
                    CheckMessages.MAX_LENGTH.format(max_length=max_length),
                    CheckNames.MAX_LENGTH,
                )
                return False
        return True

    def validate_regexp(self) -> bool:
        regexp = self.regexp
        if not regexp:
            return True

        pattern = compile_regexp(regexp)
        for val in self._string_values():
            if val is not None and pattern.search(str(val)) is None:
                self.validator().error(
                    CheckMessages.REGEXP.format(regexp=regexp),
                    CheckNames.REGEXP,
                )
                return False
        return True


class HtmlProperty(StringProperty):
    """HTML text, unbounded by default."""

    type_ident = "html"

    def default_max_length(self) -> int:
        return 0

    def sql_type(self) -> str:
        return SqlTypes.TEXT
