"""Date-time property."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Any

from modelprops.core.properties.base import UNSET, AbstractProperty, PropertyOptions, Setter
from modelprops.core.validation import ValidationHandler
from modelprops.shared.constants import CheckMessages, CheckNames, PropertyDefaults, SqlTypes
from modelprops.shared.errors import (
    ErrorCode,
    create_invalid_value_error,
    create_null_value_error,
)

# Tried in order after datetime.fromisoformat()
DATETIME_INPUT_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%d %H-%M-%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y",
    "%d %B %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%b %d, %Y",
)


def parse_datetime(val: str) -> datetime | None:
    """Parse a date-time string.

    Accepts ISO 8601, the layouts of ``DATETIME_INPUT_FORMATS`` and the
    keywords ``now`` and ``today``.

    Returns:
        The parsed instant, or None if no layout matches.
    """
    text = val.strip()
    keyword = text.lower()
    if keyword == "now":
        return datetime.now()
    if keyword == "today":
        return datetime.combine(date.today(), time())

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    for fmt in DATETIME_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _as_utc(val: datetime) -> datetime:
    # Naive instants are taken as UTC so they compare with aware ones
    if val.tzinfo is None:
        return val.replace(tzinfo=timezone.utc)
    return val.astimezone(timezone.utc)


class DateTimeOptions(PropertyOptions):
    min: datetime | None = None
    max: datetime | None = None
    format: str = PropertyDefaults.DATETIME_FORMAT


class DateTimeProperty(AbstractProperty):
    """A date-time instant, optionally bounded by ``min`` / ``max``.

    Never multiple: enabling ``multiple`` raises InvalidValueError.
    """

    type_ident = "date-time"
    options_class = DateTimeOptions

    _options: DateTimeOptions

    def default_options(self) -> dict[str, Any]:
        return {**super().default_options(), "format": self.settings.properties.datetime_format}

    def setters(self) -> dict[str, Setter]:
        return {
            **super().setters(),
            "min": self.set_min,
            "max": self.set_max,
            "format": self.set_format,
        }

    def set_multiple(self, multiple: Any) -> DateTimeProperty:
        if multiple:
            raise create_invalid_value_error(
                "Multiple can not be enabled for date/time properties.",
                ident=self.ident,
                code=ErrorCode.INVALID_OPTION,
                operation="set_multiple",
            )
        return self

    @property
    def min(self) -> datetime | None:
        return self._options.min

    def set_min(self, value: str | datetime | date | None) -> DateTimeProperty:
        self._set_option("min", self._parse_bound(value, "min"))
        return self

    @property
    def max(self) -> datetime | None:
        return self._options.max

    def set_max(self, value: str | datetime | date | None) -> DateTimeProperty:
        self._set_option("max", self._parse_bound(value, "max"))
        return self

    @property
    def format(self) -> str:
        return self._options.format

    def set_format(self, value: str) -> DateTimeProperty:
        self._set_option("format", value)
        return self

    def _parse_bound(self, bound: Any, name: str) -> datetime | None:
        if bound is None:
            return None
        if isinstance(bound, (str, datetime, date)):
            parsed = self._to_datetime(bound)
            if parsed is not None:
                return parsed
        raise create_invalid_value_error(
            f"Can not set {name}: invalid date/time {bound!r}",
            ident=self.ident,
            code=ErrorCode.INVALID_OPTION,
            operation=f"set_{name}",
        )

    @staticmethod
    def _to_datetime(val: Any) -> datetime | None:
        if isinstance(val, datetime):
            return val
        if isinstance(val, date):
            return datetime.combine(val, time())
        if isinstance(val, str):
            return parse_datetime(val)
        return None

    @staticmethod
    def _is_blank(val: Any) -> bool:
        if val is None:
            return True
        if isinstance(val, str):
            return not val.strip()
        if isinstance(val, Mapping):
            val = list(val.values())
        if isinstance(val, (list, tuple)):
            return not any(str(v).strip() for v in val if v is not None)
        return False

    def datetime_val(self, val: Any) -> datetime | None:
        """Parse ``val`` into an instant.

        Fragments given as a list or mapping are joined with spaces
        before parsing.

        Raises:
            InvalidValueError: For blank input when null is not allowed,
                or input that is not a valid date
        """
        if self._is_blank(val):
            if self.allow_null:
                return None
            raise create_null_value_error(self.ident)

        if isinstance(val, Mapping):
            val = list(val.values())
        if isinstance(val, (list, tuple)):
            val = " ".join(str(v).strip() for v in val if v is not None and str(v).strip())

        parsed = self._to_datetime(val)
        if parsed is None:
            raise create_invalid_value_error(
                f"Value must be a valid date: {val!r}",
                ident=self.ident,
                code=ErrorCode.INVALID_DATETIME,
                operation="set_val",
            )
        return parsed

    def set_val(self, val: Any) -> DateTimeProperty:
        self._val = self.datetime_val(val)
        return self

    def parse_one(self, val: Any) -> Any:
        return self.datetime_val(val)

    def input_val(self, val: Any = None, options: Mapping[str, Any] | None = None) -> str:
        if val is None:
            val = self.val()
        parsed = self._to_datetime(val) if isinstance(val, (str, date)) else None
        if parsed is not None:
            return parsed.strftime(PropertyDefaults.DATETIME_STORAGE_FORMAT)
        if isinstance(val, str):
            return val
        return ""

    def display_val(self, val: Any = None, options: Mapping[str, Any] | None = None) -> str:
        if val is None:
            val = self.val()
        if self._is_blank(val):
            return ""
        parsed = self.datetime_val(val)
        return parsed.strftime(self.format) if parsed is not None else ""

    def storage_val(self, val: Any = UNSET) -> str | None:
        """Return the value in the fixed storage layout.

        Raises:
            InvalidValueError: If the value is missing and null is not allowed
        """
        if val is UNSET:
            val = self.val()
        parsed = None if self._is_blank(val) else self._to_datetime(val)
        if parsed is not None:
            return parsed.strftime(PropertyDefaults.DATETIME_STORAGE_FORMAT)
        if self.allow_null:
            return None
        raise create_invalid_value_error(
            "Invalid date/time value",
            ident=self.ident,
            code=ErrorCode.INVALID_DATETIME,
            operation="storage_val",
        )

    def json_serialize(self) -> str | None:
        val = self.val()
        if val is None:
            return None
        return val.isoformat(timespec="seconds")

    def is_empty(self, val: Any) -> bool:
        return val is None

    def sql_type(self) -> str:
        return SqlTypes.DATETIME

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validation_methods(self) -> list[str]:
        return [*super().validation_methods(), CheckNames.MIN, CheckNames.MAX]

    def validation_handlers(self) -> dict[str, ValidationHandler]:
        return {
            **super().validation_handlers(),
            CheckNames.MIN: self.validate_min,
            CheckNames.MAX: self.validate_max,
        }

    def validate_min(self) -> bool:
        bound = self.min
        val = self.val()
        if bound is None or val is None:
            return True
        if _as_utc(val) < _as_utc(bound):
            self.validator().error(CheckMessages.DATE_MIN, CheckNames.MIN)
            return False
        return True

    def validate_max(self) -> bool:
        bound = self.max
        val = self.val()
        if bound is None or val is None:
            return True
        if _as_utc(val) > _as_utc(bound):
            self.validator().error(CheckMessages.DATE_MAX, CheckNames.MAX)
            return False
        return True
