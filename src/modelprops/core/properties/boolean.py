"""Boolean property."""

from __future__ import annotations

from typing import Any

from modelprops.core.properties.base import UNSET, AbstractProperty, Setter
from modelprops.core.translation import Translation
from modelprops.shared.constants import PdoType, PropertyDefaults, SqlTypes
from modelprops.shared.errors import ErrorCode, create_invalid_value_error

FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


class BooleanProperty(AbstractProperty):
    """True/false value with translatable labels.

    A boolean is never multiple.
    """

    type_ident = "boolean"

    def __init__(self, data: Any = None) -> None:
        super().__init__(data)
        self._true_label = Translation(PropertyDefaults.BOOLEAN_TRUE_LABEL, locale=self.current_locale())
        self._false_label = Translation(PropertyDefaults.BOOLEAN_FALSE_LABEL, locale=self.current_locale())

    def setters(self) -> dict[str, Setter]:
        return {
            **super().setters(),
            "true_label": self.set_true_label,
            "false_label": self.set_false_label,
        }

    def set_multiple(self, multiple: Any) -> BooleanProperty:
        """Raises InvalidValueError when enabling multiple."""
        if multiple:
            raise create_invalid_value_error(
                "Multiple can not be enabled for boolean properties.",
                ident=self.ident,
                code=ErrorCode.INVALID_OPTION,
                operation="set_multiple",
            )
        super().set_multiple(False)
        return self

    @property
    def true_label(self) -> Translation:
        return self._true_label

    def set_true_label(self, label: Any) -> BooleanProperty:
        self._true_label = Translation(label, locale=self.current_locale())
        return self

    @property
    def false_label(self) -> Translation:
        return self._false_label

    def set_false_label(self, label: Any) -> BooleanProperty:
        self._false_label = Translation(label, locale=self.current_locale())
        return self

    def parse_one(self, val: Any) -> bool:
        if isinstance(val, str):
            return val.strip().lower() not in FALSE_STRINGS
        return bool(val)

    def display_val(self, val: Any = None, options: Any = None) -> str:
        options = options or {}
        if val is None:
            val = self.val()
        if val is None:
            return ""
        if self.l10n:
            val = self._localized(val, options)
        label = self._true_label if self.parse_one(val) else self._false_label
        return label.get(options.get("lang"))

    def choices(self) -> list[dict[str, Any]]:
        """Form choices for the true and false values."""
        val = self.val()
        return [
            {"label": str(self._true_label), "selected": val is True, "value": 1},
            {"label": str(self._false_label), "selected": val is False, "value": 0},
        ]

    def save(self, val: Any = UNSET) -> bool:
        if val is not UNSET:
            self.set_val(val)
        return bool(self.val())

    def sql_type(self) -> str:
        return SqlTypes.BOOLEAN

    def sql_pdo_type(self) -> PdoType:
        return PdoType.BOOL
