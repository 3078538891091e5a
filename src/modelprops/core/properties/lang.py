"""Language property."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from modelprops.core.properties.base import AbstractProperty
from modelprops.core.translation import Translation, Translator
from modelprops.shared.constants import SqlTypes

logger = logging.getLogger(__name__)

DISPLAY_SEPARATOR = ", "


class LangProperty(AbstractProperty):
    """A language code, chosen among the translator's locales."""

    type_ident = "lang"

    def translator_or_default(self) -> Translator:
        if self.translator is None:
            self.translator = Translator(
                self.settings.i18n.locales,
                self.settings.i18n.default_locale,
            )
        return self.translator

    def parse_one(self, val: Any) -> Any:
        if isinstance(val, Translation):
            return str(val)
        return val

    def choices(self) -> dict[str, dict[str, Any]]:
        """Available languages, keyed by code."""
        translator = self.translator_or_default()
        val = self.val()
        selected = set(val) if isinstance(val, list) else {val}
        return {
            code: {
                "value": code,
                "label": translator.language_name(code),
                "selected": code in selected,
            }
            for code in translator.locales
        }

    def display_val(self, val: Any = None, options: Mapping[str, Any] | None = None) -> str:
        """Render language codes as language names.

        Unknown codes are shown as given.
        """
        options = options or {}
        translator = self.translator_or_default()
        lang = options.get("lang") or translator.current_locale
        if val is None:
            val = self.val()
        if val is None or val == "":
            return ""

        if self.l10n:
            val = self._localized(val, {"lang": lang})
        elif isinstance(val, Translation):
            val = val.get(lang)

        if self.multiple:
            if isinstance(val, str):
                val = val.split(self.multiple_separator)
            if isinstance(val, (list, tuple)):
                return DISPLAY_SEPARATOR.join(
                    translator.language_name(str(code).strip(), lang) for code in val if code
                )

        if not val:
            return ""
        return translator.language_name(str(val), lang)

    def sql_type(self) -> str:
        if self.multiple:
            return SqlTypes.TEXT
        return SqlTypes.LANG
