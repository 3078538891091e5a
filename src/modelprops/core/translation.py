"""Translatable text and locale registry.

``Translation`` is the text unit used for labels, descriptions and
notes; ``Translator`` knows the available locales and the display
names of languages.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from modelprops.shared.constants import I18nDefaults

# Language display names, keyed by the locale the name is written in
LANGUAGE_NAMES: dict[str, dict[str, str]] = {
    "en": {"en": "English", "fr": "French", "es": "Spanish", "de": "German"},
    "fr": {"en": "Anglais", "fr": "Français", "es": "Espagnol", "de": "Allemand"},
    "es": {"en": "Inglés", "fr": "Francés", "es": "Español", "de": "Alemán"},
    "de": {"en": "Englisch", "fr": "Französisch", "es": "Spanisch", "de": "Deutsch"},
}


class Translation:
    """A text unit holding one string per locale.

    Example:
        >>> label = Translation({"en": "Title", "fr": "Titre"}, locale="fr")
        >>> str(label)
        'Titre'
    """

    def __init__(
        self,
        value: str | Mapping[str, str] | Translation | None = None,
        locale: str = I18nDefaults.DEFAULT_LOCALE,
    ) -> None:
        self.locale = locale
        self._values: dict[str, str] = {}
        if isinstance(value, Translation):
            self._values = dict(value._values)
        elif isinstance(value, Mapping):
            self._values = {str(k): str(v) for k, v in value.items()}
        elif value is not None:
            self._values = {locale: str(value)}

    def __getitem__(self, locale: str) -> str:
        return self._values[locale]

    def __contains__(self, locale: object) -> bool:
        return locale in self._values

    def __bool__(self) -> bool:
        return any(self._values.values())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Translation):
            return self._values == other._values
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._values.items())))

    def __repr__(self) -> str:
        return f"Translation({self._values!r})"

    def __str__(self) -> str:
        return self.get(self.locale)

    def get(self, locale: str | None = None, fallback: bool = True) -> str:
        """Return the string for ``locale``.

        Falls back to the first available string when the locale is
        missing and ``fallback`` is set.
        """
        locale = locale or self.locale
        if locale in self._values:
            return self._values[locale]
        if fallback and self._values:
            return next(iter(self._values.values()))
        return ""

    def data(self) -> dict[str, str]:
        return dict(self._values)


class Translator:
    """Registry of available locales and the current locale."""

    def __init__(
        self,
        locales: Iterable[str] = I18nDefaults.LOCALES,
        current_locale: str | None = None,
        language_names: Mapping[str, Mapping[str, str]] | None = None,
    ) -> None:
        self.locales = list(locales)
        if not self.locales:
            msg = "Translator requires at least one locale"
            raise ValueError(msg)
        self.current_locale = current_locale or self.locales[0]
        self._names = {k: dict(v) for k, v in (language_names or LANGUAGE_NAMES).items()}

    def translation(self, value: Any) -> Translation:
        """Wrap ``value`` into a Translation bound to the current locale."""
        return Translation(value, locale=self.current_locale)

    def translate(self, value: Any, locale: str | None = None) -> str:
        if isinstance(value, Translation):
            return value.get(locale or self.current_locale)
        if isinstance(value, Mapping):
            return Translation(value).get(locale or self.current_locale)
        return "" if value is None else str(value)

    def language_name(self, code: str, locale: str | None = None) -> str:
        """Return the display name of language ``code`` in ``locale``.

        Unknown codes are returned as given.
        """
        names = self._names.get(locale or self.current_locale) or self._names.get(
            I18nDefaults.DEFAULT_LOCALE, {}
        )
        return names.get(code, code)
