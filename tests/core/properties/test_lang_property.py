"""Tests for LangProperty."""

from __future__ import annotations


class TestLangProperty:
    """Test cases for language codes."""

    def test_display_val_translates_code(self, factory):
        """Codes render as language names in the requested locale."""
        prop = factory.build({"type": "lang", "val": "fr"}, ident="lang")
        assert prop.display_val() == "French"
        assert prop.display_val(None, {"lang": "fr"}) == "Français"

    def test_unknown_code_shown_as_given(self, factory):
        """Unknown codes are displayed unchanged."""
        prop = factory.build({"type": "lang", "val": "xx"}, ident="lang")
        assert prop.display_val() == "xx"

    def test_multiple_joined_with_comma(self, factory):
        """Multiple languages are joined with ', '."""
        prop = factory.build({"type": "lang", "multiple": True, "val": "en,fr"}, ident="lang")
        assert prop.display_val() == "English, French"

    def test_choices(self, factory):
        """choices() lists the translator locales."""
        prop = factory.build({"type": "lang", "val": "fr"}, ident="lang")
        choices = prop.choices()

        assert list(choices) == ["en", "fr"]
        assert choices["fr"] == {"value": "fr", "label": "French", "selected": True}
        assert choices["en"]["selected"] is False

    def test_sql_type(self, factory):
        """Two-letter codes, TEXT when multiple."""
        prop = factory.create("lang")
        assert prop.sql_type() == "CHAR(2)"
        assert prop.set_multiple(True).sql_type() == "TEXT"
