"""Tests for BooleanProperty."""

from __future__ import annotations

import pytest

from modelprops.shared.constants import PdoType
from modelprops.shared.errors import ErrorCode, InvalidValueError


class TestBooleanProperty:
    """Test cases for boolean coercion and rendering."""

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off", 0, False])
    def test_false_values(self, factory, raw):
        """Falsy strings and values parse to False."""
        prop = factory.create("boolean")
        assert prop.set_val(raw).val() is False

    @pytest.mark.parametrize("raw", ["1", "true", "yes", "on", 1, True])
    def test_true_values(self, factory, raw):
        """Other values parse to True."""
        prop = factory.create("boolean")
        assert prop.set_val(raw).val() is True

    def test_multiple_rejected(self, factory):
        """A boolean can not be multiple."""
        prop = factory.create("boolean")

        with pytest.raises(InvalidValueError) as exc_info:
            prop.set_multiple(True)

        assert exc_info.value.code == ErrorCode.INVALID_OPTION
        assert prop.set_multiple(False).multiple is False

    def test_display_val_uses_labels(self, factory):
        """display_val renders the translatable labels."""
        prop = factory.build(
            {"type": "boolean", "true_label": {"en": "Yes", "fr": "Oui"}, "false_label": "No"},
            ident="b",
        )
        assert prop.set_val(True).display_val() == "Yes"
        assert prop.display_val(None, {"lang": "fr"}) == "Oui"
        assert prop.set_val(False).display_val() == "No"

    def test_default_labels(self, factory):
        """Labels default to True / False."""
        prop = factory.create("boolean")
        assert str(prop.true_label) == "True"
        assert str(prop.false_label) == "False"

    def test_choices(self, factory):
        """choices() lists both values with the selection."""
        prop = factory.build({"type": "boolean", "val": True}, ident="b")
        assert prop.choices() == [
            {"label": "True", "selected": True, "value": 1},
            {"label": "False", "selected": False, "value": 0},
        ]

    def test_save_returns_bool(self, factory):
        """save() always returns a bool."""
        prop = factory.create("boolean")
        assert prop.save() is False
        assert prop.save("yes") is True

    def test_storage(self, factory):
        """Booleans map to an unsigned tinyint bound as bool."""
        prop = factory.create("boolean")
        assert prop.sql_type() == "TINYINT(1) UNSIGNED"
        assert prop.sql_pdo_type() == PdoType.BOOL
