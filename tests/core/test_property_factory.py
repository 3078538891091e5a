"""Tests for PropertyFactory."""

from __future__ import annotations

import pytest

from modelprops.core.factory import PropertyFactory
from modelprops.core.properties import GenericProperty, StringProperty
from modelprops.shared.errors import ErrorCode, InvalidValueError


class SlugProperty(StringProperty):
    type_ident = "slug"


class TestPropertyFactory:
    """Test cases for building properties by type ident."""

    def test_types(self, factory):
        """Every built-in variant is registered."""
        assert factory.types() == [
            "boolean",
            "color",
            "date-time",
            "file",
            "generic",
            "html",
            "lang",
            "model-structure",
            "number",
            "string",
            "structure",
        ]

    def test_unknown_type(self, factory):
        """Unknown type idents are rejected."""
        with pytest.raises(InvalidValueError) as exc_info:
            factory.create("nope")

        assert exc_info.value.code == ErrorCode.UNKNOWN_PROPERTY_TYPE

    def test_definition_without_type(self, factory):
        """A definition must name its type."""
        with pytest.raises(InvalidValueError) as exc_info:
            factory.build({"label": "x"}, ident="x")

        assert exc_info.value.code == ErrorCode.INVALID_STRUCTURE

    def test_build_applies_definition(self, factory):
        """Definition keys are applied through set_data."""
        prop = factory.build({"type": "string", "max_length": 20, "required": True}, ident="title")

        assert isinstance(prop, StringProperty)
        assert prop.ident == "title"
        assert prop.required is True
        assert prop.sql_type() == "VARCHAR(20)"

    def test_ident_argument_wins(self, factory):
        """The ident argument overrides the definition's ident."""
        prop = factory.build({"type": "generic", "ident": "old"}, ident="new")
        assert prop.ident == "new"

    def test_collaborators_are_shared(self, factory):
        """Created properties share the factory's collaborators."""
        prop = factory.create("generic")

        assert prop.property_factory() is factory
        assert prop.metadata_loader() is factory.metadata_loader
        assert prop.translator is factory.translator

    def test_register_custom_class(self, factory):
        """Custom variants are registered under their type ident."""
        factory.register(SlugProperty)

        assert "slug" in factory.types()
        assert isinstance(factory.create("slug"), SlugProperty)

    def test_register_alias(self, factory):
        factory.register(GenericProperty, "raw")
        assert factory.get_class("raw") is GenericProperty

    def test_defaults_from_global_config(self):
        """Without arguments the factory uses the global settings."""
        factory = PropertyFactory()

        assert factory.settings.structure.max_depth == 8
        assert factory.translator.locales == ["en", "fr"]
