"""Property factory: builds properties from type idents.

The factory owns the collaborators every property shares (settings,
metadata loader, translator, path resolver) and hands them to each
property it creates.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from modelprops.config import Settings, get_config
from modelprops.core.metadata import MetadataLoader
from modelprops.core.paths import BasePathResolver, PathResolver
from modelprops.core.properties import (
    AbstractProperty,
    BooleanProperty,
    ColorProperty,
    DateTimeProperty,
    FileProperty,
    GenericProperty,
    HtmlProperty,
    LangProperty,
    ModelStructureProperty,
    NumberProperty,
    StringProperty,
    StructureProperty,
)
from modelprops.core.translation import Translator
from modelprops.shared.errors import ErrorCode, create_invalid_value_error

logger = logging.getLogger(__name__)

DEFAULT_PROPERTY_CLASSES: tuple[type[AbstractProperty], ...] = (
    GenericProperty,
    StringProperty,
    HtmlProperty,
    NumberProperty,
    BooleanProperty,
    ColorProperty,
    DateTimeProperty,
    LangProperty,
    FileProperty,
    StructureProperty,
    ModelStructureProperty,
)


class PropertyFactory:
    """Create properties by type ident.

    Example:
        >>> factory = PropertyFactory()
        >>> prop = factory.build({"type": "string", "max_length": 20}, ident="title")
        >>> prop.sql_type()
        'VARCHAR(20)'
    """

    def __init__(
        self,
        settings: Settings | None = None,
        metadata_loader: MetadataLoader | None = None,
        translator: Translator | None = None,
        path_resolver: PathResolver | None = None,
    ) -> None:
        self.settings = settings or get_config()
        self.metadata_loader = metadata_loader or MetadataLoader(self.settings.structure.metadata_paths)
        self.translator = translator or Translator(
            self.settings.i18n.locales,
            self.settings.i18n.default_locale,
        )
        self.path_resolver = path_resolver or BasePathResolver(self.settings.upload.base_path)
        self._classes: dict[str, type[AbstractProperty]] = {}
        for cls in DEFAULT_PROPERTY_CLASSES:
            self.register(cls)

    def register(self, cls: type[AbstractProperty], type_ident: str | None = None) -> None:
        """Register a property class under its (or the given) type ident."""
        ident = type_ident or cls.type_ident
        if not ident:
            msg = f"{cls.__name__} has no type ident"
            raise ValueError(msg)
        self._classes[ident] = cls

    def types(self) -> list[str]:
        return sorted(self._classes)

    def get_class(self, type_ident: str) -> type[AbstractProperty]:
        """Return the class registered for ``type_ident``.

        Raises:
            InvalidValueError: If the type is unknown
        """
        try:
            return self._classes[type_ident]
        except KeyError:
            raise create_invalid_value_error(
                f'Unknown property type "{type_ident}"',
                code=ErrorCode.UNKNOWN_PROPERTY_TYPE,
                operation="create_property",
            ) from None

    def default_options(self) -> dict[str, Any]:
        """Construction options shared by every created property."""
        return {
            "settings": self.settings,
            "property_factory": self,
            "metadata_loader": self.metadata_loader,
            "translator": self.translator,
            "path_resolver": self.path_resolver,
        }

    def create(self, type_ident: str, options: Mapping[str, Any] | None = None) -> AbstractProperty:
        """Instantiate an unconfigured property of ``type_ident``."""
        cls = self.get_class(type_ident)
        return cls({**self.default_options(), **(options or {})})

    def build(
        self,
        definition: Mapping[str, Any],
        ident: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> AbstractProperty:
        """Create and configure a property from a definition.

        Args:
            definition: Property data with a ``type`` key; the other keys
                are applied through ``set_data``
            ident: Ident of the new property (overrides ``definition``)
            options: Extra construction options

        Raises:
            InvalidValueError: If ``type`` is missing or unknown
        """
        type_ident = definition.get("type")
        if not type_ident:
            raise create_invalid_value_error(
                'Property definition must define a "type"',
                ident=ident,
                code=ErrorCode.INVALID_STRUCTURE,
                operation="build_property",
            )
        prop = self.create(str(type_ident), options)
        data = {key: value for key, value in definition.items() if key != "type"}
        if ident is not None:
            data.pop("ident", None)
            data = {"ident": ident, **data}
        prop.set_data(data)
        logger.debug("Built %s property %s", type_ident, prop.ident)
        return prop
