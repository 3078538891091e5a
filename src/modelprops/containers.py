"""Dependency Injection container for modelprops.

The container manages:
- Settings (Singleton)
- Metadata loader, translator and upload path resolver (Singletons)
- Property factory (Singleton) sharing the collaborators above
"""

from __future__ import annotations

from dependency_injector import containers, providers

from modelprops.config.loader import get_config
from modelprops.core.factory import PropertyFactory
from modelprops.core.metadata import MetadataLoader
from modelprops.core.paths import BasePathResolver
from modelprops.core.translation import Translator


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for property collaborators.

    Example:
        >>> container = Container()
        >>> prop = container.property_factory().create("string")
        >>> prop.set_dependencies(container)
    """

    # Configuration
    config = providers.Singleton(get_config)

    metadata_loader = providers.Singleton(
        MetadataLoader,
        paths=providers.Callable(
            lambda config: list(config.structure.metadata_paths),
            config=config,
        ),
    )

    translator = providers.Singleton(
        Translator,
        locales=providers.Callable(lambda config: tuple(config.i18n.locales), config=config),
        current_locale=providers.Callable(lambda config: config.i18n.default_locale, config=config),
    )

    path_resolver = providers.Singleton(
        BasePathResolver,
        base_path=providers.Callable(lambda config: config.upload.base_path, config=config),
    )

    property_factory = providers.Singleton(
        PropertyFactory,
        settings=config,
        metadata_loader=metadata_loader,
        translator=translator,
        path_resolver=path_resolver,
    )


# Global container instance
container = Container()
