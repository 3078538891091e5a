"""
Pytest configuration and shared fixtures for modelprops tests.

This module provides common fixtures and configuration that can be used
across all test modules in the project.
"""

from __future__ import annotations

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from modelprops.config import Settings, reset_config
from modelprops.core.factory import PropertyFactory
from modelprops.core.metadata import MetadataLoader
from modelprops.core.paths import BasePathResolver
from modelprops.core.translation import Translator


@pytest.fixture(autouse=True)
def _reset_global_config() -> Generator[None, None, None]:
    """Start and end every test without a cached global configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture
def settings(temp_dir: Path) -> Settings:
    """Settings whose uploads land in the temporary directory."""
    return Settings(upload={"base_path": str(temp_dir)})


@pytest.fixture
def metadata_loader() -> MetadataLoader:
    """Metadata loader with an empty registry and no search paths."""
    return MetadataLoader()


@pytest.fixture
def translator() -> Translator:
    return Translator(["en", "fr"], "en")


@pytest.fixture
def factory(
    settings: Settings,
    metadata_loader: MetadataLoader,
    translator: Translator,
    temp_dir: Path,
) -> PropertyFactory:
    """Property factory wired to the test settings and collaborators."""
    return PropertyFactory(
        settings=settings,
        metadata_loader=metadata_loader,
        translator=translator,
        path_resolver=BasePathResolver(temp_dir),
    )
