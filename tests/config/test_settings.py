"""Tests for settings models and the settings loader."""

from __future__ import annotations

import logging
import threading

import pytest
from pydantic import ValidationError

from modelprops.config import (
    Settings,
    get_config,
    load_settings,
    reload_config,
    setup_logging,
)
from modelprops.shared.errors import ApplicationError, ErrorCode


@pytest.fixture
def package_logger():
    """Restore the package logger after logging is configured."""
    logger = logging.getLogger("modelprops")
    yield logger
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestSettingsModels:
    """Test cases for the settings models."""

    def test_defaults(self):
        settings = Settings()

        assert settings.properties.multiple_separator == ","
        assert settings.upload.upload_path == "uploads/"
        assert settings.structure.max_depth == 8
        assert settings.i18n.locales == ["en", "fr"]

    def test_upload_path_trailing_slash(self):
        assert Settings(upload={"upload_path": "media/files"}).upload.upload_path == "media/files/"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"structure": {"max_depth": 0}},
            {"upload": {"max_filesize": -1}},
            {"i18n": {"locales": []}},
            {"properties": {"multiple_separator": ""}},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            Settings(**overrides)

    def test_environment_override(self, monkeypatch):
        """Nested sections are overridden with a double underscore."""
        monkeypatch.setenv("MODELPROPS_UPLOAD__MAX_FILESIZE", "1024")
        monkeypatch.setenv("MODELPROPS_I18N__LOCALES", '["en", "de"]')

        settings = Settings()

        assert settings.upload.max_filesize == 1024
        assert settings.i18n.locales == ["en", "de"]

    def test_toml_round_trip(self, temp_dir):
        settings = Settings(structure={"max_depth": 3}, i18n={"locales": ["en", "es"]})
        path = temp_dir / "nested" / "modelprops.toml"

        settings.to_toml_file(path)
        loaded = Settings.from_toml_file(path)

        assert loaded.structure.max_depth == 3
        assert loaded.i18n.locales == ["en", "es"]
        assert loaded.logging.file is None

    def test_missing_toml_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            Settings.from_toml_file(temp_dir / "missing.toml")


class TestSettingsLoader:
    """Test cases for the global settings singleton."""

    def test_singleton(self):
        assert get_config() is get_config()

    def test_concurrent_access(self):
        """Concurrent first access yields a single instance."""
        results = []

        def worker():
            results.append(get_config())

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len({id(settings) for settings in results}) == 1

    def test_reload(self, temp_dir):
        path = temp_dir / "modelprops.toml"
        path.write_text("[structure]\nmax_depth = 4\n", encoding="utf-8")
        first = get_config()

        reloaded = reload_config(path)

        assert reloaded is not first
        assert get_config() is reloaded
        assert reloaded.structure.max_depth == 4

    def test_invalid_file(self, temp_dir):
        """Invalid values are reported as configuration errors."""
        path = temp_dir / "modelprops.toml"
        path.write_text("[structure]\nmax_depth = 0\n", encoding="utf-8")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings(path)

        assert exc_info.value.code == ErrorCode.CONFIG_ERROR
        assert exc_info.value.context.file_path == str(path)


class TestSetupLogging:
    """Test cases for logging configured from settings."""

    def test_level_and_handler(self, package_logger):
        settings = Settings(logging={"level": "WARNING", "use_rich": False})

        logger = setup_logging(settings)

        assert logger is package_logger
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_file_only(self, package_logger, temp_dir):
        """Disabling console output keeps only the file handler."""
        settings = Settings(logging={"file": str(temp_dir / "modelprops.log"), "console_output": False})

        logger = setup_logging(settings)

        assert [type(handler) for handler in logger.handlers] == [logging.FileHandler]
