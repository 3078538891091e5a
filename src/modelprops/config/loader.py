"""Settings loader and singleton manager.

This module handles:
- Configuration file loading from TOML
- Thread-safe singleton pattern for Settings instance
- Logging setup from the loaded settings
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from modelprops.config.models.settings import Settings
from modelprops.shared.errors import ApplicationError, ErrorCode, ErrorContext
from modelprops.shared.logging import ROOT_LOGGER_NAME, setup_structured_logger

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = (
    Path("config/modelprops.toml"),
    Path("modelprops.toml"),
)


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking pattern to ensure thread-safety
    while minimizing lock overhead.
    """

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        """Get the global settings instance, loading it if necessary."""
        # First check (without lock for performance)
        if self._instance is None:
            # Second check (with lock for thread-safety)
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()

        return self._instance

    def reload_config(self, config_path: str | Path | None = None) -> Settings:
        """Reload the global settings instance from configuration files."""
        with self._lock:
            self._instance = load_settings(config_path)

        return self._instance

    def reset(self) -> None:
        """Forget the cached instance (used by tests)."""
        with self._lock:
            self._instance = None


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML configuration file or the environment.

    Args:
        config_path: Optional path to a TOML file. If None, the default
            locations are tried before falling back to environment
            variables.

    Returns:
        Settings instance loaded from the specified source

    Raises:
        ApplicationError: If the configuration file holds invalid values
    """
    try:
        if config_path:
            return Settings.from_toml_file(config_path)

        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                return Settings.from_toml_file(default_path)

        return Settings()
    except ValidationError as e:
        raise ApplicationError(
            code=ErrorCode.CONFIG_ERROR,
            message=f"Invalid configuration: {e.error_count()} error(s)",
            context=ErrorContext(
                operation="load_settings",
                file_path=str(config_path) if config_path else None,
            ),
            original_error=e,
        ) from e


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """Configure the ``modelprops`` logger from the logging settings.

    Returns:
        The configured package logger.
    """
    settings = settings or get_config()
    log_settings = settings.logging
    package_logger = setup_structured_logger(
        ROOT_LOGGER_NAME,
        level=log_settings.level,
        log_file=log_settings.file,
        use_rich_console=log_settings.use_rich,
    )
    if not log_settings.console_output:
        for handler in list(package_logger.handlers):
            if not isinstance(handler, logging.FileHandler):
                package_logger.removeHandler(handler)
    return package_logger


# Global loader instance
_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance (thread-safe)."""
    return _loader.get_config()


def reload_config(config_path: str | Path | None = None) -> Settings:
    """Reload the global settings instance from configuration files."""
    return _loader.reload_config(config_path)


def reset_config() -> None:
    """Drop the cached global settings instance."""
    _loader.reset()
