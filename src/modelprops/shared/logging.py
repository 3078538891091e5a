"""Structured logging for modelprops.

Helpers that record property events (failed checks, file uploads,
coercion errors) as structured records. The package itself only
installs a ``NullHandler``; applications opt into output through
:func:`setup_structured_logger`.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from modelprops.shared.errors import ErrorContext, PropertyError

ROOT_LOGGER_NAME = "modelprops"


class StructuredFormatter(logging.Formatter):
    """Formatter emitting one JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created,
                tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in ("error_code", "context", "operation", "property_ident", "result_info"):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def _create_rich_console() -> Console:
    custom_theme = Theme(
        {
            "logging.level.debug": "cyan",
            "logging.level.info": "green",
            "logging.level.warning": "yellow",
            "logging.level.error": "red bold",
            "logging.level.critical": "red bold reverse",
            "log.time": "dim cyan",
            "log.message": "white",
            "log.path": "dim blue",
        }
    )
    return Console(theme=custom_theme, stderr=True)


def setup_structured_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_file: str | None = None,
    *,
    use_rich_console: bool = True,
) -> logging.Logger:
    """Configure a logger for structured output.

    Args:
        name: Logger name (default: "modelprops")
        level: Log level name (default: "INFO")
        log_file: Optional file path; file output is always JSON
        use_rich_console: Use Rich for console output instead of JSON

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)

    # Drop previously installed handlers to avoid duplicate output
    if logger.handlers:
        logger.handlers.clear()

    log_level = getattr(logging, level.upper())
    logger.setLevel(log_level)

    if use_rich_console:
        handler: logging.Handler = RichHandler(
            console=_create_rich_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            log_time_format="[%H:%M:%S]",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter())
    handler.setLevel(log_level)
    logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_property_logger(type_ident: str) -> logging.Logger:
    """Return the default logger for a property type.

    Example:
        >>> get_property_logger("color").name
        'modelprops.properties.color'
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.properties.{type_ident}")


def log_operation_error(
    logger: logging.Logger,
    error: PropertyError,
    operation: str | None = None,
    context: dict[str, Any] | ErrorContext | None = None,
) -> None:
    """Record a PropertyError with its context as an ERROR record."""
    context_dict: dict[str, Any] = {}

    if error.context:
        context_dict.update(error.context.safe_dict())

    if context:
        if isinstance(context, ErrorContext):
            context_dict.update(context.safe_dict())
        else:
            context_dict.update(context)

    logger.error(
        error.message,
        extra={
            "error_code": error.code.name,
            "context": context_dict,
            "operation": operation or error.context.operation,
        },
        exc_info=error.original_error is not None,
    )


def log_operation_start(
    logger: logging.Logger,
    operation: str,
    context: dict[str, Any] | None = None,
) -> None:
    logger.debug(
        "Starting operation '%s'",
        operation,
        extra={
            "operation": operation,
            "context": context or {},
        },
    )


def log_operation_success(
    logger: logging.Logger,
    operation: str,
    result_info: dict[str, Any] | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    logger.debug(
        "Operation '%s' completed successfully",
        operation,
        extra={
            "operation": operation,
            "result_info": result_info or {},
            "context": context or {},
        },
    )


def log_validation_error(
    logger: logging.Logger,
    field: str,
    value: Any,
    reason: str,
    context: dict[str, Any] | None = None,
) -> None:
    """Record a failed validation check.

    Args:
        logger: Logger instance
        field: Ident of the property that failed
        value: Offending value (stringified)
        reason: Failure message
        context: Extra context merged into the record
    """
    validation_context = {
        "field": field,
        "value": str(value),
        "reason": reason,
    }

    if context:
        validation_context.update(context)

    logger.warning(
        "Validation failed for field '%s': %s",
        field,
        reason,
        extra={
            "error_code": "VALIDATION_ERROR",
            "context": validation_context,
            "operation": "validation",
        },
    )


def log_file_operation(
    logger: logging.Logger,
    operation: str,
    source_path: str,
    destination_path: str | None = None,
    success: bool = True,
    error_message: str | None = None,
    context: dict[str, Any] | None = None,
    error_code: str = "FILE_OPERATION_FAILED",
) -> None:
    """Record a file operation (upload, move, write).

    Successful operations are logged at INFO, failures at ERROR with
    ``error_code``.
    """
    file_context = {
        "operation": operation,
        "source_path": source_path,
    }

    if destination_path:
        file_context["destination_path"] = destination_path
    if context:
        file_context.update(context)

    if success:
        logger.info(
            "File operation '%s' completed successfully",
            operation,
            extra={
                "operation": "file_operation",
                "context": file_context,
            },
        )
    else:
        logger.error(
            "File operation '%s' failed: %s",
            operation,
            error_message,
            extra={
                "error_code": error_code,
                "operation": "file_operation",
                "context": file_context,
            },
        )
