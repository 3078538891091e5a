"""modelprops Error Handling Module

This module defines the error handling system for modelprops, providing
structured error classes with context information and user-friendly messages.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Fail Fast on Coercion: InvalidValueError is raised by setters, never retried
- Validation Never Raises: failed checks are collected, not thrown
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Error codes for modelprops.

    This enum serves as the single source of truth for all error codes
    used throughout the package.
    """

    # Value coercion errors
    INVALID_VALUE = "INVALID_VALUE"
    NULL_NOT_ALLOWED = "NULL_NOT_ALLOWED"
    INVALID_MULTIPLE_VALUE = "INVALID_MULTIPLE_VALUE"
    INVALID_COLOR = "INVALID_COLOR"
    UNSUPPORTED_COLOR_FORMAT = "UNSUPPORTED_COLOR_FORMAT"
    INVALID_DATETIME = "INVALID_DATETIME"
    INVALID_OPTION = "INVALID_OPTION"
    INVALID_FILE_DATA = "INVALID_FILE_DATA"

    # Structure errors
    INVALID_STRUCTURE = "INVALID_STRUCTURE"
    STRUCTURE_DEPTH_EXCEEDED = "STRUCTURE_DEPTH_EXCEEDED"
    UNKNOWN_PROPERTY_TYPE = "UNKNOWN_PROPERTY_TYPE"

    # File system errors
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DIRECTORY_CREATION_FAILED = "DIRECTORY_CREATION_FAILED"
    FILE_WRITE_ERROR = "FILE_WRITE_ERROR"
    FILE_MOVE_ERROR = "FILE_MOVE_ERROR"

    # Configuration and wiring errors
    CONFIG_ERROR = "CONFIG_ERROR"
    DEPENDENCY_MISSING = "DEPENDENCY_MISSING"
    METADATA_LOAD_FAILED = "METADATA_LOAD_FAILED"

    # CLI errors
    CLI_INVALID_ARGUMENTS = "CLI_INVALID_ARGUMENTS"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data so the context can always be logged as JSON.

    Attributes:
        file_path: Optional file path associated with the error
        operation: Optional operation name that caused the error
        property_ident: Optional ident of the property involved
        additional_data: Optional dict with primitive values only
    """

    file_path: str | None = None
    operation: str | None = None
    property_ident: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Post-initialization coercion."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self) -> dict[str, Any]:
        """Export context as a dict for logging and error reporting.

        Returns:
            Dictionary without unset fields and with a guaranteed
            additional_data key.
        """
        data: dict[str, Any] = {}
        if self.file_path is not None:
            data["file_path"] = self.file_path
        if self.operation is not None:
            data["operation"] = self.operation
        if self.property_ident is not None:
            data["property_ident"] = self.property_ident
        data["additional_data"] = self.additional_data or {}
        return data


class PropertyError(Exception):
    """Base exception class for all modelprops errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize PropertyError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(PropertyError):
    """Errors raised when a property's type contract is violated."""


class InfrastructureError(PropertyError):
    """Errors raised when interacting with the file system or other
    external systems (upload directories, metadata files)."""


class ApplicationError(PropertyError):
    """Wiring and configuration errors."""


class InvalidValueError(DomainError, ValueError):
    """Input violates a property's type contract.

    Raised synchronously by setters and coercion: wrong shape, null when
    disallowed, malformed color/date/array, invalid option. Always
    caller-correctable.

    Attributes:
        validation_errors: Field-level details when the error wraps a
            pydantic ValidationError raised while assigning options.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.validation_errors = validation_errors or []


class UnsupportedValueError(DomainError, NotImplementedError):
    """Input is recognized but belongs to an unsupported subspace
    (for example HSL/HSLA colors)."""


class StructureDepthError(DomainError):
    """A structure nests deeper than the configured maximum depth."""


class UploadDirectoryError(InfrastructureError):
    """The upload directory can not be created or is not writable."""


class DependencyMissingError(ApplicationError):
    """A collaborator (property factory, metadata loader) was required
    but never injected."""


def create_invalid_value_error(
    message: str,
    ident: str | None = None,
    code: ErrorCode = ErrorCode.INVALID_VALUE,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> InvalidValueError:
    """Create an invalid value error with context."""
    context = ErrorContext(
        operation=operation,
        property_ident=ident,
    )
    return InvalidValueError(code, message, context, original_error)


def create_null_value_error(ident: str, operation: str = "set_val") -> InvalidValueError:
    """Create the error raised when null is assigned to a non-nullable property."""
    return create_invalid_value_error(
        f'Property "{ident}" value can not be null (not allowed)',
        ident=ident,
        code=ErrorCode.NULL_NOT_ALLOWED,
        operation=operation,
    )


def create_option_error(
    ident: str,
    validation_errors: list[dict[str, Any]],
    original_error: Exception | None = None,
) -> InvalidValueError:
    """Create an invalid option error from pydantic error details.

    Example:
        >>> from pydantic import ValidationError
        >>> try:
        ...     options.max_length = -1
        ... except ValidationError as e:
        ...     raise create_option_error("title", e.errors(), e) from e
    """
    fields = ", ".join(
        ".".join(str(part) for part in error.get("loc", ())) for error in validation_errors
    )
    context = ErrorContext(
        operation="set_option",
        property_ident=ident,
        additional_data={"fields": fields, "error_count": len(validation_errors)},
    )
    return InvalidValueError(
        ErrorCode.INVALID_OPTION,
        f'Invalid option(s) for property "{ident}": {fields}',
        context,
        original_error,
        validation_errors=validation_errors,
    )


def create_permission_denied_error(
    path: str,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> UploadDirectoryError:
    """Create a permission denied error with context."""
    context = ErrorContext(
        file_path=path,
        operation=operation,
    )
    return UploadDirectoryError(
        ErrorCode.PERMISSION_DENIED,
        f"Upload directory is not writable: {path}",
        context,
        original_error,
    )


def create_directory_creation_error(
    path: str,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> UploadDirectoryError:
    """Create a directory creation error with context."""
    context = ErrorContext(
        file_path=path,
        operation=operation,
    )
    return UploadDirectoryError(
        ErrorCode.DIRECTORY_CREATION_FAILED,
        f"Upload directory could not be created: {path}",
        context,
        original_error,
    )


def create_dependency_missing_error(dependency: str, owner: str) -> DependencyMissingError:
    """Create the error raised when a collaborator was never injected."""
    context = ErrorContext(
        operation="resolve_dependency",
        additional_data={"dependency": dependency, "owner": owner},
    )
    return DependencyMissingError(
        ErrorCode.DEPENDENCY_MISSING,
        f'{dependency} is not defined for "{owner}"',
        context,
    )
