"""Storage type mapping constants.

SQL column types and bind-parameter kinds exposed by property variants
through ``sql_type()`` and ``sql_pdo_type()``.
"""

from __future__ import annotations

from enum import Enum


class PdoType(str, Enum):
    """Coarse bind-parameter kind for a stored value."""

    STR = "str"
    BOOL = "bool"
    INT = "int"
    NULL = "null"


class SqlTypes:
    """SQL column type constants."""

    TEXT = "TEXT"
    DOUBLE = "DOUBLE"
    DATETIME = "DATETIME"
    BOOLEAN = "TINYINT(1) UNSIGNED"
    COLOR_HEX = "CHAR(7)"
    COLOR_RGBA = "VARCHAR(32)"
    LANG = "CHAR(2)"

    # VARCHAR width used by generic scalars
    DEFAULT_VARCHAR_LENGTH = 255

    @staticmethod
    def varchar(length: int) -> str:
        """Return a ``VARCHAR(length)`` column type."""
        return f"VARCHAR({length})"
