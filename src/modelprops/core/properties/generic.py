"""Generic and number properties."""

from __future__ import annotations

from modelprops.core.properties.base import AbstractProperty
from modelprops.shared.constants import SqlTypes


class GenericProperty(AbstractProperty):
    """Untyped value stored as a short string."""

    type_ident = "generic"

    def sql_type(self) -> str:
        if self.multiple:
            return SqlTypes.TEXT
        return SqlTypes.varchar(SqlTypes.DEFAULT_VARCHAR_LENGTH)


class NumberProperty(AbstractProperty):
    """Numeric value stored as a double."""

    type_ident = "number"

    def sql_type(self) -> str:
        # Multiple numbers are stored as TEXT: their joined length is unknown
        if self.multiple:
            return SqlTypes.TEXT
        return SqlTypes.DOUBLE
