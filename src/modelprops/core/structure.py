"""Structure model: a nested record built from structure metadata.

Each sub-field of the record is a full property created through the
property factory, so nested values go through the same coercion and
validation pipeline as top-level ones. Nesting depth is capped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from modelprops.core.metadata import StructureMetadata
from modelprops.core.validation import ValidationIssue
from modelprops.shared.errors import (
    ErrorCode,
    ErrorContext,
    StructureDepthError,
    create_invalid_value_error,
)

if TYPE_CHECKING:
    from modelprops.core.factory import PropertyFactory
    from modelprops.core.properties.base import AbstractProperty

logger = logging.getLogger(__name__)


class StructureModel:
    """A record whose fields are properties described by metadata.

    Args:
        metadata: Structure schema; its ``properties`` entry maps field
            idents to property definitions (each with a ``type``)
        property_factory: Factory used to build the field properties
        depth: Nesting level of this record (1 for a top-level structure)

    Raises:
        StructureDepthError: If ``depth`` exceeds the configured maximum
        InvalidValueError: If a field definition has no ``type``

    Example:
        >>> metadata = StructureMetadata({"properties": {"title": {"type": "string"}}})
        >>> model = StructureModel(metadata, factory)
        >>> model.set_data({"title": "Hello", "unknown": 1}).data()
        {'title': 'Hello'}
    """

    def __init__(
        self,
        metadata: StructureMetadata,
        property_factory: PropertyFactory,
        depth: int = 1,
    ) -> None:
        max_depth = property_factory.settings.structure.max_depth
        if depth > max_depth:
            raise StructureDepthError(
                ErrorCode.STRUCTURE_DEPTH_EXCEEDED,
                f"Structure nesting depth {depth} exceeds the maximum of {max_depth}",
                ErrorContext(
                    operation="create_structure",
                    additional_data={"depth": depth, "max_depth": max_depth},
                ),
            )
        self.metadata = metadata
        self.property_factory = property_factory
        self.depth = depth
        self._properties: dict[str, AbstractProperty] = {}
        for ident, definition in metadata.properties().items():
            self._properties[ident] = self._create_property(ident, definition)

    def _create_property(self, ident: str, definition: Mapping[str, Any]) -> AbstractProperty:
        if not isinstance(definition, Mapping) or not definition.get("type"):
            raise create_invalid_value_error(
                f'Structure field "{ident}" must define a "type"',
                ident=ident,
                code=ErrorCode.INVALID_STRUCTURE,
                operation="create_structure",
            )
        return self.property_factory.build(
            definition,
            ident=ident,
            options={"structure_depth": self.depth},
        )

    # ------------------------------------------------------------------
    # Record access
    # ------------------------------------------------------------------

    def __getitem__(self, ident: str) -> Any:
        return self._properties[ident].val()

    def __setitem__(self, ident: str, val: Any) -> None:
        if ident not in self._properties:
            raise KeyError(ident)
        self._properties[ident].set_val(val)

    def __contains__(self, ident: object) -> bool:
        return ident in self._properties

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data()!r})"

    def properties(self) -> dict[str, AbstractProperty]:
        return dict(self._properties)

    def get_property(self, ident: str) -> AbstractProperty:
        return self._properties[ident]

    def set_data(self, data: Mapping[str, Any] | None) -> StructureModel:
        """Assign field values. Unknown keys are dropped."""
        for ident, val in (data or {}).items():
            if ident not in self._properties:
                logger.debug("Dropping unknown structure field %s", ident)
                continue
            self._properties[ident].set_val(val)
        return self

    def data(self) -> dict[str, Any]:
        """Flat, JSON-ready form of the record."""
        return {ident: prop.json_serialize() for ident, prop in self._properties.items()}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def save_properties(self) -> dict[str, Any]:
        """Save every field (running nested saves) and return the data."""
        for prop in self._properties.values():
            prop.save()
        return self.data()

    def validate(self) -> bool:
        ret = True
        for prop in self._properties.values():
            ret = prop.validate() and ret
        return ret

    def errors(self) -> list[ValidationIssue]:
        return [issue for prop in self._properties.values() for issue in prop.errors()]
