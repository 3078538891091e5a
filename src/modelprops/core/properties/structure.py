"""Structured properties.

``StructureProperty`` holds free-form nested data (a record, or a list
of records when multiple). ``ModelStructureProperty`` additionally
models that data: its shape comes from structure metadata, optionally
composed from named interfaces, and every record is turned into a
``StructureModel`` whose fields are full properties.
"""

from __future__ import annotations

import importlib
import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

from modelprops.core.metadata import Metadata, StructureMetadata
from modelprops.core.properties.base import UNSET, AbstractProperty, Setter
from modelprops.core.structure import StructureModel
from modelprops.shared.constants import SqlTypes, StructureDefaults
from modelprops.shared.errors import ErrorCode, create_invalid_value_error


class StructureProperty(AbstractProperty):
    """Nested data stored as JSON text."""

    type_ident = "structure"

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        super().__init__(data)
        self.structure_depth: int = int((data or {}).get("structure_depth") or 0)

    def _coerce(self, val: Any) -> Any:
        if isinstance(val, str) and val.strip()[:1] in ("{", "["):
            try:
                val = json.loads(val)
            except ValueError as e:
                raise create_invalid_value_error(
                    f"Invalid JSON structure: {e}",
                    ident=self.ident,
                    code=ErrorCode.INVALID_STRUCTURE,
                    operation="set_val",
                    original_error=e,
                ) from e
        return super()._coerce(val)

    def parse_one(self, val: Any) -> Any:
        if isinstance(val, StructureModel):
            return val.data()
        if isinstance(val, Mapping):
            return dict(val)
        if isinstance(val, list) and not self.multiple:
            return val
        raise create_invalid_value_error(
            f"Structure value must be a mapping, got {type(val).__name__}",
            ident=self.ident,
            code=ErrorCode.INVALID_STRUCTURE,
            operation="set_val",
        )

    def input_val(self, val: Any = None, options: Mapping[str, Any] | None = None) -> str:
        options = options or {}
        if val is None:
            val = self.val()
        if self.l10n and val is not None:
            val = self._localized(val, options)
        if val is None or val == "":
            return ""
        return json.dumps(val, indent=4, ensure_ascii=False, default=str)

    def display_val(self, val: Any = None, options: Mapping[str, Any] | None = None) -> str:
        options = options or {}
        if val is None:
            val = self.val()
        if self.l10n and val is not None:
            val = self._localized(val, options)
        if val is None or val == "":
            return ""
        return json.dumps(val, ensure_ascii=False, default=str)

    def _storage_one(self, val: Any) -> Any:
        if val is None:
            return None
        return json.dumps(val, ensure_ascii=False, default=str)

    def sql_type(self) -> str:
        return SqlTypes.TEXT


def parse_structure_interface(interface: str) -> str:
    """Normalize an interface name into a metadata identifier.

    Example:
        >>> parse_structure_interface("Shop\\\\PostalAddress")
        'shop/postal-address'
    """
    ident = re.sub(r"([a-z])([A-Z])", r"\1-\2", interface)
    return ident.replace("\\", "/").replace(".", "/").lower()


def resolve_structure_model(selector: type[StructureModel] | str) -> type[StructureModel]:
    """Resolve a StructureModel subclass from a class or dotted path.

    Raises:
        InvalidValueError: If the selector does not name a StructureModel
    """
    cls: Any = selector
    if isinstance(selector, str):
        module_name, _, class_name = selector.rpartition(".")
        try:
            cls = getattr(importlib.import_module(module_name), class_name)
        except (ImportError, AttributeError, ValueError) as e:
            raise create_invalid_value_error(
                f"Structure model class can not be imported: {selector}",
                code=ErrorCode.INVALID_OPTION,
                operation="set_structure_model",
                original_error=e,
            ) from e
    if not isinstance(cls, type) or not issubclass(cls, StructureModel):
        raise create_invalid_value_error(
            f"Structure model must be a StructureModel subclass: {selector!r}",
            code=ErrorCode.INVALID_OPTION,
            operation="set_structure_model",
        )
    return cls


class ModelStructureProperty(StructureProperty):
    """Structured property whose records are modeled by metadata.

    The structure metadata is resolved by merging every registered
    interface, in registration order, then the explicitly assigned
    (terminal) metadata, which always wins. The result is cached until
    the interfaces or the terminal metadata change.
    """

    type_ident = "model-structure"

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        super().__init__(data)
        self._structure_model_class: type[StructureModel] = StructureModel
        self._structure_interfaces: dict[str, bool] = {}
        self._terminal_metadata: dict[str, Any] | None = None
        self._structure_metadata: StructureMetadata | None = None
        self._is_structure_finalized = False
        self._structure_prototype: StructureModel | None = None

        selector = (data or {}).get("structure_model")
        if selector is not None:
            self.set_structure_model(selector)

    def parse_one(self, val: Any) -> Any:
        # Records only; a bare list has no fields to model
        if isinstance(val, StructureModel):
            return val.data()
        if isinstance(val, Mapping):
            return dict(val)
        raise create_invalid_value_error(
            f"Model structure value must be a mapping, got {type(val).__name__}",
            ident=self.ident,
            code=ErrorCode.INVALID_STRUCTURE,
            operation="set_val",
        )

    def setters(self) -> dict[str, Setter]:
        return {
            **super().setters(),
            "structure_metadata": self.set_structure_metadata,
            "structure_interfaces": self.set_structure_interfaces,
            "structure_model": self.set_structure_model,
        }

    # ------------------------------------------------------------------
    # Structure model class
    # ------------------------------------------------------------------

    @property
    def structure_model_class(self) -> type[StructureModel]:
        return self._structure_model_class

    def set_structure_model(self, selector: type[StructureModel] | str) -> ModelStructureProperty:
        self._structure_model_class = resolve_structure_model(selector)
        self._structure_prototype = None
        return self

    # ------------------------------------------------------------------
    # Structure metadata
    # ------------------------------------------------------------------

    def structure_interfaces(self) -> list[str]:
        return list(self._structure_interfaces)

    def set_structure_interfaces(self, interfaces: Iterable[str]) -> ModelStructureProperty:
        self._structure_interfaces = {}
        self._invalidate_structure()
        return self.add_structure_interfaces(interfaces)

    def add_structure_interfaces(self, interfaces: Iterable[str]) -> ModelStructureProperty:
        for interface in interfaces:
            self.add_structure_interface(interface)
        return self

    def add_structure_interface(self, interface: str) -> ModelStructureProperty:
        """Register an interface, normalized into a metadata identifier.

        Raises:
            InvalidValueError: If ``interface`` is not a string
        """
        if not isinstance(interface, str):
            raise create_invalid_value_error(
                f"Structure interface must be a string, received {type(interface).__name__}",
                ident=self.ident,
                code=ErrorCode.INVALID_STRUCTURE,
                operation="add_structure_interface",
            )
        if interface:
            self._structure_interfaces[parse_structure_interface(interface)] = True
            self._invalidate_structure()
        return self

    def set_structure_metadata(
        self,
        data: Mapping[str, Any] | Metadata | None,
    ) -> ModelStructureProperty:
        """Assign the terminal structure metadata.

        Raises:
            InvalidValueError: If ``data`` is neither a mapping nor metadata
        """
        if data is None:
            self._terminal_metadata = None
        elif isinstance(data, Metadata):
            self._terminal_metadata = data.data()
        elif isinstance(data, Mapping):
            self._terminal_metadata = StructureMetadata(data).data()
        else:
            raise create_invalid_value_error(
                f"Structure metadata is invalid (must be a mapping or metadata): {type(data).__name__}",
                ident=self.ident,
                code=ErrorCode.INVALID_STRUCTURE,
                operation="set_structure_metadata",
            )
        self._invalidate_structure()
        return self

    def _invalidate_structure(self) -> None:
        self._is_structure_finalized = False
        self._structure_prototype = None

    def structure_metadata(self) -> StructureMetadata:
        if self._structure_metadata is None or not self._is_structure_finalized:
            self._structure_metadata = self.load_structure_metadata()
            self._is_structure_finalized = True
        return self._structure_metadata

    def load_structure_metadata(self) -> StructureMetadata:
        """Merge interfaces in order, then the terminal metadata."""
        struct = StructureMetadata()
        interfaces = self.structure_interfaces()
        if interfaces:
            ident = f"{StructureDefaults.METADATA_PREFIX}/{self.ident}"
            self.metadata_loader().load(ident, struct, interfaces)
        if self._terminal_metadata:
            struct.merge(self._terminal_metadata)
        return struct

    # ------------------------------------------------------------------
    # Structure models
    # ------------------------------------------------------------------

    def _create_structure_model(self, metadata: StructureMetadata) -> StructureModel:
        return self._structure_model_class(
            metadata,
            self.property_factory(),
            depth=self.structure_depth + 1,
        )

    def _create_structure_model_with(
        self,
        metadata: StructureMetadata,
        *datasets: Mapping[str, Any] | None,
    ) -> StructureModel:
        model = self._create_structure_model(metadata)
        for data in datasets:
            model.set_data(data)
        return model

    def structure_proto(self) -> StructureModel:
        """An empty model built from the structure metadata (cached)."""
        if self._structure_prototype is None:
            self._structure_prototype = self._create_structure_model(self.structure_metadata())
        return self._structure_prototype

    def structure_val(
        self,
        val: Any,
        options: Mapping[str, Any] | None = None,
    ) -> StructureModel | list[StructureModel] | None:
        """Model a raw record (or each record when multiple).

        Args:
            val: Record, or list of records when multiple
            options: ``default_data`` set to True pre-populates each model
                with the schema's default data; a mapping substitutes
                custom defaults

        Returns:
            A model, a list of models, or None (``[]`` when multiple)
            for a null value.
        """
        if val is None:
            return [] if self.multiple else None

        options = options or {}
        metadata = self.structure_metadata()

        default_data: Mapping[str, Any] = {}
        with_defaults = options.get("default_data")
        if isinstance(with_defaults, bool):
            if with_defaults:
                default_data = metadata.default_data()
        elif isinstance(with_defaults, Mapping):
            default_data = with_defaults

        val = self.parse_val(val)
        if self.multiple:
            return [
                self._create_structure_model_with(metadata, default_data, entry)
                for entry in (val or [])
            ]
        return self._create_structure_model_with(metadata, default_data, val)

    def to_structure(self) -> StructureModel | list[StructureModel] | None:
        return self.structure_val(self.val())

    def save(self, val: Any = UNSET) -> Any:
        """Save every nested record and store their flat data."""
        val = super().save(val)
        if val is None:
            return val

        structures = self.structure_val(val)
        if isinstance(structures, list):
            saved: Any = [structure.save_properties() for structure in structures]
        elif structures is not None:
            saved = structures.save_properties()
        else:
            return val

        self.set_val(saved)
        return self.val()
