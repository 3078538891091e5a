"""Property and structure metadata.

Metadata objects are dict-backed schemas merged recursively. The
``MetadataLoader`` resolves named metadata (``property/<type>``,
structure interfaces) from an in-memory registry or from ``.json`` /
``.toml`` files found in its search paths.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

import toml

from modelprops.shared.errors import ErrorCode, ErrorContext, InfrastructureError

logger = logging.getLogger(__name__)

METADATA_EXTENSIONS = (".json", ".toml")


def deep_merge(base: dict[str, Any], data: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``data`` into ``base`` (in place).

    Nested mappings are merged key by key; any other value in ``data``
    replaces the value in ``base``.

    Example:
        >>> deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        {'a': {'x': 1, 'y': 3}}
    """
    for key, value in data.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge(current, value)
        elif isinstance(value, Mapping):
            base[key] = deep_merge({}, value)
        else:
            base[key] = copy.deepcopy(value)
    return base


class Metadata:
    """Dict-backed metadata supporting recursive merges."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = {}
        if data:
            self.merge(data)

    def merge(self, data: Mapping[str, Any] | Metadata) -> Metadata:
        if isinstance(data, Metadata):
            data = data.data()
        deep_merge(self._data, data)
        return self

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def data(self) -> dict[str, Any]:
        """Return a deep copy of the raw metadata."""
        return copy.deepcopy(self._data)

    def properties(self) -> dict[str, dict[str, Any]]:
        """Return the property definitions, keyed by property ident."""
        return copy.deepcopy(self._data.get("properties") or {})

    def default_data(self) -> dict[str, Any]:
        return copy.deepcopy(self._data.get("default_data") or {})


class PropertyMetadata(Metadata):
    """Metadata of one property type (``property/<type>``)."""

    def __init__(self, data: Mapping[str, Any] | None = None, ident: str | None = None) -> None:
        super().__init__(data)
        self.ident = ident

    def admin(self) -> dict[str, Any]:
        return copy.deepcopy(self._data.get("admin") or {})


class StructureMetadata(Metadata):
    """Schema describing the sub-fields of a structured property."""


class MetadataLoader:
    """Resolve named metadata from a registry or metadata files.

    Lookups check the in-memory registry first, then every search path
    for ``<ident>.json`` or ``<ident>.toml`` (identifiers may contain
    slashes, mapped to subdirectories). Loaded files are cached.

    Example:
        >>> loader = MetadataLoader()
        >>> loader.register("shop/address", {"properties": {"city": {"type": "string"}}})
        >>> struct = loader.load("property/structure/address", interfaces=["shop/address"])
        >>> "city" in struct.properties()
        True
    """

    def __init__(
        self,
        paths: Iterable[str | Path] | None = None,
        registry: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        self.paths = [Path(p) for p in (paths or [])]
        self._registry: dict[str, dict[str, Any]] = {}
        self._cache: dict[str, dict[str, Any]] = {}
        for ident, data in (registry or {}).items():
            self.register(ident, data)

    def register(self, ident: str, data: Mapping[str, Any]) -> None:
        """Register metadata under ``ident``, replacing any previous entry."""
        self._registry[ident] = deep_merge({}, data)
        self._cache.pop(ident, None)

    def add_path(self, path: str | Path) -> None:
        self.paths.append(Path(path))
        self._cache.clear()

    def load(
        self,
        ident: str,
        metadata: Metadata | None = None,
        interfaces: Iterable[str] | None = None,
    ) -> Metadata:
        """Load metadata into ``metadata`` (a new StructureMetadata if None).

        Args:
            ident: Identifier of the metadata being built
            metadata: Target merged into; returned
            interfaces: Identifiers merged in order instead of ``ident``

        Returns:
            The merged metadata.
        """
        target = metadata if metadata is not None else StructureMetadata()
        idents = list(interfaces) if interfaces else [ident]
        for interface in idents:
            target.merge(self.load_data(interface))
        logger.debug("Loaded metadata %s from %s", ident, idents)
        return target

    def load_data(self, ident: str) -> dict[str, Any]:
        """Return the raw data of ``ident``, or ``{}`` when it is unknown.

        Raises:
            InfrastructureError: If a matching file can not be parsed
        """
        if ident in self._registry:
            return copy.deepcopy(self._registry[ident])
        if ident not in self._cache:
            self._cache[ident] = self._load_file(ident)
        return copy.deepcopy(self._cache[ident])

    def _load_file(self, ident: str) -> dict[str, Any]:
        for base in self.paths:
            for extension in METADATA_EXTENSIONS:
                file_path = base / f"{ident}{extension}"
                if file_path.is_file():
                    return self._read(file_path)
        logger.debug("No metadata found for %s", ident)
        return {}

    @staticmethod
    def _read(file_path: Path) -> dict[str, Any]:
        try:
            with open(file_path, encoding="utf-8") as f:
                if file_path.suffix == ".toml":
                    data = toml.load(f)
                else:
                    data = json.load(f)
        except (OSError, ValueError, toml.TomlDecodeError) as e:
            raise InfrastructureError(
                ErrorCode.METADATA_LOAD_FAILED,
                f"Failed to read metadata file: {file_path}",
                ErrorContext(file_path=str(file_path), operation="load_metadata"),
                original_error=e,
            ) from e

        if not isinstance(data, dict):
            raise InfrastructureError(
                ErrorCode.METADATA_LOAD_FAILED,
                f"Metadata file must hold an object: {file_path}",
                ErrorContext(file_path=str(file_path), operation="load_metadata"),
            )
        return data
