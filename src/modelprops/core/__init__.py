"""Core domain: properties, structures, metadata and validation."""

from .factory import PropertyFactory
from .metadata import Metadata, MetadataLoader, PropertyMetadata, StructureMetadata
from .structure import StructureModel
from .translation import Translation, Translator
from .validation import PropertyValidator, ValidationIssue

__all__ = [
    "Metadata",
    "MetadataLoader",
    "PropertyFactory",
    "PropertyMetadata",
    "PropertyValidator",
    "StructureMetadata",
    "StructureModel",
    "Translation",
    "Translator",
    "ValidationIssue",
]
