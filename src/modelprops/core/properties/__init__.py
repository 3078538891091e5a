"""Property variants.

Every variant derives from ``AbstractProperty`` and is registered in the
``PropertyFactory`` under its ``type_ident``.
"""

from .base import UNSET, AbstractProperty, MultipleOptions, PropertyOptions, default_label
from .boolean import BooleanProperty
from .color import ColorProperty
from .datetime import DateTimeProperty
from .file import FileProperty
from .generic import GenericProperty, NumberProperty
from .lang import LangProperty
from .string import HtmlProperty, StringProperty
from .structure import ModelStructureProperty, StructureProperty

__all__ = [
    "UNSET",
    "AbstractProperty",
    "BooleanProperty",
    "ColorProperty",
    "DateTimeProperty",
    "FileProperty",
    "GenericProperty",
    "HtmlProperty",
    "LangProperty",
    "ModelStructureProperty",
    "MultipleOptions",
    "NumberProperty",
    "PropertyOptions",
    "StringProperty",
    "StructureProperty",
    "default_label",
]
