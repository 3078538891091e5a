"""Abstract property: value coercion, validation and rendering.

Every property variant shares the attribute model defined here
(null / required / multiple / l10n flags, translatable texts, display
and view options) and the value lifecycle:

- ``set_val(raw)`` coerces raw input into the canonical value
- ``input_val()`` / ``display_val()`` render it for forms and UIs
- ``save()`` resolves side effects and returns the storage-ready value
- ``validate()`` runs the named checks of ``validation_methods()``

Variants customize the lifecycle through a small set of hooks
(``parse_one``, ``validation_methods``, ``validation_handlers``,
``setters``, ``sql_type``) and carry their own options model.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from modelprops.config import Settings, get_config
from modelprops.core.metadata import MetadataLoader, PropertyMetadata
from modelprops.core.translation import Translation, Translator
from modelprops.core.validation import PropertyValidator, ValidationHandler, ValidationIssue
from modelprops.shared.constants import CheckMessages, CheckNames, PdoType, PropertyDefaults
from modelprops.shared.errors import (
    ErrorCode,
    create_dependency_missing_error,
    create_invalid_value_error,
    create_null_value_error,
    create_option_error,
)
from modelprops.shared.logging import get_property_logger

Setter = Callable[[Any], Any]


class _Unset:
    """Marker for an omitted argument (``None`` is a valid value)."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

SCALAR_TYPES = (str, int, float, bool)


class MultipleOptions(BaseModel):
    """How a multiple value is split and bounded.

    ``min`` and ``max`` of 0 mean unbounded.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    separator: str = Field(default=PropertyDefaults.MULTIPLE_SEPARATOR, min_length=1)
    min: int = Field(default=0, ge=0)
    max: int = Field(default=0, ge=0)


class PropertyOptions(BaseModel):
    """Options shared by every property variant."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    ident: str = ""
    l10n: bool = False
    hidden: bool = False
    multiple: bool = False
    multiple_options: MultipleOptions = Field(default_factory=MultipleOptions)
    required: bool = False
    unique: bool = False
    allow_null: bool = True
    storable: bool = True
    active: bool = True
    display_type: str | None = None
    view_options: dict[str, dict[str, Any]] = Field(default_factory=dict)


def default_label(ident: str) -> str:
    """Derive a label from an ident.

    Example:
        >>> default_label("meta_title.en")
        'Meta Title En'
    """
    words = re.sub(r"[._]", " ", ident).split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


class AbstractProperty(ABC):
    """Base class of every property variant.

    Args:
        data: Construction options. Recognized keys are ``logger``,
            ``property_factory``, ``metadata_loader``, ``container``,
            ``translator``, ``path_resolver``, ``structure_model``,
            ``database`` and ``settings``; other keys are ignored.
    """

    type_ident: ClassVar[str] = ""
    options_class: ClassVar[type[PropertyOptions]] = PropertyOptions

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        data = dict(data or {})
        self.settings: Settings = data.get("settings") or get_config()
        self.logger: logging.Logger = data.get("logger") or get_property_logger(self.type())
        self.translator: Translator | None = data.get("translator")
        self.database: Any = data.get("database")
        self._property_factory: Any = data.get("property_factory")
        self._metadata_loader: MetadataLoader | None = data.get("metadata_loader")

        self._options = self.options_class(**self.default_options())
        self._val: Any = None
        self._label: Translation | None = None
        self._description = Translation(locale=self.current_locale())
        self._notes = Translation(locale=self.current_locale())
        self._metadata: PropertyMetadata | None = None
        self._validator: PropertyValidator | None = None

        if data.get("container") is not None:
            self.set_dependencies(data["container"])

    def default_options(self) -> dict[str, Any]:
        """Option values a new property starts with."""
        return {
            "multiple_options": {"separator": self.settings.properties.multiple_separator},
        }

    def type(self) -> str:
        return self.type_ident

    def __str__(self) -> str:
        val = self.val()
        if isinstance(val, str):
            return val
        if val is None or isinstance(val, (int, float, list, dict)):
            return ""
        return str(val)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} ident={self.ident!r} val={self._val!r}>"

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def set_dependencies(self, container: Any) -> AbstractProperty:
        """Resolve collaborators from a dependency-injector container."""
        self.set_property_factory(container.property_factory())
        self.set_metadata_loader(container.metadata_loader())
        if self.translator is None:
            self.translator = container.translator()
        return self

    def set_property_factory(self, factory: Any) -> AbstractProperty:
        self._property_factory = factory
        return self

    def property_factory(self) -> Any:
        if self._property_factory is None:
            raise create_dependency_missing_error("Property factory", type(self).__name__)
        return self._property_factory

    def set_metadata_loader(self, loader: MetadataLoader) -> AbstractProperty:
        self._metadata_loader = loader
        return self

    def metadata_loader(self) -> MetadataLoader:
        if self._metadata_loader is None:
            raise create_dependency_missing_error("Metadata loader", type(self).__name__)
        return self._metadata_loader

    def current_locale(self) -> str:
        if self.translator is not None:
            return self.translator.current_locale
        return self.settings.i18n.default_locale

    # ------------------------------------------------------------------
    # Bulk configuration
    # ------------------------------------------------------------------

    def setters(self) -> dict[str, Setter]:
        """Map of data keys accepted by ``set_data`` to their setters."""
        return {
            "ident": self.set_ident,
            "label": self.set_label,
            "description": self.set_description,
            "notes": self.set_notes,
            "l10n": self.set_l10n,
            "hidden": self.set_hidden,
            "multiple": self.set_multiple,
            "multiple_options": self.set_multiple_options,
            "required": self.set_required,
            "unique": self.set_unique,
            "allow_null": self.set_allow_null,
            "storable": self.set_storable,
            "active": self.set_active,
            "display_type": self.set_display_type,
            "view_options": self.set_view_options,
            "val": self.set_val,
        }

    def set_data(self, data: Mapping[str, Any]) -> AbstractProperty:
        """Configure the property from a mapping.

        Unknown keys are ignored. ``val`` is always applied last so it
        is coerced with the final configuration.
        """
        setters = self.setters()
        for key, value in data.items():
            if key == "val":
                continue
            setter = setters.get(key)
            if setter is None:
                self.logger.debug("Ignoring unknown option %s", key)
                continue
            setter(value)
        if "val" in data:
            self.set_val(data["val"])
        return self

    def _set_option(self, name: str, value: Any) -> None:
        try:
            setattr(self._options, name, value)
        except ValidationError as e:
            raise create_option_error(
                self._options.ident,
                e.errors(include_url=False),
                e,
            ) from e

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    @property
    def ident(self) -> str:
        return self._options.ident

    def set_ident(self, ident: str) -> AbstractProperty:
        if not isinstance(ident, str):
            raise create_invalid_value_error(
                "Ident needs to be a string.",
                code=ErrorCode.INVALID_OPTION,
                operation="set_ident",
            )
        self._set_option("ident", ident)
        return self

    @property
    def label(self) -> Translation:
        if self._label is None:
            return Translation(default_label(self.ident), locale=self.current_locale())
        return self._label

    def set_label(self, label: Any) -> AbstractProperty:
        self._label = Translation(label, locale=self.current_locale())
        return self

    @property
    def description(self) -> Translation:
        return self._description

    def set_description(self, description: Any) -> AbstractProperty:
        self._description = Translation(description, locale=self.current_locale())
        return self

    @property
    def notes(self) -> Translation:
        return self._notes

    def set_notes(self, notes: Any) -> AbstractProperty:
        self._notes = Translation(notes, locale=self.current_locale())
        return self

    @property
    def l10n(self) -> bool:
        return self._options.l10n

    def set_l10n(self, l10n: Any) -> AbstractProperty:
        self._set_option("l10n", bool(l10n))
        return self

    @property
    def hidden(self) -> bool:
        return self._options.hidden

    def set_hidden(self, hidden: Any) -> AbstractProperty:
        self._set_option("hidden", bool(hidden))
        return self

    @property
    def multiple(self) -> bool:
        return self._options.multiple

    def set_multiple(self, multiple: Any) -> AbstractProperty:
        self._set_option("multiple", bool(multiple))
        return self

    @property
    def multiple_options(self) -> MultipleOptions:
        return self._options.multiple_options

    def set_multiple_options(self, options: Mapping[str, Any] | MultipleOptions) -> AbstractProperty:
        """Merge ``options`` into the default multiple options."""
        if isinstance(options, MultipleOptions):
            options = options.model_dump()
        merged = {**self.default_options().get("multiple_options", {}), **dict(options)}
        try:
            self._set_option("multiple_options", MultipleOptions(**merged))
        except ValidationError as e:
            raise create_option_error(self.ident, e.errors(include_url=False), e) from e
        return self

    @property
    def multiple_separator(self) -> str:
        return self.multiple_options.separator

    @property
    def required(self) -> bool:
        return self._options.required

    def set_required(self, required: Any) -> AbstractProperty:
        self._set_option("required", bool(required))
        return self

    @property
    def unique(self) -> bool:
        return self._options.unique

    def set_unique(self, unique: Any) -> AbstractProperty:
        self._set_option("unique", bool(unique))
        return self

    @property
    def allow_null(self) -> bool:
        return self._options.allow_null

    def set_allow_null(self, allow: Any) -> AbstractProperty:
        self._set_option("allow_null", bool(allow))
        return self

    @property
    def storable(self) -> bool:
        return self._options.storable

    def set_storable(self, storable: Any) -> AbstractProperty:
        self._set_option("storable", bool(storable))
        return self

    @property
    def active(self) -> bool:
        return self._options.active

    def set_active(self, active: Any) -> AbstractProperty:
        self._set_option("active", bool(active))
        return self

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def metadata(self) -> PropertyMetadata:
        """Metadata of this property type, loaded once as ``property/<type>``."""
        if self._metadata is None:
            ident = f"property/{self.type()}"
            metadata = PropertyMetadata(ident=ident)
            if self._metadata_loader is not None:
                self._metadata_loader.load(ident, metadata)
            self._metadata = metadata
        return self._metadata

    @property
    def display_type(self) -> str:
        if not self._options.display_type:
            default = self.metadata().admin().get("display_type")
            self._set_option(
                "display_type",
                default or self.settings.properties.default_display_type,
            )
        return self._options.display_type or ""

    def set_display_type(self, display_type: str | None) -> AbstractProperty:
        self._set_option("display_type", display_type)
        return self

    def view_options(self, ident: str | None = None) -> dict[str, Any]:
        """Return all view options, or those of one display context."""
        options = self._options.view_options
        if not options:
            return {}
        if not ident:
            return dict(options)
        return dict(options.get(ident, {}))

    def set_view_options(self, options: Mapping[str, Mapping[str, Any]]) -> AbstractProperty:
        self._set_option("view_options", {k: dict(v) for k, v in options.items()})
        return self

    # ------------------------------------------------------------------
    # Value lifecycle
    # ------------------------------------------------------------------

    def val(self) -> Any:
        return self._val

    def set_val(self, val: Any) -> AbstractProperty:
        """Coerce ``val`` into the canonical value.

        Raises:
            InvalidValueError: If the value violates the type contract
        """
        if self.l10n and isinstance(val, (Mapping, Translation)):
            items = val.data().items() if isinstance(val, Translation) else val.items()
            self._val = {str(lang): self._coerce(v) for lang, v in items}
        else:
            self._val = self._coerce(val)
        return self

    def _coerce(self, val: Any) -> Any:
        if self.allow_null:
            if val is None or (isinstance(val, str) and val == ""):
                return None
        elif val is None:
            raise create_null_value_error(self.ident)

        if self.multiple:
            if isinstance(val, str):
                val = val.split(self.multiple_separator)
            elif isinstance(val, tuple):
                val = list(val)
            if not isinstance(val, list):
                raise create_invalid_value_error(
                    "Value is multiple. It must be a string (convertible to a list "
                    "by separator) or a list.",
                    ident=self.ident,
                    code=ErrorCode.INVALID_MULTIPLE_VALUE,
                    operation="set_val",
                )
            return [self.parse_one(v) for v in val]

        return self.parse_one(val)

    def parse_one(self, val: Any) -> Any:
        """Normalize one (non-null) item into its canonical form."""
        return val

    def parse_val(self, val: Any) -> Any:
        """Normalize a value, keeping its shape (scalar or sequence)."""
        return val

    def _localized(self, val: Any, options: Mapping[str, Any]) -> Any:
        lang = options.get("lang") or self.current_locale()
        if isinstance(val, Translation):
            return val.get(lang, fallback=False)
        if isinstance(val, Mapping):
            return val.get(lang, "")
        return ""

    def _join(self, val: list[Any], render: Callable[[Any], str]) -> str:
        return self.multiple_separator.join(render(v) for v in val)

    def input_val(self, val: Any = None, options: Mapping[str, Any] | None = None) -> str:
        """Render a value for form inputs.

        Non-scalar values fall back to pretty-printed JSON.
        """
        options = options or {}
        if val is None:
            val = self.val()
        if val is None:
            return ""

        if self.l10n:
            val = self._localized(val, options)
        elif isinstance(val, Translation):
            val = str(val)

        if self.multiple and isinstance(val, (list, tuple)):
            if all(isinstance(v, SCALAR_TYPES) or v is None for v in val):
                val = self._join(list(val), lambda v: "" if v is None else str(v))

        if isinstance(val, SCALAR_TYPES):
            return str(val)
        if val is None:
            return ""
        return json.dumps(
            val,
            indent=PropertyDefaults.JSON_INDENT,
            ensure_ascii=False,
            default=str,
        )

    def display_val(self, val: Any = None, options: Mapping[str, Any] | None = None) -> str:
        """Render a value for display, without the JSON fallback."""
        options = options or {}
        if val is None:
            val = self.val()
        if val is None:
            return ""

        if self.l10n:
            val = self._localized(val, options)

        if self.multiple and isinstance(val, (list, tuple)):
            val = self._join(list(val), str)

        return "" if val is None else str(val)

    def storage_val(self, val: Any = UNSET) -> Any:
        """Return the value in its storage form.

        Multiple values are joined with the separator; non-scalar
        values are stored as JSON text.
        """
        if val is UNSET:
            val = self.val()
        if val is None:
            return None
        if self.l10n and isinstance(val, Mapping):
            return {lang: self._storage_one(v) for lang, v in val.items()}
        return self._storage_one(val)

    def _storage_one(self, val: Any) -> Any:
        if val is None:
            return None
        if self.multiple and isinstance(val, (list, tuple)):
            if all(isinstance(v, SCALAR_TYPES) for v in val):
                return self._join(list(val), str)
        if isinstance(val, SCALAR_TYPES):
            return val
        return json.dumps(val, ensure_ascii=False, default=str)

    def save(self, val: Any = UNSET) -> Any:
        """Set ``val`` when given and return the storage-ready value."""
        if val is not UNSET:
            self.set_val(val)
        return self.val()

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def json_serialize(self) -> Any:
        return self.val()

    def serialize(self) -> str:
        return json.dumps(self.json_serialize(), ensure_ascii=False, default=str)

    def unserialize(self, data: str) -> AbstractProperty:
        """Restore the value from ``serialize()`` output, through ``set_val``."""
        return self.set_val(json.loads(data))

    # ------------------------------------------------------------------
    # Storage mapping
    # ------------------------------------------------------------------

    @abstractmethod
    def sql_type(self) -> str:
        """SQL column type of the stored value."""

    def sql_extra(self) -> str:
        return ""

    def sql_pdo_type(self) -> PdoType:
        return PdoType.STR

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validator(self) -> PropertyValidator:
        if self._validator is None:
            self._validator = PropertyValidator(self)
        return self._validator

    def validate(self) -> bool:
        return self.validator().validate()

    def errors(self) -> list[ValidationIssue]:
        return self.validator().errors()

    def validation_methods(self) -> list[str]:
        """Ordered names of the checks run by ``validate()``."""
        methods = list(CheckNames.BASE)
        if self.multiple:
            methods.append(CheckNames.MULTIPLE)
        return methods

    def validation_handlers(self) -> dict[str, ValidationHandler]:
        return {
            CheckNames.REQUIRED: self.validate_required,
            CheckNames.UNIQUE: self.validate_unique,
            CheckNames.ALLOW_NULL: self.validate_allow_null,
            CheckNames.MULTIPLE: self.validate_multiple,
        }

    def is_empty(self, val: Any) -> bool:
        """Whether ``val`` counts as missing for the ``required`` check."""
        return not val

    def validate_required(self) -> bool:
        if self.required and self.is_empty(self.val()):
            self.validator().error(CheckMessages.REQUIRED, CheckNames.REQUIRED)
            return False
        return True

    def validate_unique(self) -> bool:
        """Uniqueness needs a storage lookup, done by the storage layer.

        Always passes here.
        """
        return True

    def validate_allow_null(self) -> bool:
        if not self.allow_null and self.val() is None:
            self.validator().error(CheckMessages.ALLOW_NULL, CheckNames.ALLOW_NULL)
            return False
        return True

    def validate_multiple(self) -> bool:
        """Check the number of values against ``multiple_options`` bounds."""
        if not self.multiple:
            return True
        val = self.val()
        if self.l10n and isinstance(val, Mapping):
            sequences = list(val.values())
        else:
            sequences = [val]

        bounds = self.multiple_options
        ret = True
        for seq in sequences:
            count = len(seq) if isinstance(seq, (list, tuple)) else 0
            if bounds.min and count < bounds.min:
                self.validator().error(
                    CheckMessages.MULTIPLE_MIN.format(min=bounds.min),
                    CheckNames.MULTIPLE,
                )
                ret = False
            elif bounds.max and count > bounds.max:
                self.validator().error(
                    CheckMessages.MULTIPLE_MAX.format(max=bounds.max),
                    CheckNames.MULTIPLE,
                )
                ret = False
        return ret
