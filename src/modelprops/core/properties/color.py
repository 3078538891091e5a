"""Color property.

Colors are normalized to ``#RRGGBB`` or, when alpha is supported, to
``rgba(r,g,b,a)``. Accepted inputs are hex strings (3 or 6 digits, with
or without ``#``), ``rgb()`` / ``rgba()`` strings, SVG/CSS color names
and ``{r, g, b, a}`` mappings or ``[r, g, b, a]`` sequences.
"""

from __future__ import annotations

import re
import string
from collections.abc import Mapping, Sequence
from typing import Any, NamedTuple

from modelprops.core.properties.base import AbstractProperty, PropertyOptions, Setter
from modelprops.shared.constants import NAMED_COLORS, SqlTypes
from modelprops.shared.errors import (
    ErrorCode,
    ErrorContext,
    UnsupportedValueError,
    create_invalid_value_error,
)

RGB_PATTERN = re.compile(r"rgb\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)", re.IGNORECASE)
RGBA_PATTERN = re.compile(
    r"rgba\s*\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d*\.?\d+)\s*\)",
    re.IGNORECASE,
)


class RGBA(NamedTuple):
    r: int
    g: int
    b: int
    a: float = 0


class ColorOptions(PropertyOptions):
    support_alpha: bool = False


def format_alpha(alpha: float) -> str:
    """Format an alpha value without a trailing ``.0``.

    Example:
        >>> format_alpha(0.5), format_alpha(1.0)
        ('0.5', '1')
    """
    if float(alpha).is_integer():
        return str(int(alpha))
    return f"{alpha:g}"


class ColorProperty(AbstractProperty):
    """A color, stored in its canonical text form."""

    type_ident = "color"
    options_class = ColorOptions

    _options: ColorOptions

    def setters(self) -> dict[str, Setter]:
        return {**super().setters(), "support_alpha": self.set_support_alpha}

    @property
    def support_alpha(self) -> bool:
        return self._options.support_alpha

    def set_support_alpha(self, support: Any) -> ColorProperty:
        self._set_option("support_alpha", bool(support))
        return self

    def parse_one(self, val: Any) -> Any:
        return self.color_val(val)

    def color_val(self, val: Any) -> Any:
        """Normalize one color to its canonical form.

        Raises:
            InvalidValueError: If the color can not be parsed
            UnsupportedValueError: For hsl() and hsla() colors
        """
        if not val:
            return val
        rgba = self.parse_color(val)
        if not self.support_alpha:
            return f"#{rgba.r:02X}{rgba.g:02X}{rgba.b:02X}"
        return f"rgba({rgba.r},{rgba.g},{rgba.b},{format_alpha(rgba.a)})"

    def parse_color(self, val: Any) -> RGBA:
        if isinstance(val, str):
            rgba = self._parse_string(val)
        elif isinstance(val, (Mapping, Sequence)):
            rgba = self._parse_array(val)
        else:
            raise self._invalid(f"Unsupported color value type: {type(val).__name__}")

        for channel in (rgba.r, rgba.g, rgba.b):
            if not 0 <= channel <= 255:
                raise self._invalid(f"Color channel out of range (0-255): {channel}")
        if not 0 <= rgba.a <= 1:
            raise self._invalid(f"Alpha out of range (0-1): {rgba.a}")
        return rgba

    def _parse_array(self, val: Mapping[str, Any] | Sequence[Any]) -> RGBA:
        if len(val) < 3:
            raise self._invalid(
                "Color value must have at least 3 items (r, g and b) to be parsed."
            )
        try:
            if isinstance(val, Mapping):
                return RGBA(int(val["r"]), int(val["g"]), int(val["b"]), float(val.get("a", 0)))
            alpha = float(val[3]) if len(val) > 3 else 0
            return RGBA(int(val[0]), int(val[1]), int(val[2]), alpha)
        except (KeyError, TypeError, ValueError) as e:
            raise self._invalid(f"Invalid color array: {val!r}", e) from e

    def _parse_string(self, val: str) -> RGBA:
        val = val.strip().lower().replace("#", "")
        if len(val) in (3, 6) and all(c in string.hexdigits for c in val):
            return self._parse_hexadecimal(val)
        if "rgb(" in val:
            return self._parse_rgb(val)
        if "rgba(" in val:
            return self._parse_rgba(val)
        if "hsl(" in val or "hsla(" in val:
            raise UnsupportedValueError(
                ErrorCode.UNSUPPORTED_COLOR_FORMAT,
                "HSL color value is not yet supported",
                ErrorContext(operation="color_val", property_ident=self.ident),
            )
        return self._parse_named_color(val)

    @staticmethod
    def _parse_hexadecimal(val: str) -> RGBA:
        if len(val) == 3:
            val = "".join(c * 2 for c in val)
        return RGBA(int(val[0:2], 16), int(val[2:4], 16), int(val[4:6], 16))

    def _parse_rgb(self, val: str) -> RGBA:
        match = RGB_PATTERN.search(val)
        if match is None:
            raise self._invalid(f"String does not match rgb() format: {val}")
        return RGBA(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    def _parse_rgba(self, val: str) -> RGBA:
        match = RGBA_PATTERN.search(val)
        if match is None:
            raise self._invalid(f"String does not match rgba() format: {val}")
        return RGBA(
            int(match.group(1)),
            int(match.group(2)),
            int(match.group(3)),
            float(match.group(4)),
        )

    def _parse_named_color(self, val: str) -> RGBA:
        color = NAMED_COLORS.get(val)
        if color is None:
            raise self._invalid(f'Color "{val}" is not a valid SVG (or CSS) color name.')
        return self._parse_string(color)

    def _invalid(self, message: str, original_error: Exception | None = None) -> Exception:
        return create_invalid_value_error(
            message,
            ident=self.ident,
            code=ErrorCode.INVALID_COLOR,
            operation="color_val",
            original_error=original_error,
        )

    def sql_type(self) -> str:
        # Multiple colors are stored as TEXT since they hold many values
        if self.multiple:
            return SqlTypes.TEXT
        if self.support_alpha:
            return SqlTypes.COLOR_RGBA
        return SqlTypes.COLOR_HEX
