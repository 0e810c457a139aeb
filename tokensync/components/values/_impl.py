"""
ValueConverter - Canonical literal to vendor value conversion.

Dispatches on the vendor variable type derived from a token's declared
value type. Conversion never raises: unparsable input is replaced by a
type-appropriate fallback and reported through the observer.

Functional Core - pure business logic.
"""

from __future__ import annotations

import colorsys
import json
import re
from typing import Any

from tokensync.core.ports.observer import NullObserver, TransformObserverPort
from tokensync.domain.entities import ResolvedValueType
from tokensync.domain.variables import ColorValue, VariableAlias, VariableType

from .models import ColorProfile, ParsedColor

# --- Type mapping ---

_COLOR_TYPES = frozenset({"color"})
_FLOAT_TYPES = frozenset(
    {
        "dimension",
        "spacing",
        "size",
        "font_size",
        "line_height",
        "letter_spacing",
        "blur",
        "spread",
        "radius",
        "border_width",
        "opacity",
        "number",
        "float",
    }
)
_BOOLEAN_TYPES = frozenset({"boolean", "bool"})
_STRING_TYPES = frozenset(
    {
        "string",
        "font_family",
        "font_weight",
        "duration",
        "cubic_bezier",
        "shadow",
        "border",
        "z_index",
    }
)


def _normalize_type_key(raw: str) -> str:
    return re.sub(r"[\s\-]+", "_", raw.strip().lower())


def map_variable_type(value_type: ResolvedValueType | None) -> VariableType | None:
    """
    Map a declared value type onto a vendor variable type.

    The standard `type` wins over the id, which wins over the display name.
    Declared but unrecognised types are carried as STRING. Returns None when
    the token's value type is not declared at all.
    """
    if value_type is None:
        return None

    for candidate in (value_type.type, value_type.id, value_type.display_name):
        if not candidate:
            continue
        key = _normalize_type_key(candidate)
        if key in _COLOR_TYPES:
            return "COLOR"
        if key in _FLOAT_TYPES:
            return "FLOAT"
        if key in _BOOLEAN_TYPES:
            return "BOOLEAN"
        if key in _STRING_TYPES:
            return "STRING"
    return "STRING"


def placeholder_value(variable_type: VariableType) -> ColorValue | float | bool | str:
    """Type-appropriate stand-in used when a value cannot be resolved."""
    if variable_type == "COLOR":
        return ColorValue(r=0.0, g=0.0, b=0.0)
    if variable_type == "FLOAT":
        return 0.0
    if variable_type == "BOOLEAN":
        return False
    return ""


def is_alias_value(value: Any) -> bool:
    """Alias-shaped values are left for the chain builder to resolve."""
    if isinstance(value, VariableAlias):
        return True
    if isinstance(value, dict):
        return value.get("type") == "VARIABLE_ALIAS" or "tokenId" in value
    return False


# --- Color parsing ---

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_RE = re.compile(r"^(rgba?|hsla?|color)\(\s*(.*?)\s*\)$", re.IGNORECASE)

# Linear-light conversion matrices between sRGB and Display P3 (D65)
_SRGB_TO_P3 = (
    (0.8224621, 0.1775380, 0.0000000),
    (0.0331941, 0.9668058, 0.0000000),
    (0.0170827, 0.0723974, 0.9105199),
)
_P3_TO_SRGB = (
    (1.2249401, -0.2249404, 0.0000000),
    (-0.0420569, 1.0420571, 0.0000000),
    (-0.0196376, -0.0786361, 1.0982735),
)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def parse_hex(raw: str) -> ParsedColor | None:
    """Parse `#RGB`, `#RGBA`, `#RRGGBB` or `#RRGGBBAA`."""
    match = _HEX_RE.match(raw.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    channels = [int(digits[i : i + 2], 16) / 255 for i in range(0, len(digits), 2)]
    alpha = channels[3] if len(channels) == 4 else 1.0
    return ParsedColor(r=channels[0], g=channels[1], b=channels[2], a=alpha)


def _split_args(body: str) -> tuple[list[str], str | None]:
    """Split functional-notation arguments; returns (channels, alpha)."""
    alpha: str | None = None
    if "/" in body:
        body, alpha = body.split("/", 1)
        alpha = alpha.strip()
    parts = [part for part in re.split(r"[\s,]+", body.strip()) if part]
    return parts, alpha


def _parse_number(raw: str) -> float:
    return float(raw.strip().lower().removesuffix("deg"))


def _parse_fraction(raw: str, scale: float) -> float:
    """Percentages map to 0-1; bare numbers are divided by `scale`."""
    raw = raw.strip()
    if raw.endswith("%"):
        return float(raw[:-1]) / 100
    return float(raw) / scale


def parse_functional(raw: str) -> ParsedColor | None:
    """Parse `rgb()`, `rgba()`, `hsl()`, `hsla()` and `color(<space> ...)`."""
    match = _FUNC_RE.match(raw.strip())
    if not match:
        return None
    func = match.group(1).lower()
    parts, alpha_raw = _split_args(match.group(2))

    try:
        if func == "color":
            if not parts:
                return None
            space_name = parts.pop(0).lower()
            if space_name not in ("srgb", "display-p3"):
                return None
            space = ColorProfile(space_name)
            scale = 1.0
        else:
            space = ColorProfile.SRGB
            scale = 255.0

        # Legacy comma syntax carries alpha as a fourth argument
        if alpha_raw is None and len(parts) == 4:
            alpha_raw = parts.pop()
        if len(parts) != 3:
            return None
        alpha = _parse_fraction(alpha_raw, 1.0) if alpha_raw else 1.0

        if func.startswith("hsl"):
            hue = (_parse_number(parts[0]) % 360) / 360
            saturation = _parse_fraction(parts[1], 100.0)
            lightness = _parse_fraction(parts[2], 100.0)
            r, g, b = colorsys.hls_to_rgb(hue, lightness, saturation)
        else:
            r, g, b = (_parse_fraction(part, scale) for part in parts)
    except ValueError:
        return None

    return ParsedColor(r=r, g=g, b=b, a=alpha, space=space)


def parse_color_object(raw: dict[str, Any]) -> ParsedColor | None:
    """Parse `{r, g, b[, a]}` (0-1 or 0-255), `{hex}` or `{rgb: {...}}`."""
    if isinstance(raw.get("hex"), str):
        return parse_hex(raw["hex"] if raw["hex"].startswith("#") else f"#{raw['hex']}")
    if isinstance(raw.get("rgb"), dict):
        return parse_color_object(raw["rgb"])
    if not all(isinstance(raw.get(key), (int, float)) for key in ("r", "g", "b")):
        return None

    channels = [float(raw[key]) for key in ("r", "g", "b")]
    if max(channels) > 1:
        channels = [channel / 255 for channel in channels]
    raw_alpha = raw.get("a")
    alpha = float(raw_alpha) if isinstance(raw_alpha, (int, float)) else 1.0
    if alpha > 1:
        alpha = alpha / 255
    return ParsedColor(r=channels[0], g=channels[1], b=channels[2], a=alpha)


def parse_color(raw: Any) -> ParsedColor | None:
    """Parse any supported color literal; None when nothing matches."""
    if isinstance(raw, str):
        return parse_hex(raw) or parse_functional(raw)
    if isinstance(raw, dict):
        return parse_color_object(raw)
    if isinstance(raw, ColorValue):
        return ParsedColor(r=raw.r, g=raw.g, b=raw.b, a=raw.a if raw.a is not None else 1.0)
    return None


def _to_linear(channel: float) -> float:
    sign = -1.0 if channel < 0 else 1.0
    channel = abs(channel)
    if channel <= 0.04045:
        return sign * channel / 12.92
    return sign * ((channel + 0.055) / 1.055) ** 2.4


def _from_linear(channel: float) -> float:
    sign = -1.0 if channel < 0 else 1.0
    channel = abs(channel)
    if channel <= 0.0031308:
        return sign * channel * 12.92
    return sign * (1.055 * channel ** (1 / 2.4) - 0.055)


def _apply_matrix(
    matrix: tuple[tuple[float, float, float], ...],
    rgb: tuple[float, float, float],
) -> tuple[float, float, float]:
    linear = [_to_linear(channel) for channel in rgb]
    converted = (sum(row[i] * linear[i] for i in range(3)) for row in matrix)
    r, g, b = (_from_linear(channel) for channel in converted)
    return r, g, b


def to_profile(color: ParsedColor, profile: ColorProfile) -> ColorValue:
    """
    Convert a parsed color into the target working space.

    Components outside the target gamut are clamped; components are rounded
    to six places; alpha is omitted at full opacity.
    """
    rgb = (color.r, color.g, color.b)
    if color.space != profile:
        matrix = _SRGB_TO_P3 if profile == ColorProfile.DISPLAY_P3 else _P3_TO_SRGB
        rgb = _apply_matrix(matrix, rgb)

    r, g, b = (round(_clamp(channel), 6) for channel in rgb)
    alpha = round(_clamp(color.a), 6)
    return ColorValue(r=r, g=g, b=b, a=None if alpha == 1.0 else alpha)


# --- Numeric / boolean / string ---

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_leading_number(raw: str) -> float | None:
    """Extract the leading numeric literal of a string such as `16px`."""
    match = _LEADING_NUMBER.match(raw)
    return float(match.group(1)) if match else None


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


# --- Value Converter ---


class ValueConverter:
    """
    Value converter.

    Bound to one color profile and one observer for the duration of a run.
    """

    def __init__(
        self,
        color_profile: ColorProfile = ColorProfile.SRGB,
        observer: TransformObserverPort | None = None,
    ) -> None:
        """Initialize converter."""
        self.color_profile = color_profile
        self._observer = observer or NullObserver()

    def convert(
        self,
        value: Any,
        variable_type: VariableType,
        entity_id: str | None = None,
    ) -> Any:
        """
        Convert one canonical literal.

        Returns:
            A ColorValue, float, bool or str; alias-shaped input unchanged.
        """
        if is_alias_value(value):
            return value
        if variable_type == "COLOR":
            return self.to_color(value, entity_id)
        if variable_type == "FLOAT":
            return self.to_float(value, entity_id)
        if variable_type == "BOOLEAN":
            return self.to_boolean(value, entity_id)
        return self.to_string(value)

    def to_color(self, value: Any, entity_id: str | None = None) -> ColorValue:
        parsed = parse_color(value)
        if parsed is None:
            self._observer.warn(
                "UNPARSABLE_COLOR",
                f"Could not parse color {value!r}; using black",
                entity_id=entity_id,
            )
            return placeholder_value("COLOR")  # type: ignore[return-value]
        return to_profile(parsed, self.color_profile)

    def to_float(self, value: Any, entity_id: str | None = None) -> float:
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            number = parse_leading_number(value)
            if number is not None:
                return number
        if isinstance(value, dict) and "value" in value:
            return self.to_float(value["value"], entity_id)

        self._observer.warn(
            "UNPARSABLE_NUMBER",
            f"Could not parse number from {value!r}; using 0",
            entity_id=entity_id,
        )
        return 0.0

    def to_boolean(self, value: Any, entity_id: str | None = None) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "false"):
                return lowered == "true"
            number = parse_leading_number(lowered)
            if number is not None:
                return number != 0

        self._observer.warn(
            "UNPARSABLE_BOOLEAN",
            f"Could not parse boolean from {value!r}; using false",
            entity_id=entity_id,
        )
        return False

    def to_string(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        return _stringify(value)


def convert_value(
    value: Any,
    variable_type: VariableType,
    color_profile: ColorProfile = ColorProfile.SRGB,
    observer: TransformObserverPort | None = None,
    entity_id: str | None = None,
) -> Any:
    """Convert a single value with a throwaway converter."""
    return ValueConverter(color_profile, observer).convert(value, variable_type, entity_id)
