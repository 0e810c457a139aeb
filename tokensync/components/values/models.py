"""
Values component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from tokensync.domain.variables import VariableType


class ColorProfile(Enum):
    """Working color space of the target file."""

    SRGB = "srgb"
    DISPLAY_P3 = "display-p3"

    @classmethod
    def parse(cls, raw: str | ColorProfile | None) -> ColorProfile:
        """Parse a profile name; `None` means sRGB."""
        if raw is None:
            return cls.SRGB
        if isinstance(raw, cls):
            return raw
        normalized = raw.strip().lower().replace("_", "-")
        if normalized in ("p3", "displayp3"):
            normalized = cls.DISPLAY_P3.value
        return cls(normalized)


@dataclass(frozen=True)
class ParsedColor:
    """Color components in 0-1 range, tagged with their source space."""

    r: float
    g: float
    b: float
    a: float = 1.0
    space: ColorProfile = ColorProfile.SRGB


# --- Input Models ---


@dataclass(frozen=True)
class ConvertValueInput:
    """Input for converting one canonical literal."""

    value: Any
    variable_type: VariableType
    color_profile: ColorProfile = ColorProfile.SRGB
    entity_id: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class ConvertValueOutput:
    """Output from a conversion."""

    value: Any
    variable_type: VariableType
    warnings: tuple[str, ...] = ()
