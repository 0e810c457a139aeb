"""
Values component - Canonical literal to vendor value conversion.
"""

from ._impl import (
    ValueConverter,
    convert_value,
    is_alias_value,
    map_variable_type,
    parse_color,
    placeholder_value,
    to_profile,
)
from .component import run_convert
from .models import ColorProfile, ConvertValueInput, ConvertValueOutput, ParsedColor

__all__ = [
    # Entry points
    "run_convert",
    "convert_value",
    # Models
    "ColorProfile",
    "ConvertValueInput",
    "ConvertValueOutput",
    "ParsedColor",
    # Functional core
    "ValueConverter",
    "is_alias_value",
    "map_variable_type",
    "parse_color",
    "placeholder_value",
    "to_profile",
]
