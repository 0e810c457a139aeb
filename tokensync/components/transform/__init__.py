"""
Transform component - Token system to vendor variable graph.
"""

from ._impl import (
    VariableGraphTransformer,
    default_modes_for,
    find_alias_cycles,
    validate_token_system,
    value_mode_id,
)
from .component import run_transform
from .models import (
    TRANSFORMER_INFO,
    TransformError,
    TransformerInfo,
    TransformInput,
    TransformOutput,
    TransformStats,
    TransformValidationError,
)

__all__ = [
    # Entry points
    "run_transform",
    # Input models
    "TransformInput",
    # Output models
    "TransformOutput",
    "TransformStats",
    "TransformError",
    "TransformValidationError",
    "TransformerInfo",
    "TRANSFORMER_INFO",
    # Functional core
    "VariableGraphTransformer",
    "default_modes_for",
    "find_alias_cycles",
    "validate_token_system",
    "value_mode_id",
]
