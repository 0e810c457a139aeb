"""
Values component - Canonical literal to vendor value conversion.

Shell Layer - wraps the converter and collects its diagnostics.
"""

from __future__ import annotations

from tokensync.core.ports.observer import CollectingObserver, TransformObserverPort

from ._impl import ValueConverter
from .models import ConvertValueInput, ConvertValueOutput


def run_convert(
    input_data: ConvertValueInput,
    observer: TransformObserverPort | None = None,
) -> ConvertValueOutput:
    """Convert one value and report any warnings raised on the way."""
    collector = CollectingObserver(forward=observer)
    converter = ValueConverter(input_data.color_profile, collector)
    value = converter.convert(
        input_data.value,
        input_data.variable_type,
        entity_id=input_data.entity_id,
    )
    return ConvertValueOutput(
        value=value,
        variable_type=input_data.variable_type,
        warnings=tuple(warning.code for warning in collector.warnings),
    )
