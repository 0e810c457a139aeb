"""
Transform component - Token system to vendor variable graph.

Shell Layer - validates input, prepares identity, converts to output models.
"""

from __future__ import annotations

from tokensync.components.identity import (
    IdentityStore,
    InitializeIdentityInput,
    run_initialize,
)
from tokensync.core.ports.observer import CollectingObserver, TransformObserverPort

from ._impl import VariableGraphTransformer, default_modes_for, validate_token_system
from .models import TransformError, TransformInput, TransformOutput


def run_transform(
    input_data: TransformInput,
    observer: TransformObserverPort | None = None,
    identity: IdentityStore | None = None,
) -> TransformOutput:
    """
    Transform a token system.

    Structural validation failures return `success=False` with no partial
    output. Per-token problems are recovered and listed in `warnings`.

    Args:
        input_data: Token system, remote state, persisted mapping, profile
        observer: Optional sink the collected warnings are forwarded to
        identity: Store to initialize and use; a fresh one when omitted
    """
    system, errors = validate_token_system(input_data.token_system)
    if system is None:
        return TransformOutput(
            success=False,
            errors=tuple(errors),
            error=TransformError(
                code="VALIDATION_FAILED",
                message=f"Token system failed validation with {len(errors)} error(s)",
                details=tuple(errors),
            ),
        )

    collector = CollectingObserver(forward=observer)
    identity, identity_output = run_initialize(
        InitializeIdentityInput(
            remote_state=input_data.remote_state,
            persisted_mapping=input_data.persisted_mapping,
            default_modes=default_modes_for(system),
        ),
        identity,
    )
    if identity_output.report.pruned:
        collector.info(
            f"Pruned {len(identity_output.report.pruned)} stale mapping entries",
            pruned=list(identity_output.report.pruned),
        )
    if identity_output.report.migrated:
        collector.info(
            f"Re-keyed {len(identity_output.report.migrated)} untagged mapping entries",
            migrated=list(identity_output.report.migrated),
        )

    transformer = VariableGraphTransformer(
        identity,
        color_profile=input_data.color_profile,
        observer=collector,
        naming_platform=input_data.naming_platform,
    )
    collections, modes, variables, mode_values, stats = transformer.transform(system)

    return TransformOutput(
        success=True,
        variables=tuple(variables),
        collections=tuple(collections),
        modes=tuple(modes),
        mode_values=tuple(mode_values),
        stats=stats,
        warnings=tuple(collector.warnings),
        mapping=identity.snapshot(),
        pruned=identity_output.report.pruned,
    )
