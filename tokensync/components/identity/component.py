"""
Identity component - Canonical id to remote id reconciliation.

Shell Layer - prepares an IdentityStore for one run.
"""

from __future__ import annotations

from ._impl import IdentityStore
from .models import IdentityOutput, InitializeIdentityInput


def run_initialize(
    input_data: InitializeIdentityInput,
    store: IdentityStore | None = None,
) -> tuple[IdentityStore, IdentityOutput]:
    """Initialize a store from remote state and the persisted mapping."""
    store = store or IdentityStore()
    report = store.initialize(
        input_data.remote_state,
        input_data.persisted_mapping,
        input_data.default_modes,
    )
    return store, IdentityOutput(mapping=store.snapshot(), report=report)
