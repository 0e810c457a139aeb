"""
Identity component - Canonical id to remote id reconciliation.
"""

from ._impl import IdentityStore, placeholder_id
from .component import run_initialize
from .models import (
    EntityKind,
    EntityRef,
    IdentityOutput,
    InitializeIdentityInput,
    InitializeReport,
)

__all__ = [
    # Entry points
    "run_initialize",
    # Input models
    "InitializeIdentityInput",
    # Output models
    "IdentityOutput",
    "InitializeReport",
    # Id tagging
    "EntityKind",
    "EntityRef",
    # Functional core
    "IdentityStore",
    "placeholder_id",
]
