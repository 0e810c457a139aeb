"""
Chain component - Dimension usage and daisy-chain construction.
"""

from ._impl import (
    DaisyChainBuilder,
    build_code_syntax,
    map_property_types_to_scopes,
    plan_chain,
    resolve_used_dimensions,
    select_entry,
)
from .component import run_build_chains
from .models import (
    BuildChainsInput,
    BuildChainsOutput,
    ChainNode,
    ChainPlan,
    NodeRole,
    TokenChain,
    TokenContext,
)

__all__ = [
    # Entry points
    "run_build_chains",
    # Models
    "BuildChainsInput",
    "BuildChainsOutput",
    "ChainNode",
    "ChainPlan",
    "NodeRole",
    "TokenChain",
    "TokenContext",
    # Functional core
    "DaisyChainBuilder",
    "build_code_syntax",
    "map_property_types_to_scopes",
    "plan_chain",
    "resolve_used_dimensions",
    "select_entry",
]
