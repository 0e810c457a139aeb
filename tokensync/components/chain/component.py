"""
Chain component - Daisy-chain construction for a set of tokens.

Shell Layer - binds names for every token, then builds each chain.
"""

from __future__ import annotations

from tokensync.components.identity import IdentityStore
from tokensync.components.values import ValueConverter
from tokensync.core.ports.observer import TransformObserverPort

from ._impl import DaisyChainBuilder
from .models import BuildChainsInput, BuildChainsOutput


def run_build_chains(
    input_data: BuildChainsInput,
    identity: IdentityStore,
    observer: TransformObserverPort | None = None,
) -> BuildChainsOutput:
    """
    Build every token chain against one identity store.

    Name binding runs for all tokens first so that an alias resolved early in
    the run sees the same ids as the chain it points to.
    """
    builder = DaisyChainBuilder(
        system=input_data.system,
        identity=identity,
        converter=ValueConverter(input_data.color_profile, observer),
        contexts=input_data.contexts,
        observer=observer,
    )

    names_bound = sum(builder.bind_names(token_id) for token_id in input_data.contexts)
    chains = tuple(builder.build(token_id) for token_id in input_data.contexts)

    return BuildChainsOutput(chains=chains, names_bound=names_bound)
