"""
Chain component - Data models.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from tokensync.components.identity import EntityRef
from tokensync.components.values import ColorProfile
from tokensync.domain.entities import Dimension, Token, TokenSystem
from tokensync.domain.variables import Variable, VariableModeValue, VariableType


class NodeRole(Enum):
    """Position of a variable inside a daisy-chain."""

    INTERMEDIARY = "intermediary"  # hidden, holds literal values
    REFERENCE = "reference"  # hidden, holds aliases to the previous stage
    FINAL = "final"  # visible, user-facing


@dataclass(frozen=True)
class TokenContext:
    """Everything the builder needs to know about one transformable token."""

    token: Token
    variable_type: VariableType
    name: str
    home_collection_id: str
    home_mode_id: str
    dimensions: tuple[Dimension, ...] = ()

    @property
    def token_id(self) -> str:
        return self.token.id


@dataclass(frozen=True)
class ChainNode:
    """One planned variable of a chain."""

    role: NodeRole
    ref: EntityRef
    name: str
    collection_id: str
    stage: int
    # Mode ids of the dimensions after this stage that the node is fixed to
    combination: tuple[str, ...] = ()
    dimension: Dimension | None = None

    @property
    def hidden(self) -> bool:
        return self.role is not NodeRole.FINAL


@dataclass(frozen=True)
class ChainPlan:
    """Ordered nodes of one token's chain; the final node is last."""

    token_id: str
    nodes: tuple[ChainNode, ...]

    @property
    def final(self) -> ChainNode:
        return self.nodes[-1]

    def stage(self, index: int) -> tuple[ChainNode, ...]:
        return tuple(node for node in self.nodes if node.stage == index)

    def node_for(self, stage: int, combination: tuple[str, ...]) -> ChainNode | None:
        return next(
            (
                node
                for node in self.nodes
                if node.stage == stage and node.combination == combination
            ),
            None,
        )


# --- Output Models ---


@dataclass(frozen=True)
class TokenChain:
    """Variables and mode values generated for one token."""

    token_id: str
    variables: tuple[Variable, ...]
    mode_values: tuple[VariableModeValue, ...]


# --- Shell Models ---


@dataclass(frozen=True)
class BuildChainsInput:
    """Input for building the chains of a set of tokens."""

    system: TokenSystem
    contexts: Mapping[str, TokenContext]
    color_profile: ColorProfile = ColorProfile.SRGB


@dataclass(frozen=True)
class BuildChainsOutput:
    """Output from chain building, in context order."""

    chains: tuple[TokenChain, ...]
    names_bound: int = 0
