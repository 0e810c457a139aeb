"""
DaisyChainBuilder - One-dimension-per-collection decomposition of tokens.

The vendor lets a variable vary only across the modes of the single
collection it lives in. A token that varies over dimensions D0..Dn-1 is
therefore expressed as a chain of variables:

- stage 0: one hidden intermediary in D0's collection per mode combination
  of D1..Dn-1, holding literal values for every D0 mode
- stage i: one hidden reference variable in Di's collection per mode
  combination of Di+1..Dn-1, aliasing the stage i-1 node for each Di mode
- final: one visible variable in the token's home collection aliasing the
  single last-stage node

A token with no used dimensions is a single final variable holding its value.

Functional Core - pure business logic.
"""

from __future__ import annotations

import itertools
from collections.abc import Mapping
from typing import Any

from tokensync.components.identity import EntityRef, IdentityStore
from tokensync.components.values import ValueConverter, placeholder_value
from tokensync.core.ports.observer import NullObserver, TransformObserverPort
from tokensync.domain.entities import (
    Dimension,
    PropertyType,
    Token,
    TokenSystem,
    ValueByMode,
)
from tokensync.domain.variables import (
    ALL_SCOPES,
    Variable,
    VariableAlias,
    VariableModeValue,
)

from .models import ChainNode, ChainPlan, NodeRole, TokenChain, TokenContext

# --- Scopes & code syntax ---

PROPERTY_SCOPES: dict[str, tuple[str, ...]] = {
    # Color
    "background-color": ("FRAME_FILL", "SHAPE_FILL"),
    "text-color": ("TEXT_FILL",),
    "border-color": ("STROKE_COLOR",),
    "shadow-color": ("EFFECT_COLOR",),
    # Spacing & dimensions
    "width-height": ("WIDTH_HEIGHT",),
    "border-width": ("STROKE_FLOAT",),
    "border-radius": ("CORNER_RADIUS",),
    "padding": ("GAP",),
    "margin": ("GAP",),
    "gap-spacing": ("GAP",),
    # Typography
    "font-family": ("FONT_FAMILY",),
    "font-size": ("FONT_SIZE",),
    "font-weight": ("FONT_WEIGHT",),
    "font-style": ("FONT_STYLE",),
    "line-height": ("LINE_HEIGHT",),
    "letter-spacing": ("LETTER_SPACING",),
    # Effects
    "opacity": ("OPACITY",),
    "shadow": ("EFFECT_FLOAT", "EFFECT_COLOR"),
    "blur": ("EFFECT_FLOAT",),
    "duration": ("EFFECT_FLOAT",),
    "delay": ("EFFECT_FLOAT",),
}

ALL_PROPERTY_TYPES = "ALL_PROPERTY_TYPES"

CODE_SYNTAX_PLATFORMS = {
    "css": "WEB",
    "web": "WEB",
    "ios": "iOS",
    "android": "ANDROID",
}


def map_property_types_to_scopes(
    property_types: list[PropertyType | str],
    system: TokenSystem | None = None,
) -> list[str]:
    """
    Derive vendor scopes from a token's property types.

    A property type's own figma platform mapping wins over the built-in
    table; anything unmapped widens to ALL_SCOPES.
    """
    if not property_types or ALL_PROPERTY_TYPES in property_types:
        return [ALL_SCOPES]

    scopes: list[str] = []
    for property_type in property_types:
        if isinstance(property_type, str) and system is not None:
            property_type = system.property_type_by_id(property_type) or property_type

        if (
            isinstance(property_type, PropertyType)
            and property_type.platform_mappings is not None
            and property_type.platform_mappings.figma
        ):
            mapped: tuple[str, ...] | list[str] = property_type.platform_mappings.figma
        else:
            raw_id = property_type if isinstance(property_type, str) else property_type.id
            mapped = PROPERTY_SCOPES.get(raw_id.lower().replace("_", "-"), ())

        for scope in mapped:
            if scope not in scopes:
                scopes.append(scope)

    if not scopes or ALL_SCOPES in scopes:
        return [ALL_SCOPES]
    return scopes


def build_code_syntax(token: Token, system: TokenSystem) -> dict[str, str] | None:
    """Vendor code syntax (WEB / iOS / ANDROID) from the token's platform names."""
    code_syntax: dict[str, str] = {}
    for entry in token.code_syntax:
        platform = system.platform_by_id(entry.platform_id)
        if platform is None:
            continue
        key = CODE_SYNTAX_PLATFORMS.get(platform.display_name.strip().lower())
        if key is not None:
            code_syntax[key] = entry.formatted_name
    return code_syntax or None


# --- Dimension usage ---


def resolve_used_dimensions(
    token: Token,
    system: TokenSystem,
    observer: TransformObserverPort | None = None,
) -> tuple[Dimension, ...]:
    """
    Dimensions the token actually varies over, in dimension order.

    Referenced dimensions missing from the dimension order are dropped and
    reported.
    """
    used: list[str] = []
    for entry in token.values_by_mode:
        for mode_id in entry.mode_ids:
            dimension = system.dimension_for_mode(mode_id)
            if dimension is not None and dimension.id not in used:
                used.append(dimension.id)

    ordered: list[Dimension] = []
    for dimension_id in system.dimension_order:
        dimension = system.dimension_by_id(dimension_id)
        if dimension_id in used and dimension is not None:
            ordered.append(dimension)

    unordered = [d for d in used if d not in system.dimension_order]
    if unordered and observer is not None:
        observer.warn(
            "UNORDERED_DIMENSION",
            f"Token '{token.id}' uses dimensions outside the dimension order: "
            f"{', '.join(unordered)}; they are ignored for chaining",
            entity_id=token.id,
            dimension_ids=unordered,
        )
    return tuple(ordered)


def select_entry(
    token: Token,
    dimensions: tuple[Dimension, ...],
    combination: tuple[str, ...],
    system: TokenSystem,
) -> ValueByMode | None:
    """
    Pick the value entry for one full mode combination.

    Entry mode sets are restricted to the chained dimensions and omitted
    dimensions are filled with their default mode. An exact match wins, then
    the most specific subset match. Ties prefer entries whose ignored modes
    are defaults, then declaration order.
    """
    target = {d.id: mode_id for d, mode_id in zip(dimensions, combination, strict=True)}

    best: ValueByMode | None = None
    best_rank: tuple[bool, int, bool, int] | None = None
    for index, entry in enumerate(token.values_by_mode):
        restricted: dict[str, str] = {}
        ignored_are_defaults = True
        for mode_id in entry.mode_ids:
            dimension = system.dimension_for_mode(mode_id)
            if dimension is None:
                continue
            if dimension.id in target:
                restricted[dimension.id] = mode_id
            elif mode_id != dimension.default_mode:
                ignored_are_defaults = False

        if any(target[d] != mode_id for d, mode_id in restricted.items()):
            continue

        expanded = {d.id: restricted.get(d.id, d.default_mode) for d in dimensions}
        rank = (expanded == target, len(restricted), ignored_are_defaults, -index)
        if best_rank is None or rank > best_rank:
            best, best_rank = entry, rank
    return best


# --- Planning ---


def _node_id(role: NodeRole, token_id: str, dimension_id: str, combination: tuple[str, ...]) -> str:
    suffix = "".join(f"-{mode_id}" for mode_id in combination)
    return f"{role.value}-{token_id}-{dimension_id}{suffix}"


def _node_name(
    name: str,
    dimension: Dimension,
    rest: tuple[Dimension, ...],
    combination: tuple[str, ...],
) -> str:
    if not combination:
        return f"{name} ({dimension.display_name})"
    mode_names = []
    for rest_dimension, mode_id in zip(rest, combination, strict=True):
        mode = rest_dimension.mode_by_id(mode_id)
        mode_names.append(mode.name if mode else mode_id)
    return f"{name} ({dimension.display_name} - {' / '.join(mode_names)})"


def plan_chain(context: TokenContext) -> ChainPlan:
    """Lay out every node of a token's chain without touching identity."""
    dimensions = context.dimensions
    nodes: list[ChainNode] = []

    for stage, dimension in enumerate(dimensions):
        role = NodeRole.INTERMEDIARY if stage == 0 else NodeRole.REFERENCE
        rest = dimensions[stage + 1 :]
        for combination in itertools.product(*(d.mode_ids() for d in rest)):
            nodes.append(
                ChainNode(
                    role=role,
                    ref=EntityRef.variable(
                        _node_id(role, context.token_id, dimension.id, combination)
                    ),
                    name=_node_name(context.name, dimension, rest, combination),
                    collection_id=dimension.id,
                    stage=stage,
                    combination=combination,
                    dimension=dimension,
                )
            )

    nodes.append(
        ChainNode(
            role=NodeRole.FINAL,
            ref=EntityRef.variable(context.token_id),
            name=context.name,
            collection_id=context.home_collection_id,
            stage=len(dimensions),
        )
    )
    return ChainPlan(token_id=context.token_id, nodes=tuple(nodes))


# --- Daisy-Chain Builder ---


class DaisyChainBuilder:
    """
    Daisy-chain builder.

    Holds the contexts of every transformable token in the system so that
    aliases can target another token's chain nodes.
    """

    def __init__(
        self,
        system: TokenSystem,
        identity: IdentityStore,
        converter: ValueConverter,
        contexts: Mapping[str, TokenContext],
        observer: TransformObserverPort | None = None,
    ) -> None:
        """Initialize builder."""
        self._system = system
        self._identity = identity
        self._converter = converter
        self._contexts = contexts
        self._observer = observer or NullObserver()
        self._plans: dict[str, ChainPlan] = {}

    def plan(self, token_id: str) -> ChainPlan:
        """Node plan for a token (cached)."""
        if token_id not in self._plans:
            self._plans[token_id] = plan_chain(self._contexts[token_id])
        return self._plans[token_id]

    def bind_names(self, token_id: str) -> int:
        """
        Bind unmapped chain nodes to same-named remote variables.

        Must run for every token before any chain is built so that ids stay
        consistent across the whole run.
        """
        bound = 0
        for node in self.plan(token_id).nodes:
            remote_collection = self._identity.resolve(EntityRef.collection(node.collection_id))
            if self._identity.bind_by_name(node.ref, node.name, remote_collection):
                bound += 1
        return bound

    def build(self, token_id: str) -> TokenChain:
        """Generate the variables and mode values of one token."""
        context = self._contexts[token_id]
        plan = self.plan(token_id)

        variables = [self._variable(context, node) for node in plan.nodes]
        mode_values: list[VariableModeValue] = []

        for node in plan.nodes:
            if node.role is NodeRole.FINAL:
                if context.dimensions:
                    source = plan.node_for(node.stage - 1, ())
                    value: Any = self._alias_to(source)
                else:
                    value = self._value_for(context, ())
                mode_values.append(self._mode_value(node, context.home_mode_id, value))
                continue

            assert node.dimension is not None
            for mode in node.dimension.modes:
                combination = (mode.id, *node.combination)
                if node.role is NodeRole.INTERMEDIARY:
                    value = self._value_for(context, combination)
                else:
                    value = self._alias_to(plan.node_for(node.stage - 1, combination))
                mode_values.append(self._mode_value(node, mode.id, value))

        return TokenChain(
            token_id=token_id,
            variables=tuple(variables),
            mode_values=tuple(mode_values),
        )

    # --- Entities ---

    def _variable(self, context: TokenContext, node: ChainNode) -> Variable:
        collection_id = self._identity.resolve(EntityRef.collection(node.collection_id))
        common = {
            "action": self._identity.determine_action(node.ref),
            "id": self._identity.resolve(node.ref),
            "name": node.name,
            "variable_collection_id": collection_id,
            "resolved_type": context.variable_type,
        }
        if node.hidden:
            return Variable(**common, scopes=[ALL_SCOPES], hidden_from_publishing=True)

        token = context.token
        return Variable(
            **common,
            scopes=map_property_types_to_scopes(token.property_types, self._system),
            hidden_from_publishing=token.private,
            description=token.description or None,
            code_syntax=build_code_syntax(token, self._system),
        )

    def _mode_value(self, node: ChainNode, mode_id: str, value: Any) -> VariableModeValue:
        return VariableModeValue(
            variable_id=self._identity.resolve(node.ref),
            mode_id=self._identity.resolve(EntityRef.mode(mode_id)),
            value=value,
        )

    def _alias_to(self, node: ChainNode | None) -> VariableAlias:
        assert node is not None, "chain plan is missing a stage node"
        return VariableAlias(id=self._identity.resolve(node.ref))

    # --- Values ---

    def _value_for(self, context: TokenContext, combination: tuple[str, ...]) -> Any:
        entry = select_entry(context.token, context.dimensions, combination, self._system)
        if entry is None:
            self._observer.warn(
                "MISSING_MODE_VALUE",
                f"Token '{context.token_id}' has no value for modes {list(combination)}",
                entity_id=context.token_id,
                mode_ids=list(combination),
            )
            return placeholder_value(context.variable_type)

        if entry.value.is_alias:
            return self._resolve_alias(context, entry.value.token_id or "", combination)
        return self._converter.convert(
            entry.value.value,
            context.variable_type,
            entity_id=context.token_id,
        )

    def _resolve_alias(
        self,
        context: TokenContext,
        target_id: str,
        combination: tuple[str, ...],
    ) -> Any:
        """
        Alias to the referenced token's node at the same structural position.

        Single- and zero-dimension targets (and any target referenced from a
        direct value) resolve to their final variable; multi-dimension targets
        resolve to their intermediary when they chain from the same first
        dimension over a subset of this token's dimensions.
        """
        target = self._contexts.get(target_id)
        if target is None:
            return self._placeholder(
                context,
                "DANGLING_ALIAS",
                f"Token '{context.token_id}' aliases '{target_id}', which is not exported",
                target_id,
            )
        if target.variable_type != context.variable_type:
            return self._placeholder(
                context,
                "ALIAS_TYPE_MISMATCH",
                f"Token '{context.token_id}' ({context.variable_type}) aliases "
                f"'{target_id}' ({target.variable_type})",
                target_id,
            )

        if len(target.dimensions) <= 1 or not combination:
            return VariableAlias(id=self._identity.resolve(EntityRef.variable(target_id)))

        own_ids = [d.id for d in context.dimensions]
        target_ids = [d.id for d in target.dimensions]
        if target_ids[0] == own_ids[0] and set(target_ids) <= set(own_ids):
            position = dict(zip(own_ids, combination, strict=True))
            target_combination = tuple(position[d] for d in target_ids[1:])
            node = self.plan(target_id).node_for(0, target_combination)
            if node is not None:
                return self._alias_to(node)

        return self._placeholder(
            context,
            "ALIAS_NO_STRUCTURAL_MATCH",
            f"Token '{context.token_id}' aliases '{target_id}', whose chain shares "
            "no node at this position",
            target_id,
        )

    def _placeholder(
        self,
        context: TokenContext,
        code: str,
        message: str,
        target_id: str,
    ) -> Any:
        self._observer.warn(code, message, entity_id=context.token_id, target_id=target_id)
        return placeholder_value(context.variable_type)
