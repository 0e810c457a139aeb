"""
VariableGraphTransformer - Token system to vendor variable graph.

Emits one hidden collection per dimension and one single-mode collection per
token collection, then hands every transformable token to the chain builder.
Tokens that cannot be placed are skipped with a warning; only structural
validation failures stop a run.

Functional Core - pure business logic.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import ValidationError

from tokensync.components.chain import (
    BuildChainsInput,
    TokenContext,
    resolve_used_dimensions,
    run_build_chains,
)
from tokensync.components.identity import EntityRef, IdentityStore
from tokensync.components.values import ColorProfile, map_variable_type
from tokensync.core.ports.observer import NullObserver, TransformObserverPort
from tokensync.domain.entities import Token, TokenCollection, TokenSystem
from tokensync.domain.variables import (
    Variable,
    VariableCollection,
    VariableMode,
    VariableModeValue,
)

from .models import TransformStats, TransformValidationError

VALUE_MODE_NAME = "Value"


def value_mode_id(collection_id: str) -> str:
    """Canonical id of a token collection's single implicit mode."""
    return f"value-mode-{collection_id}"


def default_modes_for(system: TokenSystem) -> dict[str, str]:
    """canonical collection id -> canonical id of its default mode."""
    defaults = {dimension.id: dimension.default_mode for dimension in system.dimensions}
    for collection in system.token_collections:
        defaults[collection.id] = value_mode_id(collection.id)
    return defaults


# --- Validation Functions ---


def _snake_upper(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).upper()


def _from_pydantic(exc: ValidationError) -> list[TransformValidationError]:
    errors: list[TransformValidationError] = []
    for detail in exc.errors():
        loc = [str(part) for part in detail["loc"]]
        path = ".".join(loc)
        if detail["type"] == "missing":
            code = f"MISSING_{_snake_upper(loc[0])}" if len(loc) == 1 else "MISSING_FIELD"
        else:
            code = "INVALID_FIELD"
        errors.append(
            TransformValidationError(code=code, message=f"{path}: {detail['msg']}", field=path)
        )
    return errors


def find_alias_cycles(system: TokenSystem) -> list[list[str]]:
    """Alias cycles between tokens, each as the ordered list of token ids."""
    edges: dict[str, list[str]] = {}
    known = {token.id for token in system.tokens}
    for token in system.tokens:
        edges[token.id] = [
            entry.value.token_id
            for entry in token.values_by_mode
            if entry.value.token_id in known
        ]

    cycles: list[list[str]] = []
    state: dict[str, int] = {}  # 1 = on stack, 2 = done

    def visit(token_id: str, stack: list[str]) -> None:
        state[token_id] = 1
        stack.append(token_id)
        for target in edges[token_id]:
            if state.get(target) == 1:
                cycles.append(stack[stack.index(target) :] + [target])
            elif target not in state:
                visit(target, stack)
        stack.pop()
        state[token_id] = 2

    for token_id in edges:
        if token_id not in state:
            visit(token_id, [])
    return cycles


def validate_token_system(
    data: TokenSystem | dict[str, Any],
) -> tuple[TokenSystem | None, list[TransformValidationError]]:
    """
    Parse and structurally validate a token system.

    Returns:
        Tuple of (system, errors). System is None if validation fails.
    """
    if isinstance(data, TokenSystem):
        system = data
    else:
        try:
            system = TokenSystem.model_validate(data)
        except ValidationError as e:
            return None, _from_pydantic(e)

    errors: list[TransformValidationError] = []

    for attr, wire in (
        ("system_id", "systemId"),
        ("system_name", "systemName"),
        ("version", "version"),
    ):
        if not getattr(system, attr).strip():
            errors.append(
                TransformValidationError(
                    code=f"MISSING_{_snake_upper(wire)}",
                    message=f"{wire} is required",
                    field=wire,
                )
            )

    if not system.token_collections:
        errors.append(
            TransformValidationError(
                code="NO_TOKEN_COLLECTIONS",
                message="At least one token collection is required",
                field="tokenCollections",
            )
        )
    if not system.resolved_value_types:
        errors.append(
            TransformValidationError(
                code="NO_RESOLVED_VALUE_TYPES",
                message="At least one resolved value type is required",
                field="resolvedValueTypes",
            )
        )

    # Collection ids share one namespace in the persisted mapping
    seen_ids: set[str] = set()
    for collection_id in [d.id for d in system.dimensions] + [
        c.id for c in system.token_collections
    ]:
        if collection_id in seen_ids:
            errors.append(
                TransformValidationError(
                    code="DUPLICATE_COLLECTION_ID",
                    message=f"Collection id '{collection_id}' is used more than once",
                    field=collection_id,
                )
            )
        seen_ids.add(collection_id)

    mode_ids: set[str] = set()
    for index, dimension in enumerate(system.dimensions):
        for mode in dimension.modes:
            if mode.id in mode_ids:
                errors.append(
                    TransformValidationError(
                        code="DUPLICATE_MODE_ID",
                        message=f"Mode id '{mode.id}' is used by more than one dimension",
                        field=f"dimensions.{index}.modes",
                    )
                )
            mode_ids.add(mode.id)
        if dimension.default_mode not in dimension.mode_ids():
            errors.append(
                TransformValidationError(
                    code="INVALID_DEFAULT_MODE",
                    message=(
                        f"Default mode '{dimension.default_mode}' is not a mode of "
                        f"dimension '{dimension.id}'"
                    ),
                    field=f"dimensions.{index}.defaultMode",
                )
            )

    for dimension_id in system.dimension_order:
        if system.dimension_by_id(dimension_id) is None:
            errors.append(
                TransformValidationError(
                    code="INVALID_DIMENSION_ORDER",
                    message=f"Dimension order references unknown dimension '{dimension_id}'",
                    field="dimensionOrder",
                )
            )

    value_type_ids = {value_type.id for value_type in system.resolved_value_types}
    for index, collection in enumerate(system.token_collections):
        for value_type_id in collection.resolved_value_type_ids:
            if value_type_id not in value_type_ids:
                errors.append(
                    TransformValidationError(
                        code="INVALID_VALUE_TYPE_REFERENCE",
                        message=(
                            f"Collection '{collection.id}' references unknown value "
                            f"type '{value_type_id}'"
                        ),
                        field=f"tokenCollections.{index}.resolvedValueTypeIds",
                    )
                )

    token_ids: set[str] = set()
    for index, token in enumerate(system.tokens):
        errors.extend(_validate_token(token, index, system, mode_ids, token_ids))
        token_ids.add(token.id)

    for cycle in find_alias_cycles(system):
        errors.append(
            TransformValidationError(
                code="ALIAS_CYCLE",
                message=f"Alias cycle: {' -> '.join(cycle)}",
                field=f"tokens.{cycle[0]}",
            )
        )

    return (None, errors) if errors else (system, [])


def _validate_token(
    token: Token,
    index: int,
    system: TokenSystem,
    mode_ids: set[str],
    seen_token_ids: set[str],
) -> list[TransformValidationError]:
    errors: list[TransformValidationError] = []
    field_prefix = f"tokens.{index}"

    if token.id in seen_token_ids:
        errors.append(
            TransformValidationError(
                code="DUPLICATE_TOKEN_ID",
                message=f"Token id '{token.id}' is used more than once",
                field=f"{field_prefix}.id",
            )
        )

    if token.token_collection_id and system.collection_by_id(token.token_collection_id) is None:
        errors.append(
            TransformValidationError(
                code="INVALID_COLLECTION_REFERENCE",
                message=(
                    f"Token '{token.id}' references unknown collection "
                    f"'{token.token_collection_id}'"
                ),
                field=f"{field_prefix}.tokenCollectionId",
            )
        )

    global_entries = [entry for entry in token.values_by_mode if entry.is_global]
    if global_entries and (len(global_entries) > 1 or len(token.values_by_mode) > 1):
        errors.append(
            TransformValidationError(
                code="MIXED_GLOBAL_VALUES",
                message=(
                    f"Token '{token.id}' must have either one global value or only "
                    "mode-specific values"
                ),
                field=f"{field_prefix}.valuesByMode",
            )
        )

    for entry_index, entry in enumerate(token.values_by_mode):
        for mode_id in entry.mode_ids:
            if mode_id not in mode_ids:
                errors.append(
                    TransformValidationError(
                        code="INVALID_MODE_REFERENCE",
                        message=f"Token '{token.id}' references unknown mode '{mode_id}'",
                        field=f"{field_prefix}.valuesByMode.{entry_index}.modeIds",
                    )
                )
    return errors


# --- Variable Graph Transformer ---


class VariableGraphTransformer:
    """
    Variable graph transformer.

    Works against an already initialized identity store so that the caller
    can merge remote-assigned ids into the same store after a push.
    """

    def __init__(
        self,
        identity: IdentityStore,
        color_profile: ColorProfile = ColorProfile.SRGB,
        observer: TransformObserverPort | None = None,
        naming_platform: str = "Figma",
    ) -> None:
        """Initialize transformer."""
        self._identity = identity
        self._color_profile = color_profile
        self._observer = observer or NullObserver()
        self._naming_platform = naming_platform.strip().lower()

    def transform(
        self,
        system: TokenSystem,
    ) -> tuple[
        list[VariableCollection],
        list[VariableMode],
        list[Variable],
        list[VariableModeValue],
        TransformStats,
    ]:
        """Generate the full graph for a validated token system."""
        for dimension in system.dimensions:
            self._identity.bind_by_name(EntityRef.collection(dimension.id), dimension.display_name)
        for collection in system.token_collections:
            self._identity.bind_by_name(EntityRef.collection(collection.id), collection.name)

        collections, modes = self._collections(system)
        contexts = self.token_contexts(system)

        chains = run_build_chains(
            BuildChainsInput(system=system, contexts=contexts, color_profile=self._color_profile),
            self._identity,
            self._observer,
        )
        variables = [v for chain in chains.chains for v in chain.variables]
        mode_values = [mv for chain in chains.chains for mv in chain.mode_values]

        stats = TransformStats(
            created=sum(1 for v in variables if v.action == "CREATE"),
            updated=sum(1 for v in variables if v.action == "UPDATE"),
            deleted=0,
            collections_created=sum(1 for c in collections if c.action == "CREATE"),
            collections_updated=sum(1 for c in collections if c.action == "UPDATE"),
        )
        self._observer.info(
            f"Transformed {len(contexts)} of {len(system.tokens)} tokens into "
            f"{len(variables)} variables",
            created=stats.created,
            updated=stats.updated,
        )
        return collections, modes, variables, mode_values, stats

    # --- Collections & modes ---

    def _collections(
        self, system: TokenSystem
    ) -> tuple[list[VariableCollection], list[VariableMode]]:
        collections: list[VariableCollection] = []
        modes: list[VariableMode] = []

        for dimension in system.dimensions:
            collection = self._collection(
                dimension.id, dimension.display_name, dimension.default_mode, hidden=True
            )
            collections.append(collection)
            for mode in dimension.modes:
                modes.append(self._mode(mode.id, mode.name, collection))

        for token_collection in system.token_collections:
            mode_id = value_mode_id(token_collection.id)
            collection = self._collection(
                token_collection.id,
                token_collection.name,
                mode_id,
                hidden=token_collection.private,
            )
            collections.append(collection)
            modes.append(self._mode(mode_id, VALUE_MODE_NAME, collection))

        return collections, modes

    def _collection(
        self, collection_id: str, name: str, initial_mode_id: str, hidden: bool
    ) -> VariableCollection:
        ref = EntityRef.collection(collection_id)
        return VariableCollection(
            action=self._identity.determine_action(ref),
            id=self._identity.resolve(ref),
            name=name,
            initial_mode_id=self._identity.resolve(EntityRef.mode(initial_mode_id)),
            hidden_from_publishing=hidden,
        )

    def _mode(self, mode_id: str, name: str, collection: VariableCollection) -> VariableMode:
        ref = EntityRef.mode(mode_id)
        return VariableMode(
            action=self._identity.determine_mode_action(ref, collection.initial_mode_id),
            id=self._identity.resolve(ref),
            name=name,
            variable_collection_id=collection.id,
        )

    # --- Tokens ---

    def token_contexts(self, system: TokenSystem) -> dict[str, TokenContext]:
        """Contexts of every token that can be placed; others are reported."""
        contexts: dict[str, TokenContext] = {}
        for token in system.tokens:
            variable_type = map_variable_type(system.value_type_by_id(token.resolved_value_type_id))
            if variable_type is None:
                self._observer.warn(
                    "UNKNOWN_VALUE_TYPE",
                    f"Token '{token.id}' has undeclared value type "
                    f"'{token.resolved_value_type_id}'; skipped",
                    entity_id=token.id,
                )
                continue

            home = self.home_collection(token, system)
            if home is None:
                self._observer.warn(
                    "NO_HOME_COLLECTION",
                    f"No token collection accepts value type "
                    f"'{token.resolved_value_type_id}' of token '{token.id}'; skipped",
                    entity_id=token.id,
                )
                continue

            contexts[token.id] = TokenContext(
                token=token,
                variable_type=variable_type,
                name=self.token_name(token, system),
                home_collection_id=home.id,
                home_mode_id=value_mode_id(home.id),
                dimensions=resolve_used_dimensions(token, system, self._observer),
            )
        return contexts

    @staticmethod
    def home_collection(token: Token, system: TokenSystem) -> TokenCollection | None:
        """Explicit collection, else the first one accepting the token's type."""
        if token.token_collection_id:
            return system.collection_by_id(token.token_collection_id)
        return next(
            (
                collection
                for collection in system.token_collections
                if token.resolved_value_type_id in collection.resolved_value_type_ids
            ),
            None,
        )

    def token_name(self, token: Token, system: TokenSystem) -> str:
        """Code-syntax name on the naming platform, else the display name."""
        for entry in token.code_syntax:
            platform = system.platform_by_id(entry.platform_id)
            if platform and platform.display_name.strip().lower() == self._naming_platform:
                return entry.formatted_name
        return token.display_name
