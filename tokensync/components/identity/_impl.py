"""
IdentityStore - Canonical id to remote id reconciliation.

Owns the persisted mapping (kind-tagged canonical id -> remote id) plus the
per-run indices of what already exists remotely. All mutation after
initialization goes through `bind_by_name` and `merge_remote_assigned_ids`.

Key behaviors:
- Mapping keys are `<kind>:<canonical id>`; a token and a mode may share an id
- Stale mapping entries (remote id no longer present) are pruned on load
- Untagged keys from older files are re-keyed by the kind of their remote id
- Unmapped ids resolve to a deterministic placeholder (hash of kind + id)
- A remote id is never bound to two canonical ids

Functional Core - pure business logic.
"""

from __future__ import annotations

import hashlib

from tokensync.domain.variables import Action, RemoteVariablesState

from .models import EntityKind, EntityRef, InitializeReport


def placeholder_id(ref: EntityRef) -> str:
    """Deterministic stand-in id for an entity with no remote counterpart yet."""
    digest = hashlib.sha1(f"{ref.kind.value}:{ref.canonical_id}".encode()).hexdigest()
    return f"{ref.kind.value}-{digest[:16]}"


class IdentityStore:
    """
    Identity store.

    One instance is owned by one transformation run and passed by reference
    to every collaborator that needs to resolve ids.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._reset()

    def _reset(self) -> None:
        # EntityRef.key -> remote id
        self._mapping: dict[str, str] = {}
        self._claimed: set[str] = set()
        self._known_remote_ids: dict[str, EntityKind] = {}
        self._collection_names: dict[str, str] = {}
        # name -> [(remote variable id, remote collection id)]
        self._variable_names: dict[str, list[tuple[str, str | None]]] = {}
        self._initial_mode_by_collection: dict[str, str] = {}
        self._default_modes: dict[str, str] = {}
        self._placeholders: dict[str, EntityRef] = {}

    # --- Lifecycle ---

    def initialize(
        self,
        remote_state: RemoteVariablesState,
        persisted_mapping: dict[str, str],
        default_modes: dict[str, str] | None = None,
    ) -> InitializeReport:
        """
        Index remote state, load the persisted mapping, prune, backfill.

        Args:
            remote_state: Existing remote variables and collections
            persisted_mapping: mapping key -> remote id from the previous run
            default_modes: canonical collection id -> canonical default mode id

        Returns:
            InitializeReport listing pruned keys and backfilled mode ids
        """
        self._reset()
        self._default_modes = dict(default_modes or {})

        for collection in remote_state.variable_collections:
            self._known_remote_ids[collection.id] = EntityKind.COLLECTION
            self._collection_names.setdefault(collection.name, collection.id)
            for mode in collection.modes:
                self._known_remote_ids[mode.mode_id] = EntityKind.MODE
            if collection.default_mode_id:
                self._known_remote_ids[collection.default_mode_id] = EntityKind.MODE
                self._initial_mode_by_collection[collection.id] = collection.default_mode_id

        for variable in remote_state.variables:
            self._known_remote_ids[variable.id] = EntityKind.VARIABLE
            self._variable_names.setdefault(variable.name, []).append(
                (variable.id, variable.variable_collection_id)
            )

        pruned: list[str] = []
        migrated: list[str] = []
        for key, remote_id in sorted(persisted_mapping.items()):
            remote_kind = self._known_remote_ids.get(remote_id)
            ref = EntityRef.from_key(key)
            if ref is None and remote_kind is not None:
                ref = EntityRef(remote_kind, key)
                migrated.append(key)
            if (
                ref is None
                or ref.kind is not remote_kind
                or ref.key in self._mapping
                or remote_id in self._claimed
            ):
                pruned.append(key)
                continue
            self._bind(ref, remote_id)

        backfilled = [
            mode_id
            for collection_id, mode_id in sorted(self._default_modes.items())
            if self._backfill_default_mode(collection_id, mode_id)
        ]

        return InitializeReport(
            loaded=len(persisted_mapping),
            pruned=tuple(pruned),
            backfilled=tuple(backfilled),
            migrated=tuple(migrated),
        )

    def _bind(self, ref: EntityRef, remote_id: str) -> None:
        previous = self._mapping.get(ref.key)
        if previous is not None:
            self._claimed.discard(previous)
        self._mapping[ref.key] = remote_id
        self._claimed.add(remote_id)

    def _backfill_default_mode(self, collection_id: str, mode_id: str) -> bool:
        """Map a collection's default mode onto the remote initial mode."""
        mode_ref = EntityRef.mode(mode_id)
        if mode_ref.key in self._mapping:
            return False
        remote_collection = self._existing_remote_id(EntityRef.collection(collection_id))
        if remote_collection is None:
            return False
        initial_mode = self._initial_mode_by_collection.get(remote_collection)
        if initial_mode is None or initial_mode in self._claimed:
            return False
        self._bind(mode_ref, initial_mode)
        return True

    def _existing_remote_id(self, ref: EntityRef) -> str | None:
        if ref.key in self._mapping:
            return self._mapping[ref.key]
        if self._known_remote_ids.get(ref.canonical_id) is ref.kind:
            return ref.canonical_id
        return None

    # --- Queries ---

    def resolve(self, ref: EntityRef) -> str:
        """Remote id if known, else a deterministic placeholder."""
        existing = self._existing_remote_id(ref)
        if existing is not None:
            return existing
        placeholder = placeholder_id(ref)
        self._placeholders[placeholder] = ref
        return placeholder

    def determine_action(self, ref: EntityRef) -> Action:
        """UPDATE when the entity already exists remotely, else CREATE."""
        if ref.key in self._mapping:
            return "UPDATE"
        resolved = self.resolve(ref)
        if resolved in self._known_remote_ids:
            return "UPDATE"
        if ref.kind is EntityKind.MODE and self.is_initial_mode(resolved):
            return "UPDATE"
        return "CREATE"

    def determine_mode_action(self, ref: EntityRef, collection_initial_mode_id: str) -> Action:
        """
        Action for a mode.

        A collection's initial mode always exists once the collection does,
        so it is updated (renamed) rather than created.
        """
        if self.resolve(ref) == collection_initial_mode_id:
            return "UPDATE"
        return self.determine_action(ref)

    def is_initial_mode(self, remote_mode_id: str) -> bool:
        return remote_mode_id in self._initial_mode_by_collection.values()

    def is_mapped(self, ref: EntityRef) -> bool:
        return ref.key in self._mapping

    # --- Mutations ---

    def bind_by_name(
        self,
        ref: EntityRef,
        name: str,
        remote_collection_id: str | None = None,
    ) -> str | None:
        """
        Bind an unmapped entity to an existing remote entity of the same name.

        Variables prefer a match inside `remote_collection_id` when given.
        Modes are never bound by name.

        Returns:
            The bound remote id, or None if nothing was bound.
        """
        if ref.kind is EntityKind.MODE:
            return None
        if self._existing_remote_id(ref) is not None:
            return None

        candidate: str | None = None
        if ref.kind is EntityKind.COLLECTION:
            candidate = self._collection_names.get(name)
        else:
            matches = [
                (remote_id, collection_id)
                for remote_id, collection_id in self._variable_names.get(name, [])
                if remote_id not in self._claimed
            ]
            scoped = [m for m in matches if m[1] == remote_collection_id]
            if scoped or matches:
                candidate = (scoped or matches)[0][0]

        if candidate is None or candidate in self._claimed:
            return None

        self._bind(ref, candidate)
        if ref.kind is EntityKind.COLLECTION and ref.canonical_id in self._default_modes:
            self._backfill_default_mode(ref.canonical_id, self._default_modes[ref.canonical_id])
        return candidate

    def merge_remote_assigned_ids(self, temp_to_real: dict[str, str]) -> int:
        """
        Record ids the remote assigned after a successful push.

        Only placeholders issued by this store are merged; each is translated
        back to the entity it stood for.
        """
        merged = 0
        for temp_id, real_id in sorted(temp_to_real.items()):
            ref = self._placeholders.get(temp_id)
            if ref is None:
                continue
            self._bind(ref, real_id)
            self._known_remote_ids[real_id] = ref.kind
            merged += 1
        return merged

    def snapshot(self) -> dict[str, str]:
        """Copy of the mapping, ready to persist."""
        return dict(sorted(self._mapping.items()))
