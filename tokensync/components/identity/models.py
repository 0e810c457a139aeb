"""
Identity component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from tokensync.domain.variables import RemoteVariablesState


class EntityKind(Enum):
    """Kind of a generated entity; carried alongside every canonical id."""

    COLLECTION = "collection"
    MODE = "mode"
    VARIABLE = "variable"


@dataclass(frozen=True)
class EntityRef:
    """A canonical id tagged with its entity kind."""

    kind: EntityKind
    canonical_id: str

    @classmethod
    def collection(cls, canonical_id: str) -> EntityRef:
        return cls(EntityKind.COLLECTION, canonical_id)

    @classmethod
    def mode(cls, canonical_id: str) -> EntityRef:
        return cls(EntityKind.MODE, canonical_id)

    @classmethod
    def variable(cls, canonical_id: str) -> EntityRef:
        return cls(EntityKind.VARIABLE, canonical_id)

    @property
    def key(self) -> str:
        """Persisted mapping key: `<kind>:<canonical id>`."""
        return f"{self.kind.value}:{self.canonical_id}"

    @classmethod
    def from_key(cls, key: str) -> EntityRef | None:
        """Parse a persisted mapping key; None for keys without a kind tag."""
        kind, sep, canonical_id = key.partition(":")
        if not sep or not canonical_id:
            return None
        try:
            return cls(EntityKind(kind), canonical_id)
        except ValueError:
            return None


# --- Input Models ---


@dataclass(frozen=True)
class InitializeIdentityInput:
    """Input for initializing the identity store for one run."""

    remote_state: RemoteVariablesState
    persisted_mapping: dict[str, str] = field(default_factory=dict)
    # canonical collection id -> canonical id of its default mode
    default_modes: dict[str, str] = field(default_factory=dict)


# --- Output Models ---


@dataclass(frozen=True)
class InitializeReport:
    """What happened to the persisted mapping while loading it."""

    loaded: int
    pruned: tuple[str, ...]
    backfilled: tuple[str, ...]
    # untagged keys from older mapping files, re-keyed by their remote kind
    migrated: tuple[str, ...] = ()


@dataclass(frozen=True)
class IdentityOutput:
    """Output from identity initialization."""

    mapping: dict[str, str]
    report: InitializeReport
