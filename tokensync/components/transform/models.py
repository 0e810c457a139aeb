"""
Transform component - Data models.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from tokensync.components.values import ColorProfile
from tokensync.core.ports.observer import TransformWarning
from tokensync.domain.entities import TokenSystem
from tokensync.domain.variables import (
    RemoteVariablesState,
    Variable,
    VariableCollection,
    VariableMode,
    VariableModeValue,
    VariablesPayload,
)


@dataclass(frozen=True)
class TransformerInfo:
    """Identifies this transformer to the export UI."""

    id: str
    display_name: str
    version: str
    description: str


TRANSFORMER_INFO = TransformerInfo(
    id="figma-variables",
    display_name="Figma Variables",
    version="1.0.0",
    description="Transforms a token system into Figma variables, collections and modes",
)


# --- Validation Errors ---


@dataclass(frozen=True)
class TransformValidationError:
    """Structural problem with the input token system."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class TransformError:
    """Run-level failure with a machine-readable code."""

    code: str
    message: str
    details: tuple[TransformValidationError, ...] = ()


# --- Input Models ---


@dataclass(frozen=True)
class TransformInput:
    """Input for one transformation run."""

    token_system: TokenSystem | dict[str, Any]
    remote_state: RemoteVariablesState = field(default_factory=RemoteVariablesState.empty)
    persisted_mapping: dict[str, str] = field(default_factory=dict)
    color_profile: ColorProfile = ColorProfile.SRGB
    naming_platform: str = "Figma"


# --- Output Models ---


@dataclass(frozen=True)
class TransformStats:
    """Action counts of one run."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    collections_created: int = 0
    collections_updated: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "deleted": self.deleted,
            "collectionsCreated": self.collections_created,
            "collectionsUpdated": self.collections_updated,
        }


@dataclass(frozen=True)
class TransformOutput:
    """Output from a transformation run."""

    success: bool
    variables: tuple[Variable, ...] = ()
    collections: tuple[VariableCollection, ...] = ()
    modes: tuple[VariableMode, ...] = ()
    mode_values: tuple[VariableModeValue, ...] = ()
    stats: TransformStats = field(default_factory=TransformStats)
    warnings: tuple[TransformWarning, ...] = ()
    errors: tuple[TransformValidationError, ...] = ()
    error: TransformError | None = None
    # Identity mapping after load, prune and name binding
    mapping: dict[str, str] = field(default_factory=dict)
    pruned: tuple[str, ...] = ()

    def payload(self) -> VariablesPayload:
        """Body for the vendor `POST variables` call."""
        return VariablesPayload(
            variable_collections=list(self.collections),
            variable_modes=list(self.modes),
            variables=list(self.variables),
            variable_mode_values=list(self.mode_values),
        )

    def to_dict(self) -> dict[str, Any]:
        """Result object handed to the export UI."""
        return {
            "success": self.success,
            **self.payload().to_wire(),
            "stats": self.stats.to_dict(),
            "warnings": [
                {"code": w.code, "message": w.message, "entityId": w.entity_id}
                for w in self.warnings
            ],
            "errors": [asdict(e) for e in self.errors],
            "error": (
                {"code": self.error.code, "message": self.error.message}
                if self.error
                else None
            ),
        }
