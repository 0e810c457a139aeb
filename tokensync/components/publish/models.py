"""
Publish component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tokensync.components.transform import TransformOutput
from tokensync.components.values import ColorProfile
from tokensync.domain.entities import TokenSystem


@dataclass(frozen=True)
class PublishError:
    """Publish failure with a machine-readable code."""

    code: str
    message: str


# --- Input Models ---


@dataclass(frozen=True)
class PublishInput:
    """Input for one publish run against a remote file."""

    file_key: str
    token_system: TokenSystem | dict[str, Any]
    color_profile: ColorProfile = ColorProfile.SRGB
    naming_platform: str = "Figma"
    record_changes: bool = True


# --- Output Models ---


@dataclass(frozen=True)
class PublishOutput:
    """Output from a publish run."""

    success: bool
    result: TransformOutput | None = None
    mapping: dict[str, str] = field(default_factory=dict)
    mapping_path: Path | None = None
    pruned: tuple[str, ...] = ()
    merged: int = 0
    recorded: bool = False
    error: PublishError | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "result": self.result.to_dict() if self.result else None,
            "mappingPath": str(self.mapping_path) if self.mapping_path else None,
            "pruned": list(self.pruned),
            "merged": self.merged,
            "recorded": self.recorded,
            "error": (
                {"code": self.error.code, "message": self.error.message}
                if self.error
                else None
            ),
        }
