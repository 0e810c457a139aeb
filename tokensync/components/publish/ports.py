"""
Publish component - Port interfaces.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from tokensync.domain.variables import PushResponse, RemoteVariablesState, VariablesPayload


class VariablesApiPort(Protocol):
    """Vendor Variables API. Raises VariablesApiError on failure."""

    async def fetch_local_variables(self, file_key: str) -> RemoteVariablesState:
        """Fetch existing variables, collections and modes of a file."""
        ...

    async def push_variables(self, file_key: str, payload: VariablesPayload) -> PushResponse:
        """Push the generated graph; returns remote ids assigned to created entities."""
        ...


class MappingStorePort(Protocol):
    """Persisted identity mapping, one document per remote file."""

    def load(self, file_key: str) -> dict[str, str]:
        """Load the mapping; empty when none exists yet."""
        ...

    def save(self, file_key: str, mapping: dict[str, str]) -> Path:
        """Overwrite the mapping; returns where it was written."""
        ...


class ChangeRecorderPort(Protocol):
    """Records a mapping change as an auditable entry (e.g. a commit)."""

    def record(self, path: Path, file_key: str) -> bool:
        """Record the change; False when there was nothing to record."""
        ...
