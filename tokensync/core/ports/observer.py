"""
Diagnostic Observer Interface.

Protocol-based sink for the diagnostics the transformation core emits.
The core never logs directly; it reports through an injected observer so
that its output stays a pure function of its inputs and mapping state.

Key requirements:
- Warnings carry a machine-readable code plus a human-readable message
- Observers must not raise; a failing sink must never abort a run
- Collected warnings are also returned on the transform result

Implementations:
1. LoggingObserver: forwards to the stdlib logging module
2. CollectingObserver: keeps records in memory, optionally forwarding
3. NullObserver: discards everything (tests, embedded use)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class TransformWarning:
    """One recovered per-entity problem."""

    code: str
    message: str
    entity_id: str | None = None
    context: dict[str, Any] = field(default_factory=dict)


class TransformObserverPort(Protocol):
    """Sink for diagnostics raised while transforming or publishing."""

    def warn(self, code: str, message: str, **context: Any) -> None:
        """Report a recovered problem (tier 2)."""
        ...

    def info(self, message: str, **context: Any) -> None:
        """Report progress."""
        ...


class NullObserver:
    """Observer that discards everything."""

    def warn(self, code: str, message: str, **context: Any) -> None:
        pass

    def info(self, message: str, **context: Any) -> None:
        pass


class CollectingObserver:
    """
    Observer that records warnings and forwards them to another sink.

    Used by the transformation driver to attach warnings to its result.
    """

    def __init__(self, forward: TransformObserverPort | None = None) -> None:
        self._forward = forward
        self.warnings: list[TransformWarning] = []

    def warn(self, code: str, message: str, **context: Any) -> None:
        entity_id = context.get("entity_id")
        self.warnings.append(
            TransformWarning(
                code=code,
                message=message,
                entity_id=str(entity_id) if entity_id is not None else None,
                context=dict(context),
            )
        )
        if self._forward is not None:
            self._forward.warn(code, message, **context)

    def info(self, message: str, **context: Any) -> None:
        if self._forward is not None:
            self._forward.info(message, **context)
