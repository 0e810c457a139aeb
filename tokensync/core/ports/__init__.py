# tokensync - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from tokensync.core.ports.observer import (
    CollectingObserver,
    NullObserver,
    TransformObserverPort,
    TransformWarning,
)
from tokensync.core.ports.remote import (
    ChangeRecordError,
    MappingStoreError,
    VariablesApiAuthError,
    VariablesApiError,
    VariablesApiRateLimitError,
)

__all__ = [
    # Observer
    "CollectingObserver",
    "NullObserver",
    "TransformObserverPort",
    "TransformWarning",
    # Remote boundary errors
    "ChangeRecordError",
    "MappingStoreError",
    "VariablesApiAuthError",
    "VariablesApiError",
    "VariablesApiRateLimitError",
]
