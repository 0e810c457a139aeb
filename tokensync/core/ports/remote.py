"""
Remote Boundary Errors.

Exceptions raised by the adapters behind the publish workflow. The
orchestrator converts them to structured error codes; nothing above it
sees a raw exception.

Key requirements:
- Transport and remote failures are distinguishable by status code
- Mapping store failures never leave a half-written file behind
- Change recording failures are reported but never fatal
"""

from __future__ import annotations


class VariablesApiError(Exception):
    """Base exception for vendor Variables API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message if status_code is None else f"[{status_code}] {message}")


class VariablesApiAuthError(VariablesApiError):
    """Raised when the access token is missing or rejected."""

    pass


class VariablesApiRateLimitError(VariablesApiError):
    """Raised when the remote throttles requests."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message, status_code=429)


class MappingStoreError(Exception):
    """Raised when the persisted mapping cannot be read or written."""

    def __init__(self, file_key: str, message: str) -> None:
        self.file_key = file_key
        super().__init__(f"Mapping for '{file_key}': {message}")


class ChangeRecordError(Exception):
    """Raised when recording the mapping change in version control fails."""

    pass
