"""
Figma Variables API adapter.

Implements VariablesApiPort over httpx. Responses are mapped onto the
typed errors in tokensync.core.ports.remote:

- 401/403 -> VariablesApiAuthError
- 429 -> VariablesApiRateLimitError (with Retry-After when sent)
- any other non-2xx status, timeout or transport error -> VariablesApiError
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tokensync.core.ports.remote import (
    VariablesApiAuthError,
    VariablesApiError,
    VariablesApiRateLimitError,
)
from tokensync.domain.variables import PushResponse, RemoteVariablesState, VariablesPayload

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.figma.com"
TOKEN_HEADER = "X-Figma-Token"


class FigmaVariablesApi:
    """Async client for the local-variables endpoints of one account."""

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not access_token:
            raise VariablesApiAuthError("No Figma access token configured")
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={TOKEN_HEADER: self._access_token},
            timeout=self._timeout,
            transport=self._transport,
        )

    async def fetch_local_variables(self, file_key: str) -> RemoteVariablesState:
        body = await self._request("GET", f"/v1/files/{file_key}/variables/local")
        return RemoteVariablesState.from_api_response(body)

    async def push_variables(self, file_key: str, payload: VariablesPayload) -> PushResponse:
        body = await self._request(
            "POST", f"/v1/files/{file_key}/variables", json=payload.to_wire()
        )
        return PushResponse.from_api_response(body)

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise VariablesApiError(f"{method} {path} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise VariablesApiError(f"{method} {path} failed: {e}") from e

        logger.debug("%s %s -> %s", method, path, response.status_code)
        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        status_code = response.status_code
        message = str(data.get("message") or data.get("err") or response.reason_phrase)

        if status_code in (401, 403):
            raise VariablesApiAuthError(message, status_code=status_code)
        if status_code == 429:
            retry_after = None
            if "Retry-After" in response.headers:
                try:
                    retry_after = float(response.headers["Retry-After"])
                except ValueError:
                    pass
            raise VariablesApiRateLimitError(message, retry_after=retry_after)
        if status_code >= 400:
            raise VariablesApiError(message, status_code=status_code)
        if data.get("error") is True:
            raise VariablesApiError(message, status_code=status_code)
        return data
