"""
HTTP transport: owns the httpx.AsyncClient and decodes response envelopes.
"""

import logging
from typing import Any, Optional

import httpx

from snowflake_rest.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class HttpClient:
    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = DEFAULT_TIMEOUT):
        self._timeout = timeout
        self._client = client
        self._owned: Optional[httpx.AsyncClient] = None
        self._used = False

    @property
    def client(self) -> httpx.AsyncClient:
        # The default client is only created when no replacement was supplied first.
        if self._client is None:
            self._client = self._owned = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def set_http_client(self, client: httpx.AsyncClient) -> None:
        """Replace the underlying client. Must happen before any request is sent.

        `close()` closes the replacement as well as any default client created
        before it.
        """
        if client is None:
            raise ValueError("HttpClient cannot be null.")
        if self._used:
            logger.warning("Replacing the HTTP client after requests were already sent")
        self._client = client

    def build_request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, str]] = None,
        body: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Request:
        return self.client.build_request(method, url, params=params, json=body, headers=headers)

    async def send(self, request: httpx.Request) -> dict[str, Any]:
        self._used = True
        logger.debug("%s %s", request.method, request.url.path)
        resp = await self.client.send(request)
        if resp.status_code >= 400:
            raise TransportError(
                "http_error", f"HTTP {resp.status_code}: {resp.text[:200]}", {"status_code": resp.status_code},
            )
        try:
            payload = resp.json()
        except ValueError as e:
            raise TransportError("invalid_response", f"Response is not valid JSON: {e}")
        if not isinstance(payload, dict):
            raise TransportError("invalid_response", "Response envelope is not a JSON object")
        return payload

    async def close(self) -> None:
        if self._owned is not None and self._owned is not self._client:
            await self._owned.aclose()
        if self._client is not None:
            await self._client.aclose()
