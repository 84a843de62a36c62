"""Shared HTTP plumbing for the backend API clients."""

import logging
from typing import Any, Dict, Optional

import httpx

from flowbridge.utils.config import get_api_base_url, get_http_timeout
from flowbridge.utils.errors import AdapterError

logger = logging.getLogger(__name__)


class BackendClient:
    """Thin async JSON client for the automation backend.

    Every backend endpoint answers with ``{"success": bool, ...}``. With
    ``check=True`` a falsy ``success`` is turned into an :class:`AdapterError`
    carrying the backend's ``error`` or ``message``.

    Args:
        base_url: API root, defaults to ``FLOWBRIDGE_API_URL``
        timeout_seconds: Per-request timeout, defaults to ``FLOWBRIDGE_HTTP_TIMEOUT``
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or get_api_base_url()).rstrip("/")
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else get_http_timeout()
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self.transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        check: bool = True,
    ) -> Dict[str, Any]:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP method
            path: Path relative to the API root
            json_body: Optional JSON payload
            check: Raise AdapterError when ``success`` is falsy

        Returns:
            Decoded JSON object

        Raises:
            AdapterError: On transport errors, non-JSON bodies, or failed checks
        """
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json_body)
        except httpx.HTTPError as e:
            raise AdapterError(f"{method} {path} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise AdapterError(
                f"{method} {path} returned non-JSON response (status {response.status_code})"
            ) from e

        if not isinstance(data, dict):
            raise AdapterError(f"{method} {path} returned unexpected payload: {data!r}")

        if check and not data.get("success"):
            reason = data.get("error") or data.get("message") or "Unknown error"
            raise AdapterError(f"{method} {path} failed: {reason}")

        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url='{self.base_url}')"
