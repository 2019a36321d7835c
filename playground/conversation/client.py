"""Shared httpx plumbing for clients of the playground API."""

import logging
from typing import Any

import httpx

from playground.errors import PlaygroundError

logger = logging.getLogger(__name__)


def error_message(response: httpx.Response) -> str:
    """Extract a human-readable message from an error response.

    Understands the `{"error": ...}` envelope and FastAPI's `{"detail": ...}`.
    """
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("error", "detail"):
            if isinstance(data.get(key), str) and data[key]:
                return data[key]
    return f"HTTP {response.status_code}"


class ApiClient:
    """Base class for async clients of the playground HTTP API.

    Args:
        base_url: Root URL of the API.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport, e.g. `httpx.ASGITransport` to
            talk to an in-process app.
    """

    error_cls: type[PlaygroundError] = PlaygroundError

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            error_cls: On connection failure, timeout, error status, or a
                body that is not JSON.
        """
        async with self._client() as client:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TimeoutException as e:
                raise self.error_cls(f"Request timed out after {self._timeout:.0f}s") from e
            except httpx.RequestError as e:
                raise self.error_cls(f"Connection failed: {e}") from e

        if response.is_error:
            raise self.error_cls(error_message(response))
        try:
            return response.json()
        except ValueError as e:
            raise self.error_cls(f"Malformed response from {path}") from e
