"""
Shared plumbing for the upstream HTTP clients (n8n, Close CRM).
"""

from typing import Any, Dict, Optional

import httpx

from error_monitor.utils.logging import get_logger
from error_monitor.utils.metrics import track_api_call
from error_monitor.utils.resilience import TransientError, retry_with_backoff


logger = get_logger(__name__)


class UpstreamError(Exception):
    """Base exception for failed upstream API calls."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamNotConfiguredError(UpstreamError):
    """Raised when credentials for an upstream API are missing."""
    pass


class TransientUpstreamError(UpstreamError, TransientError):
    """Transport failure or 5xx response; retried with backoff."""
    pass


class UpstreamClient:
    """
    Thin JSON-over-HTTP client with retries and call logging.

    Subclasses set ``service`` and supply base URL, headers and auth.
    """

    service = "upstream"

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[httpx.Auth] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        base_delay: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root, without trailing slash
            headers: Headers sent with every request
            auth: httpx auth for every request
            timeout: Per-request timeout in seconds
            max_retries: Attempts for transient failures
            base_delay: Initial backoff delay in seconds
            transport: Custom httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            headers={"Content-Type": "application/json", **(headers or {})},
            auth=auth,
            timeout=timeout,
            transport=transport,
        )
        self._get_json = retry_with_backoff(
            max_retries=max(max_retries, 1),
            base_delay=base_delay,
            exceptions=(TransientUpstreamError,),
        )(self._request_json)

    async def close(self) -> None:
        await self._client.aclose()

    async def _request_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET ``path`` and decode the JSON body.

        Raises:
            TransientUpstreamError: Transport failure or 5xx response
            UpstreamError: Any other non-2xx response or undecodable body
        """
        url = f"{self.base_url}{path}"

        async with track_api_call(self.service, path, "GET", logger) as call:
            try:
                response = await self._client.get(url, params=params)
            except httpx.TransportError as e:
                raise TransientUpstreamError(f"{self.service} request to {path} failed: {e}") from e

            call["status_code"] = response.status_code

            if response.status_code >= 500:
                raise TransientUpstreamError(
                    f"{self.service} returned {response.status_code}: {response.text}",
                    status_code=response.status_code,
                )
            if response.status_code >= 400:
                raise UpstreamError(
                    f"{self.service} returned {response.status_code}: {response.text}",
                    status_code=response.status_code,
                )

            try:
                return response.json()
            except ValueError as e:
                raise UpstreamError(
                    f"{self.service} returned a non-JSON body for {path}",
                    status_code=response.status_code,
                ) from e


def extract_collection(data: Any, *keys: str) -> list:
    """
    Pull the list out of a response that may be a bare list or wrap it
    under one of ``keys``.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), list):
                return data[key]
    return []
