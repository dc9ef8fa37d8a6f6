"""
Base HTTP client shared by the service clients.

Each backend service has its own base URL; the request/response plumbing
(bearer header, JSON decoding, error mapping) lives here once.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Callable, TypeVar

import httpx

from cozy_mcp.exceptions import (
    CozyAPIError,
    CozyAuthenticationError,
    CozyNotFoundError,
    CozyRateLimitError,
    CozyTransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseServiceClient")

TokenProvider = Callable[[], "str | None"]


def extract_error_message(response: httpx.Response) -> str:
    """
    Best-effort server message for a failed response.

    The services answer either ``{"message": ...}`` / ``{"error": ...}``
    JSON or a plain-text body from ``http.Error``.
    """
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text or response.reason_phrase or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        for key in ("message", "error", "detail"):
            if isinstance(data.get(key), str) and data[key]:
                return data[key]
    return response.reason_phrase or f"HTTP {response.status_code}"


def raise_for_response(response: httpx.Response, service: str) -> None:
    """Map a non-2xx response to the matching CozyAPIError subclass."""
    if response.is_success:
        return

    status = response.status_code
    message = extract_error_message(response)

    if status in (401, 403):
        raise CozyAuthenticationError(message, status_code=status, service=service)
    if status == 404:
        raise CozyNotFoundError(message, status_code=status, service=service)
    if status == 429:
        raise CozyRateLimitError(message, status_code=status, service=service)
    raise CozyAPIError(message, status_code=status, service=service)


class BaseServiceClient:
    """
    Async JSON client for one backend service.

    Args:
        base_url: Service root, e.g. ``http://localhost:8081``
        token_provider: Returns the current bearer token, or None
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    service_name = "service"

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self: T) -> T:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _auth_headers(self, authenticated: bool) -> dict[str, str]:
        if not authenticated:
            return {}
        token = self._token_provider() if self._token_provider else None
        if not token:
            raise CozyAuthenticationError(
                "Not logged in: no session token available",
                status_code=401,
                service=self.service_name,
            )
        return {"Authorization": f"Bearer {token}"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Send a request and return the decoded JSON body (None when empty).

        Raises:
            CozyTransportError: the request never got a response
            CozyAPIError: the response status was not 2xx
        """
        headers = self._auth_headers(authenticated)
        logger.debug("%s %s %s", self.service_name, method, path)

        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise CozyTransportError(
                f"{self.service_name} request timed out: {method} {path}",
                service=self.service_name,
            ) from e
        except httpx.TransportError as e:
            raise CozyTransportError(
                f"{self.service_name} unreachable: {e}",
                service=self.service_name,
            ) from e

        if not response.is_success:
            logger.warning(
                "%s %s %s failed with status %s",
                self.service_name,
                method,
                path,
                response.status_code,
            )
        raise_for_response(response, self.service_name)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # some handlers answer 2xx with a plain-text confirmation
            return response.text
