"""Auth service client: ``/login``, ``/register``, ``/me``."""

from __future__ import annotations

import logging

from cozy_mcp.exceptions import CozyAPIError
from cozy_mcp.api.base import BaseServiceClient
from cozy_mcp.models import AuthResponse, LoginPayload, RegisterPayload, User

logger = logging.getLogger(__name__)


class AuthServiceClient(BaseServiceClient):
    """Client for the authentication service."""

    service_name = "auth"

    async def login(self, payload: LoginPayload) -> AuthResponse:
        """
        Exchange credentials for a bearer token.

        Raises:
            CozyAuthenticationError: wrong credentials
            CozyAPIError: the response is missing the token or user
        """
        data = await self._request("POST", "/login", json=payload.to_payload(), authenticated=False)
        if not isinstance(data, dict) or not data.get("token") or not data.get("user"):
            raise CozyAPIError("Invalid response structure from login API", service=self.service_name)
        auth = AuthResponse.from_api(data)
        logger.info("Login successful for user %s", auth.user.id)
        return auth

    async def register(self, payload: RegisterPayload) -> str:
        """Create an account. Returns the service's confirmation message."""
        data = await self._request("POST", "/register", json=payload.to_payload(), authenticated=False)
        if isinstance(data, dict) and isinstance(data.get("message"), str):
            return data["message"]
        return "Registration successful"

    async def me(self) -> User:
        """Get the user the current token belongs to."""
        data = await self._request("GET", "/me")
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        return User.from_api(data)
