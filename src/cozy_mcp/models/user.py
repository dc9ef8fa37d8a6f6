"""User and authentication models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cozy_mcp.models.base import CozyPayload, CozyResource

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class User(CozyResource):
    """Authenticated principal."""

    email: str
    username: str = ""

    @property
    def display_name(self) -> str:
        return self.username or self.email


class AuthResponse(BaseModel):
    """Body returned by ``POST /login``."""

    model_config = ConfigDict(extra="ignore")

    token: str = Field(..., min_length=1)
    user: User

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> AuthResponse:
        return cls.model_validate(data)


class LoginPayload(CozyPayload):
    """Credentials for ``POST /login``."""

    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    password: str = Field(..., min_length=1)


class RegisterPayload(CozyPayload):
    """Account data for ``POST /register``."""

    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    password: str = Field(..., min_length=6, max_length=200)
