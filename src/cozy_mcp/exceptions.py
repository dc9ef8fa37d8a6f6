"""
Cozy Client Exceptions.

All errors raised by the client derive from CozyError so callers can
catch the whole family at once.

Hierarchy:
    CozyError
    ├── CozyConfigurationError   (missing settings, API not initialized)
    ├── CozyValidationError      (client-side payload validation)
    ├── CozyTransportError       (network / timeout)
    └── CozyAPIError             (non-2xx HTTP response)
        ├── CozyAuthenticationError  (401 / 403)
        ├── CozyNotFoundError        (404)
        └── CozyRateLimitError       (429)
"""

from __future__ import annotations

from typing import Any


class CozyError(Exception):
    """Base exception for all Cozy client errors."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class CozyConfigurationError(CozyError):
    """Raised when the client is misconfigured or used before initialization."""


class CozyValidationError(CozyError):
    """
    Raised when a payload fails client-side validation.

    Always raised before any network call is made. ``errors`` maps a field
    name (or ``"__root__"``) to its message so it can be reported inline.
    """

    def __init__(self, message: str, errors: dict[str, str] | None = None, **details: Any) -> None:
        super().__init__(message, **details)
        self.errors = errors or {}

    @classmethod
    def from_pydantic(cls, exc: Any) -> CozyValidationError:
        """Build from a pydantic ValidationError."""
        errors: dict[str, str] = {}
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
            msg = str(err.get("msg", "invalid value"))
            # pydantic prefixes messages raised from validators
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            errors.setdefault(loc, msg)
        summary = "; ".join(f"{k}: {v}" for k, v in errors.items())
        return cls(f"Invalid input: {summary}", errors=errors)


class CozyTransportError(CozyError):
    """Raised when the request never produced an HTTP response."""


class CozyAPIError(CozyError):
    """Raised when a backend service answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        service: str | None = None,
        **details: Any,
    ) -> None:
        super().__init__(message, **details)
        self.status_code = status_code
        self.service = service

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


class CozyAuthenticationError(CozyAPIError):
    """Raised on 401/403 responses or when no session token is available."""


class CozyNotFoundError(CozyAPIError):
    """Raised when the requested resource does not exist."""


class CozyRateLimitError(CozyAPIError):
    """Raised on 429 responses."""
