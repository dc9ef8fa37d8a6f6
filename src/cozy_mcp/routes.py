"""
Request-time route gate.

Protected pages need the session cookie; login/register are only for
visitors without one. The decision depends on the cookie alone, not on
the token's validity, which the services check on every call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlencode

from cozy_mcp.constants import (
    AUTH_COOKIE_NAME,
    DEFAULT_AUTHENTICATED_PATH,
    LOGIN_PATH,
    PROTECTED_PATHS,
    PUBLIC_ONLY_PATHS,
    REDIRECT_PARAM,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteDecision:
    """Allow the request, or redirect to ``location``."""

    allowed: bool
    location: Optional[str] = None


def _matches(path: str, prefixes: tuple[str, ...]) -> bool:
    return any(path == p or path.startswith(p + "/") for p in prefixes)


def gate_route(path: str, cookies: Mapping[str, str]) -> RouteDecision:
    """Decide whether ``path`` may be served given the request cookies."""
    has_session = bool(cookies.get(AUTH_COOKIE_NAME))

    if _matches(path, PROTECTED_PATHS) and not has_session:
        location = f"{LOGIN_PATH}?{urlencode({REDIRECT_PARAM: path})}"
        logger.info("No session for protected path %s, redirecting to login", path)
        return RouteDecision(False, location)

    if _matches(path, PUBLIC_ONLY_PATHS) and has_session:
        logger.info("Session present for public-only path %s, redirecting", path)
        return RouteDecision(False, DEFAULT_AUTHENTICATED_PATH)

    return RouteDecision(True)
