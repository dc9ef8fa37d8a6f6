"""
Session store.

Holds the bearer token and the authenticated user. Optionally persisted to
a JSON file and re-hydrated on construction; token presence alone marks the
session as authenticated after hydration.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from cozy_mcp.constants import AUTH_COOKIE_NAME
from cozy_mcp.models import User

logger = logging.getLogger(__name__)


class SessionStore:
    """Token + user for the current client."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path).expanduser() if path else None
        self.token: Optional[str] = None
        self.user: Optional[User] = None
        if self.path is not None:
            self._hydrate(self.path)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def get_token(self) -> Optional[str]:
        return self.token

    def set_auth(self, token: str, user: User) -> None:
        self.token = token
        self.user = user
        self._persist()
        logger.info("Session started for user %s", user.id)

    def set_user(self, user: User) -> None:
        self.user = user
        self._persist()

    def clear_auth(self) -> None:
        self.token = None
        self.user = None
        if self.path is not None and self.path.exists():
            self.path.unlink()
        logger.info("Session cleared")

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def cookies(self) -> dict[str, str]:
        """Cookies a request would carry, as seen by the route gate."""
        return {AUTH_COOKIE_NAME: self.token} if self.token else {}

    def _persist(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "token": self.token,
            "user": self.user.model_dump(mode="json") if self.user else None,
        }
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def _hydrate(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            token = data.get("token") or None
            user = User.model_validate(data["user"]) if data.get("user") else None
        except (OSError, ValueError, AttributeError, ValidationError) as e:
            # a corrupt file must not leave a half-authenticated session
            logger.error("Could not restore session from %s: %s", path, e)
            return
        self.token = token
        self.user = user
        logger.debug("Session restored (authenticated=%s)", self.is_authenticated)
