"""Calendar models."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from pydantic import Field

from cozy_mcp.models.base import HEX_COLOR_PATTERN, CozyPayload, CozyResource


class Calendar(CozyResource):
    """A calendar owns events."""

    user_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CalendarCreate(CozyPayload):
    """Body for ``POST /calendars``."""

    drop_if_empty: ClassVar[frozenset[str]] = frozenset({"description", "color"})

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)


class CalendarUpdate(CozyPayload):
    """Body for ``PUT /calendars/{id}``."""

    drop_if_empty: ClassVar[frozenset[str]] = frozenset({"description", "color"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
