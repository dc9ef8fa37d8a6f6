"""Event models."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Optional

from pydantic import Field, model_validator

from cozy_mcp.models.base import HEX_COLOR_PATTERN, CozyPayload, CozyResource, ensure_aware


class Event(CozyResource):
    """An event belongs to exactly one calendar."""

    calendar_id: int
    user_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    color: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def occurs_on(self, day: date) -> bool:
        """True if any part of the event falls on ``day``."""
        return self.start_time.date() <= day <= self.end_time.date()

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)


def _check_event_window(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and ensure_aware(end) <= ensure_aware(start):
        raise ValueError("End date/time must be after start date/time.")


class EventCreate(CozyPayload):
    """Body for ``POST /events``."""

    drop_if_empty: ClassVar[frozenset[str]] = frozenset({"description", "location", "color"})

    calendar_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=10000)
    start_time: datetime
    end_time: datetime
    location: Optional[str] = Field(default=None, max_length=500)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)

    @model_validator(mode="after")
    def check_window(self) -> EventCreate:
        _check_event_window(self.start_time, self.end_time)
        return self


class EventUpdate(CozyPayload):
    """Body for ``PUT /events/{id}``; only set fields are sent."""

    drop_if_empty: ClassVar[frozenset[str]] = frozenset({"description", "location", "color"})

    calendar_id: Optional[int] = Field(default=None, gt=0)
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=10000)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=500)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)

    @model_validator(mode="after")
    def check_window(self) -> EventUpdate:
        _check_event_window(self.start_time, self.end_time)
        return self
