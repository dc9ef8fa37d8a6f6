"""
Centralized query keys.

Keys are tuples; invalidation matches on tuple prefixes, so every key for a
collection starts with the collection name.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from cozy_mcp.models import format_rfc3339

QueryKey = tuple[Any, ...]

EVENTS_RANGE = "range"


def projects() -> QueryKey:
    return ("projects",)


def project(project_id: int) -> QueryKey:
    return ("project", project_id)


def tasks(project_id: int) -> QueryKey:
    return ("tasks", project_id)


def task(task_id: int) -> QueryKey:
    return ("task", task_id)


def calendars() -> QueryKey:
    return ("calendars",)


def calendar(calendar_id: int) -> QueryKey:
    return ("calendar", calendar_id)


def events(calendar_id: int) -> QueryKey:
    return ("events", calendar_id)


def event(event_id: int) -> QueryKey:
    return ("event", event_id)


def events_range(calendar_ids: Iterable[int], start: datetime, end: datetime) -> QueryKey:
    """Events of several calendars in a window; ids sorted for a stable key."""
    return ("events", EVENTS_RANGE, tuple(sorted(set(calendar_ids))), format_rfc3339(start), format_rfc3339(end))


def events_ranges() -> QueryKey:
    """Prefix of every multi-calendar range key."""
    return ("events", EVENTS_RANGE)


def me() -> QueryKey:
    return ("me",)
