"""
Cache invalidation router.

Maps a completed mutation to the query keys it made stale. Nothing is
patched locally: the affected queries are marked stale and the next read
refetches them.

Routing table:
    task      -> ("tasks", project_id)
    event     -> ("events", calendar_id) and every events range query
    project   -> ("projects",); delete also -> ("tasks", project_id)
    calendar  -> ("calendars",); delete also -> ("events", calendar_id)
                 and every events range query
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from cozy_mcp.state import query_keys as qk
from cozy_mcp.state.query_cache import QueryCache
from cozy_mcp.state.query_keys import QueryKey

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    PROJECT = "project"
    TASK = "task"
    CALENDAR = "calendar"
    EVENT = "event"


def parent_id_of(kind: EntityKind, entity: Any) -> Optional[int]:
    if kind == EntityKind.TASK:
        return entity.project_id
    if kind == EntityKind.EVENT:
        return entity.calendar_id
    return None


class CacheInvalidationRouter:
    """Invalidate the right queries after create/update/delete."""

    def __init__(self, cache: QueryCache) -> None:
        self.cache = cache

    def _events_of(self, calendar_id: int) -> list[QueryKey]:
        return self.cache.invalidate(qk.events(calendar_id)) + self.cache.invalidate(qk.events_ranges())

    def _collection(self, kind: EntityKind, parent_id: Optional[int]) -> list[QueryKey]:
        if kind == EntityKind.PROJECT:
            return self.cache.invalidate(qk.projects())
        if kind == EntityKind.CALENDAR:
            return self.cache.invalidate(qk.calendars())
        if parent_id is None:
            raise ValueError(f"{kind.value} invalidation needs the parent id")
        if kind == EntityKind.TASK:
            return self.cache.invalidate(qk.tasks(parent_id))
        return self._events_of(parent_id)

    def _detail(self, kind: EntityKind, entity_id: int) -> QueryKey:
        return {
            EntityKind.PROJECT: qk.project,
            EntityKind.TASK: qk.task,
            EntityKind.CALENDAR: qk.calendar,
            EntityKind.EVENT: qk.event,
        }[kind](entity_id)

    def created(self, kind: EntityKind, entity: Any) -> list[QueryKey]:
        """Invalidate the owning list of a new entity."""
        stale = self._collection(kind, parent_id_of(kind, entity))
        logger.debug("Created %s %s; stale: %s", kind.value, entity.id, stale)
        return stale

    def updated(self, kind: EntityKind, entity: Any, previous_parent_id: Optional[int] = None) -> list[QueryKey]:
        """
        Invalidate the owning list and the entity's own detail query.

        ``previous_parent_id`` covers an event moved to another calendar or
        a task moved to another project: the old list is stale too.
        """
        parent_id = parent_id_of(kind, entity)
        stale = self._collection(kind, parent_id)
        stale += self.cache.invalidate(self._detail(kind, entity.id))
        if previous_parent_id is not None and previous_parent_id != parent_id:
            stale += self._collection(kind, previous_parent_id)
        logger.debug("Updated %s %s; stale: %s", kind.value, entity.id, stale)
        return stale

    def deleted(self, kind: EntityKind, entity_id: int, parent_id: Optional[int] = None) -> list[QueryKey]:
        """
        Invalidate after a delete.

        Deleting a project or calendar also invalidates its child list,
        since the backend cascades the delete. ``parent_id`` is required
        for tasks and events.
        """
        stale = self._collection(kind, parent_id)
        if kind == EntityKind.PROJECT:
            stale += self.cache.invalidate(qk.tasks(entity_id))
        elif kind == EntityKind.CALENDAR:
            stale += self._events_of(entity_id)
        self.cache.remove(self._detail(kind, entity_id))
        logger.debug("Deleted %s %s; stale: %s", kind.value, entity_id, stale)
        return stale
