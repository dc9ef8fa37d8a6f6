"""
Client-side task table filtering and sorting.

The task service returns every task of a project; narrowing by status,
priority, label or title text and ordering the rows happens here.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cozy_mcp.constants import TaskLabel, TaskPriority, TaskStatus
from cozy_mcp.models import Task
from cozy_mcp.models.base import ensure_aware


class TaskSortField(str, Enum):
    TITLE = "title"
    STATUS = "status"
    PRIORITY = "priority"
    DUE_DATE = "due_date"
    CREATED_AT = "created_at"


_STATUS_ORDER = {status: index for index, status in enumerate(TaskStatus)}


class TaskFilters(BaseModel):
    """
    Faceted filters for one task table.

    Empty facet sets match everything. ``search`` is a case-insensitive
    substring match on the title.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    statuses: set[TaskStatus] = Field(default_factory=set)
    priorities: set[TaskPriority] = Field(default_factory=set)
    labels: set[TaskLabel] = Field(default_factory=set)
    search: Optional[str] = None
    sort_by: Optional[TaskSortField] = None
    descending: bool = False

    @field_validator("search")
    @classmethod
    def empty_search(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def matches(self, task: Task) -> bool:
        if self.statuses and task.status not in self.statuses:
            return False
        if self.priorities and task.priority not in self.priorities:
            return False
        if self.labels and task.label not in self.labels:
            return False
        if self.search and self.search.casefold() not in task.title.casefold():
            return False
        return True


def _sort_value(task: Task, field: TaskSortField) -> Any:
    if field == TaskSortField.TITLE:
        return task.title.casefold()
    if field == TaskSortField.STATUS:
        return _STATUS_ORDER[task.status]
    if field == TaskSortField.PRIORITY:
        return task.priority.rank if task.priority else None
    value: Optional[datetime] = getattr(task, field.value)
    return ensure_aware(value) if value is not None else None


def filter_tasks(tasks: Iterable[Task], filters: Optional[TaskFilters] = None) -> list[Task]:
    """
    Apply ``filters`` to ``tasks``.

    Without a sort field the server order is kept. Tasks missing the sort
    value (no priority, no due date) always come last.
    """
    if filters is None:
        return list(tasks)

    rows = [task for task in tasks if filters.matches(task)]
    if filters.sort_by is None:
        return rows

    present = [t for t in rows if _sort_value(t, filters.sort_by) is not None]
    missing = [t for t in rows if _sort_value(t, filters.sort_by) is None]
    present.sort(key=lambda t: (_sort_value(t, filters.sort_by), t.id), reverse=filters.descending)
    return present + missing
