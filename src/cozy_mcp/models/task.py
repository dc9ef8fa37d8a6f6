"""Task models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from cozy_mcp.constants import TaskLabel, TaskPriority, TaskStatus
from cozy_mcp.models.base import CozyPayload, CozyResource, ensure_aware


class Task(CozyResource):
    """A task belongs to exactly one project."""

    project_id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: Optional[TaskPriority] = None
    label: Optional[TaskLabel] = None
    due_date: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("priority", "label", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:
        return v or None

    @property
    def is_done(self) -> bool:
        return self.status in (TaskStatus.DONE, TaskStatus.CANCELED)


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _check_time_order(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and ensure_aware(end) < ensure_aware(start):
        raise ValueError("End time cannot be before start time.")


class TaskCreate(CozyPayload):
    """Body for ``POST /projects/{id}/tasks``."""

    drop_if_empty: ClassVar[frozenset[str]] = frozenset({"description", "label", "priority"})

    title: str = Field(..., min_length=1, max_length=500)
    status: TaskStatus = TaskStatus.TODO
    priority: Optional[TaskPriority] = None
    label: Optional[TaskLabel] = None
    description: Optional[str] = Field(default=None, max_length=10000)
    due_date: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("priority", "label", mode="before")
    @classmethod
    def blank_as_unset(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def check_times(self) -> TaskCreate:
        _check_time_order(self.start_time, self.end_time)
        return self

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        # status is required by the service even when left at its default
        payload.setdefault("status", self.status.value)
        return payload


class TaskUpdate(CozyPayload):
    """
    Body for ``PUT /projects/{pid}/tasks/{id}``.

    The service replaces the whole task, so the client builds it with
    ``replacing``. Built directly, only the fields set are sent.
    """

    drop_if_empty: ClassVar[frozenset[str]] = frozenset({"description", "label", "priority"})

    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    label: Optional[TaskLabel] = None
    description: Optional[str] = Field(default=None, max_length=10000)
    due_date: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("priority", "label", mode="before")
    @classmethod
    def blank_as_unset(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def check_times(self) -> TaskUpdate:
        _check_time_order(self.start_time, self.end_time)
        return self

    @classmethod
    def replacing(cls, current: BaseModel, **changes: Any) -> TaskUpdate:
        payload = super().replacing(current, **changes)
        # the service rejects an empty priority on update
        if payload.priority is None:
            payload.priority = TaskPriority.MEDIUM
        return payload


class TaskStatusUpdate(CozyPayload):
    """Body for ``PATCH /tasks/{id}/status``."""

    status: TaskStatus
