"""
Pydantic Input Models for Cozy MCP Tools.

This module defines the input validation models used by the MCP tools.
Dates and times are accepted as ISO 8601 strings and parsed by the tool.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cozy_mcp.client.task_table import TaskSortField
from cozy_mcp.constants import CalendarViewMode, TaskLabel, TaskPriority, TaskStatus


class ResponseFormat(str, Enum):
    """Output format for tool responses."""

    MARKDOWN = "markdown"
    JSON = "json"


class BaseMCPInput(BaseModel):
    """Base input model with common configuration."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )


def _check_iso_datetime(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return v
    datetime.fromisoformat(v)
    return v


HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


# =============================================================================
# Auth Input Models
# =============================================================================


class LoginInput(BaseMCPInput):
    """Input for logging in."""

    email: str = Field(..., description="Account email", min_length=3, max_length=254)
    password: str = Field(..., description="Account password", min_length=1)


class RegisterInput(BaseMCPInput):
    """Input for creating an account."""

    username: str = Field(..., description="Display username", min_length=1, max_length=100)
    email: str = Field(..., description="Account email", min_length=3, max_length=254)
    password: str = Field(..., description="Password (at least 6 characters)", min_length=6)


class NavigateInput(BaseMCPInput):
    """Input for opening a page through the route gate."""

    path: str = Field(
        ...,
        description="Page path, optionally with a query (e.g., '/tasks?projectId=2')",
        pattern=r"^/",
    )


# =============================================================================
# Project Input Models
# =============================================================================


class ProjectCreateInput(BaseMCPInput):
    """Input for creating a project."""

    name: str = Field(..., description="Project name (e.g., 'Website relaunch')", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Project description", max_length=5000)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


class ProjectUpdateInput(BaseMCPInput):
    """Input for updating a project; omitted fields are left unchanged."""

    project_id: int = Field(..., description="Project identifier", gt=0)
    name: Optional[str] = Field(default=None, description="New name", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="New description", max_length=5000)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


class ProjectIdInput(BaseMCPInput):
    """Input addressing one project."""

    project_id: int = Field(..., description="Project identifier", gt=0)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


# =============================================================================
# Task Input Models
# =============================================================================


class TaskListInput(BaseMCPInput):
    """Input for listing the tasks of a project."""

    project_id: Optional[int] = Field(
        default=None,
        description="Project to list. If not provided, uses the selected project.",
        gt=0,
    )
    statuses: Optional[List[TaskStatus]] = Field(default=None, description="Only these statuses")
    priorities: Optional[List[TaskPriority]] = Field(default=None, description="Only these priorities")
    labels: Optional[List[TaskLabel]] = Field(default=None, description="Only these labels")
    search: Optional[str] = Field(default=None, description="Case-insensitive title search", max_length=200)
    sort_by: Optional[TaskSortField] = Field(default=None, description="Sort column")
    descending: bool = Field(default=False, description="Sort descending")
    limit: int = Field(default=50, description="Maximum results", ge=1, le=500)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


class TaskCreateInput(BaseMCPInput):
    """Input for creating a task."""

    title: str = Field(..., description="Task title (e.g., 'Fix login bug')", min_length=1, max_length=500)
    project_id: Optional[int] = Field(
        default=None,
        description="Project to create the task in. If not provided, uses the selected project.",
        gt=0,
    )
    description: Optional[str] = Field(default=None, description="Task description", max_length=10000)
    status: TaskStatus = Field(default=TaskStatus.TODO, description="Initial status")
    priority: Optional[TaskPriority] = Field(default=None, description="'low', 'medium' or 'high'")
    label: Optional[TaskLabel] = Field(default=None, description="'bug', 'feature' or 'documentation'")
    due_date: Optional[str] = Field(default=None, description="Due date in ISO format (e.g., '2025-01-15T17:00:00Z')")
    start_time: Optional[str] = Field(default=None, description="Start time in ISO format")
    end_time: Optional[str] = Field(default=None, description="End time in ISO format")
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")

    @field_validator("due_date", "start_time", "end_time")
    @classmethod
    def iso_datetime(cls, v: Optional[str]) -> Optional[str]:
        return _check_iso_datetime(v)


class TaskUpdateInput(BaseMCPInput):
    """Input for updating a task; omitted fields are left unchanged."""

    task_id: int = Field(..., description="Task identifier", gt=0)
    title: Optional[str] = Field(default=None, description="New title", min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, description="New description", max_length=10000)
    status: Optional[TaskStatus] = Field(default=None, description="New status")
    priority: Optional[TaskPriority] = Field(default=None, description="New priority")
    label: Optional[TaskLabel] = Field(default=None, description="New label")
    due_date: Optional[str] = Field(default=None, description="New due date in ISO format")
    start_time: Optional[str] = Field(default=None, description="New start time in ISO format")
    end_time: Optional[str] = Field(default=None, description="New end time in ISO format")
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")

    @field_validator("due_date", "start_time", "end_time")
    @classmethod
    def iso_datetime(cls, v: Optional[str]) -> Optional[str]:
        return _check_iso_datetime(v)


class TaskIdInput(BaseMCPInput):
    """Input addressing one task."""

    task_id: int = Field(..., description="Task identifier", gt=0)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


class TaskStatusInput(BaseMCPInput):
    """Input for moving a task to another status."""

    task_id: int = Field(..., description="Task identifier", gt=0)
    status: TaskStatus = Field(..., description="'backlog', 'todo', 'in progress', 'done' or 'canceled'")
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


# =============================================================================
# Calendar Input Models
# =============================================================================


class CalendarCreateInput(BaseMCPInput):
    """Input for creating a calendar."""

    name: str = Field(..., description="Calendar name", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Calendar description", max_length=5000)
    color: Optional[str] = Field(default=None, description="Hex color (e.g., '#4CAFF6')", pattern=HEX_COLOR)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


class CalendarUpdateInput(BaseMCPInput):
    """Input for updating a calendar; omitted fields are left unchanged."""

    calendar_id: int = Field(..., description="Calendar identifier", gt=0)
    name: Optional[str] = Field(default=None, description="New name", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="New description", max_length=5000)
    color: Optional[str] = Field(default=None, description="New hex color", pattern=HEX_COLOR)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


class CalendarIdInput(BaseMCPInput):
    """Input addressing one calendar."""

    calendar_id: int = Field(..., description="Calendar identifier", gt=0)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


class CalendarFilterInput(BaseMCPInput):
    """Input for checking or unchecking a calendar in the calendars filter."""

    calendar_id: int = Field(..., description="Calendar identifier", gt=0)
    checked: bool = Field(..., description="True to show the calendar's events, False to hide them")


# =============================================================================
# Event Input Models
# =============================================================================


class EventListInput(BaseMCPInput):
    """Input for listing events in a time range."""

    calendar_ids: List[int] = Field(..., description="Calendars to include", min_length=1)
    start: str = Field(..., description="Range start in ISO format")
    end: str = Field(..., description="Range end in ISO format")
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")

    @field_validator("start", "end")
    @classmethod
    def iso_datetime(cls, v: str) -> str:
        return _check_iso_datetime(v)


class EventCreateInput(BaseMCPInput):
    """Input for creating an event."""

    title: str = Field(..., description="Event title", min_length=1, max_length=500)
    start_time: str = Field(..., description="Start in ISO format (e.g., '2025-01-15T09:00:00Z')")
    end_time: str = Field(..., description="End in ISO format; must be after the start")
    calendar_id: Optional[int] = Field(
        default=None,
        description="Calendar to create the event in. If not provided, uses the selected calendar.",
        gt=0,
    )
    description: Optional[str] = Field(default=None, description="Event description", max_length=10000)
    location: Optional[str] = Field(default=None, description="Location", max_length=500)
    color: Optional[str] = Field(default=None, description="Hex color", pattern=HEX_COLOR)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")

    @field_validator("start_time", "end_time")
    @classmethod
    def iso_datetime(cls, v: str) -> str:
        return _check_iso_datetime(v)


class EventUpdateInput(BaseMCPInput):
    """Input for updating an event; omitted fields are left unchanged."""

    event_id: int = Field(..., description="Event identifier", gt=0)
    title: Optional[str] = Field(default=None, description="New title", min_length=1, max_length=500)
    start_time: Optional[str] = Field(default=None, description="New start in ISO format")
    end_time: Optional[str] = Field(default=None, description="New end in ISO format")
    calendar_id: Optional[int] = Field(default=None, description="Move to this calendar", gt=0)
    description: Optional[str] = Field(default=None, description="New description", max_length=10000)
    location: Optional[str] = Field(default=None, description="New location", max_length=500)
    color: Optional[str] = Field(default=None, description="New hex color", pattern=HEX_COLOR)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")

    @field_validator("start_time", "end_time")
    @classmethod
    def iso_datetime(cls, v: Optional[str]) -> Optional[str]:
        return _check_iso_datetime(v)


class EventIdInput(BaseMCPInput):
    """Input addressing one event."""

    event_id: int = Field(..., description="Event identifier", gt=0)
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")


class CalendarViewInput(BaseMCPInput):
    """Input for showing the calendar view."""

    view: Optional[CalendarViewMode] = Field(default=None, description="'month', 'week' or 'day'")
    day: Optional[date] = Field(default=None, description="Reference date (e.g., '2025-01-15')")
    step: int = Field(default=0, description="Move by this many months/weeks/days", ge=-120, le=120)
    today: bool = Field(default=False, description="Jump to today first")
    response_format: ResponseFormat = Field(default=ResponseFormat.MARKDOWN, description="Output format")
