"""
Cozy Constants and Enumerations.

Values mirror what the backend services accept on the wire.
"""

from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    """Task workflow status."""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in progress"
    DONE = "done"
    CANCELED = "canceled"


class TaskPriority(str, Enum):
    """Task priority level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
}


class TaskLabel(str, Enum):
    """Task label."""

    BUG = "bug"
    FEATURE = "feature"
    DOCUMENTATION = "documentation"


class CalendarViewMode(str, Enum):
    """Calendar display granularity."""

    MONTH = "month"
    WEEK = "week"
    DAY = "day"


# Session cookie shared with the request-time route gate
AUTH_COOKIE_NAME = "authToken"
AUTH_COOKIE_MAX_AGE_DAYS = 7

# URL query parameter names
PROJECT_PARAM = "projectId"
CALENDAR_PARAM = "calendarId"
CALENDARS_FILTER_PARAM = "calendars"
PROJECTS_FILTER_PARAM = "projects"
REDIRECT_PARAM = "redirectedFrom"

# Route gating
PROTECTED_PATHS = ("/tasks", "/calendar", "/settings")
PUBLIC_ONLY_PATHS = ("/login", "/register")
LOGIN_PATH = "/login"
DEFAULT_AUTHENTICATED_PATH = "/tasks"
