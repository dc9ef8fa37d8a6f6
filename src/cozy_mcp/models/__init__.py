"""
Cozy Data Models.

Pydantic models for the resources the backend services own and for the
request payloads the client sends them. Payloads are validated here, at
the service boundary, before any network call.

Models:
    - User / AuthResponse: Authenticated principal and login result
    - Project: Owns tasks
    - Task: Belongs to one project
    - Calendar: Owns events
    - Event: Belongs to one calendar
"""

from cozy_mcp.models.base import CozyPayload, CozyResource, format_rfc3339
from cozy_mcp.models.user import User, AuthResponse, LoginPayload, RegisterPayload
from cozy_mcp.models.project import Project, ProjectCreate, ProjectUpdate
from cozy_mcp.models.task import Task, TaskCreate, TaskUpdate, TaskStatusUpdate
from cozy_mcp.models.calendar import Calendar, CalendarCreate, CalendarUpdate
from cozy_mcp.models.event import Event, EventCreate, EventUpdate

__all__ = [
    "CozyPayload",
    "CozyResource",
    "format_rfc3339",
    "User",
    "AuthResponse",
    "LoginPayload",
    "RegisterPayload",
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskStatusUpdate",
    "Calendar",
    "CalendarCreate",
    "CalendarUpdate",
    "Event",
    "EventCreate",
    "EventUpdate",
]
