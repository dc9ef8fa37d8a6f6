"""
Cozy MCP Tools Package.

Input models and response formatting for the MCP tools. Tools are
organized into logical groups:
    - Auth tools (login, register, logout, profile, navigation)
    - Project tools (CRUD, selection)
    - Task tools (CRUD, status, filtered listing)
    - Calendar tools (CRUD, selection, calendars filter)
    - Event tools (CRUD, range listing, calendar view)
"""

from cozy_mcp.tools.inputs import (
    ResponseFormat,
    LoginInput,
    RegisterInput,
    NavigateInput,
    ProjectCreateInput,
    ProjectUpdateInput,
    ProjectIdInput,
    TaskListInput,
    TaskCreateInput,
    TaskUpdateInput,
    TaskIdInput,
    TaskStatusInput,
    CalendarCreateInput,
    CalendarUpdateInput,
    CalendarIdInput,
    CalendarFilterInput,
    EventListInput,
    EventCreateInput,
    EventUpdateInput,
    EventIdInput,
    CalendarViewInput,
)

__all__ = [
    "ResponseFormat",
    "LoginInput",
    "RegisterInput",
    "NavigateInput",
    "ProjectCreateInput",
    "ProjectUpdateInput",
    "ProjectIdInput",
    "TaskListInput",
    "TaskCreateInput",
    "TaskUpdateInput",
    "TaskIdInput",
    "TaskStatusInput",
    "CalendarCreateInput",
    "CalendarUpdateInput",
    "CalendarIdInput",
    "CalendarFilterInput",
    "EventListInput",
    "EventCreateInput",
    "EventUpdateInput",
    "EventIdInput",
    "CalendarViewInput",
]
