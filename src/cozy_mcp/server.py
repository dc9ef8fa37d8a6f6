#!/usr/bin/env python3
"""
Cozy MCP Server.

This server exposes the Cozy task and calendar services as MCP tools.

Features:
    - Authentication (login, register, logout, profile)
    - Project management (CRUD, selection)
    - Task management (CRUD, status changes, filtered and sorted listing)
    - Calendar management (CRUD, selection, calendars filter)
    - Events (CRUD, range listing, month/week/day agenda)

Environment Variables (all optional):
    COZY_AUTH_SERVICE_URL, COZY_TASK_SERVICE_URL,
    COZY_CALENDAR_SERVICE_URL, COZY_EVENT_SERVICE_URL
    COZY_EMAIL, COZY_PASSWORD (automatic login)
    COZY_SESSION_FILE (persist the session between runs)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator

from mcp.server.fastmcp import Context, FastMCP

from cozy_mcp.client import CozyClient, TaskFilters
from cozy_mcp.exceptions import (
    CozyAPIError,
    CozyAuthenticationError,
    CozyConfigurationError,
    CozyNotFoundError,
    CozyRateLimitError,
    CozyTransportError,
    CozyValidationError,
)
from cozy_mcp.settings import get_settings
from cozy_mcp.tools.formatting import (
    error_message,
    format_agenda_json,
    format_agenda_markdown,
    format_calendar_json,
    format_calendar_markdown,
    format_calendars_markdown,
    format_event_json,
    format_event_markdown,
    format_events_json,
    format_events_markdown,
    format_notifications_json,
    format_project_json,
    format_project_markdown,
    format_projects_json,
    format_projects_markdown,
    format_response,
    format_task_json,
    format_task_markdown,
    format_tasks_json,
    format_tasks_markdown,
    format_user_json,
    format_user_markdown,
    json_response,
    success_message,
)
from cozy_mcp.tools.inputs import (
    CalendarCreateInput,
    CalendarFilterInput,
    CalendarIdInput,
    CalendarUpdateInput,
    CalendarViewInput,
    EventCreateInput,
    EventIdInput,
    EventListInput,
    EventUpdateInput,
    LoginInput,
    NavigateInput,
    ProjectCreateInput,
    ProjectIdInput,
    ProjectUpdateInput,
    RegisterInput,
    ResponseFormat,
    TaskCreateInput,
    TaskIdInput,
    TaskListInput,
    TaskStatusInput,
    TaskUpdateInput,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(mcp: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """
    Manage the Cozy client lifecycle.

    Initializes the client on startup and closes it on shutdown.
    """
    logger.info("Initializing Cozy MCP Server...")

    client = CozyClient.from_settings()
    try:
        await client.connect()
        logger.info("Cozy client connected successfully")
        yield {"client": client}
    except Exception as e:
        logger.error("Failed to initialize Cozy client: %s", e)
        raise
    finally:
        await client.disconnect()
        logger.info("Cozy client disconnected")


# Initialize FastMCP server
mcp = FastMCP(
    "cozy_mcp",
    lifespan=lifespan,
)


def get_client(ctx: Context) -> CozyClient:
    """Get the Cozy client from context."""
    return ctx.request_context.lifespan_context["client"]


# =============================================================================
# Error Handling
# =============================================================================


def handle_error(e: Exception, operation: str, ctx: Context | None = None) -> str:
    """
    Handle exceptions and return user-friendly error messages.

    With ``ctx``, notifications raised by the failed call are drained and
    appended so they do not surface in a later response.
    """
    logger.exception("Error in %s: %s", operation, e)
    notes = get_client(ctx).notifier.drain() if ctx is not None else None
    return format_response(_describe_error(e), notes)


def _describe_error(e: Exception) -> str:
    if isinstance(e, CozyAuthenticationError):
        return error_message(
            f"Authentication failed: {e}",
            "Log in with cozy_login, or set COZY_EMAIL and COZY_PASSWORD.",
        )
    if isinstance(e, CozyNotFoundError):
        return error_message(
            f"Resource not found: {e}",
            "Verify the ID is correct and the resource exists.",
        )
    if isinstance(e, CozyValidationError):
        return error_message(str(e))
    if isinstance(e, CozyRateLimitError):
        return error_message(f"Rate limited: {e}", "Wait a moment and try again.")
    if isinstance(e, CozyAPIError):
        return error_message(f"{e.service or 'Service'} error ({e.status_code}): {e}")
    if isinstance(e, CozyTransportError):
        return error_message(
            f"Could not reach the service: {e}",
            "Check the COZY_*_SERVICE_URL settings and that the services are running.",
        )
    if isinstance(e, CozyConfigurationError):
        return error_message(
            f"Configuration error: {e}",
            "Check your environment variables and settings.",
        )
    return error_message(f"Unexpected error: {e}")


def _respond(client: CozyClient, markdown: str) -> str:
    return format_response(markdown, client.notifier.drain())


def _respond_json(client: CozyClient, data: dict[str, Any]) -> str:
    notes = client.notifier.drain()
    if notes:
        data["notifications"] = format_notifications_json(notes)
    return json_response(data)


def _changes(params: Any, *exclude: str) -> dict[str, Any]:
    """Fields the caller actually provided, minus addressing/output fields."""
    return params.model_dump(exclude_none=True, exclude={"response_format", *exclude})


# =============================================================================
# Auth Tools
# =============================================================================


@mcp.tool(
    name="cozy_login",
    annotations={
        "title": "Log In",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_login(params: LoginInput, ctx: Context) -> str:
    """
    Log in to Cozy and start a session.

    Args:
        params: Credentials:
            - email (str): Account email
            - password (str): Account password

    Returns:
        Welcome message or error message.
    """
    try:
        client = get_client(ctx)
        user = await client.login(params.email, params.password)
        return _respond(client, success_message(f"Logged in as {user.display_name}."))
    except Exception as e:
        return handle_error(e, "login", ctx)


@mcp.tool(
    name="cozy_register",
    annotations={
        "title": "Register",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def cozy_register(params: RegisterInput, ctx: Context) -> str:
    """
    Create a Cozy account. Log in afterwards with cozy_login.

    Args:
        params: Account details:
            - username (str): Display username
            - email (str): Account email
            - password (str): At least 6 characters
    """
    try:
        client = get_client(ctx)
        message = await client.register(params.username, params.email, params.password)
        return _respond(client, success_message(message or "Registration successful!"))
    except Exception as e:
        return handle_error(e, "register", ctx)


@mcp.tool(
    name="cozy_logout",
    annotations={
        "title": "Log Out",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def cozy_logout(ctx: Context) -> str:
    """Drop the current session and all cached data."""
    try:
        client = get_client(ctx)
        client.logout()
        return _respond(client, success_message("Logged out."))
    except Exception as e:
        return handle_error(e, "logout", ctx)


@mcp.tool(
    name="cozy_me",
    annotations={
        "title": "Current User",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_me(ctx: Context, response_format: ResponseFormat = ResponseFormat.MARKDOWN) -> str:
    """Show the authenticated user's profile."""
    try:
        client = get_client(ctx)
        user = await client.me()
        if response_format == ResponseFormat.MARKDOWN:
            return format_user_markdown(user)
        return json_response(format_user_json(user))
    except Exception as e:
        return handle_error(e, "me", ctx)


@mcp.tool(
    name="cozy_navigate",
    annotations={
        "title": "Open Page",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def cozy_navigate(params: NavigateInput, ctx: Context) -> str:
    """
    Open a page path through the route gate.

    Protected pages (/tasks, /calendar, /settings) redirect to the login
    page without a session; /login and /register redirect to /tasks with one.

    Returns:
        The resulting location.
    """
    try:
        client = get_client(ctx)
        decision = client.open(params.path)
        if decision.allowed:
            return f"Opened `{client.url.url}`"
        return f"Redirected to `{client.url.url}`"
    except Exception as e:
        return handle_error(e, "navigate", ctx)


# =============================================================================
# Project Tools
# =============================================================================


@mcp.tool(
    name="cozy_list_projects",
    annotations={
        "title": "List Projects",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_list_projects(ctx: Context, response_format: ResponseFormat = ResponseFormat.MARKDOWN) -> str:
    """
    List all projects and mark the selected one.

    Listing also resolves the project selection: with no valid selection the
    first project (lowest id) becomes selected.
    """
    try:
        client = get_client(ctx)
        resolution = await client.resolve_project()
        if resolution.error is not None:
            raise resolution.error
        projects = await client.list_projects()
        selected_id = resolution.selected.id if resolution.selected else None

        if response_format == ResponseFormat.MARKDOWN:
            return format_projects_markdown(projects, selected_id)
        return _respond_json(client, {"selected_id": selected_id, "projects": format_projects_json(projects)})
    except Exception as e:
        return handle_error(e, "list_projects", ctx)


@mcp.tool(
    name="cozy_create_project",
    annotations={
        "title": "Create Project",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def cozy_create_project(params: ProjectCreateInput, ctx: Context) -> str:
    """
    Create a project.

    Args:
        params: Project details:
            - name (str): Project name (required)
            - description (str): Optional description
    """
    try:
        client = get_client(ctx)
        project = await client.create_project(params.name, params.description)
        if params.response_format == ResponseFormat.MARKDOWN:
            return _respond(client, f"# Project Created\n\n{format_project_markdown(project)}")
        return _respond_json(client, {"success": True, "project": format_project_json(project)})
    except Exception as e:
        return handle_error(e, "create_project", ctx)


@mcp.tool(
    name="cozy_update_project",
    annotations={
        "title": "Update Project",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_update_project(params: ProjectUpdateInput, ctx: Context) -> str:
    """Rename a project or change its description."""
    try:
        client = get_client(ctx)
        project = await client.update_project(params.project_id, **_changes(params, "project_id"))
        if params.response_format == ResponseFormat.MARKDOWN:
            return _respond(client, format_project_markdown(project))
        return _respond_json(client, {"success": True, "project": format_project_json(project)})
    except Exception as e:
        return handle_error(e, "update_project", ctx)


@mcp.tool(
    name="cozy_delete_project",
    annotations={
        "title": "Delete Project",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_delete_project(params: ProjectIdInput, ctx: Context) -> str:
    """
    Delete a project and all of its tasks.

    WARNING: This cannot be undone.
    """
    try:
        client = get_client(ctx)
        await client.delete_project(params.project_id)
        return _respond(client, success_message(f"Project `{params.project_id}` deleted."))
    except Exception as e:
        return handle_error(e, "delete_project", ctx)


@mcp.tool(
    name="cozy_select_project",
    annotations={
        "title": "Select Project",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_select_project(params: ProjectIdInput, ctx: Context) -> str:
    """Make a project the selected one; task tools default to it."""
    try:
        client = get_client(ctx)
        project = await client.select_project(params.project_id)
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_project_markdown(project, selected=True)
        return json_response(format_project_json(project))
    except Exception as e:
        return handle_error(e, "select_project", ctx)


# =============================================================================
# Task Tools
# =============================================================================


@mcp.tool(
    name="cozy_list_tasks",
    annotations={
        "title": "List Tasks",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_list_tasks(params: TaskListInput, ctx: Context) -> str:
    """
    List the tasks of a project with optional filters and sorting.

    Args:
        params: Filter parameters including:
            - project_id (int): Project (defaults to the selected project)
            - statuses / priorities / labels (list): Facet filters
            - search (str): Title search
            - sort_by (str): 'title', 'status', 'priority', 'due_date', 'created_at'
            - descending (bool): Reverse the sort
            - limit (int): Maximum results (default 50)

    Examples:
        - Open bugs: labels=["bug"], statuses=["todo", "in progress"]
        - Most urgent first: sort_by="priority", descending=True
    """
    try:
        client = get_client(ctx)
        filters = TaskFilters(
            statuses=set(params.statuses or ()),
            priorities=set(params.priorities or ()),
            labels=set(params.labels or ()),
            search=params.search,
            sort_by=params.sort_by,
            descending=params.descending,
        )
        tasks = await client.list_tasks(params.project_id, filters)
        tasks = tasks[: params.limit]

        if params.response_format == ResponseFormat.MARKDOWN:
            return format_tasks_markdown(tasks)
        return _respond_json(client, {"count": len(tasks), "tasks": format_tasks_json(tasks)})
    except Exception as e:
        return handle_error(e, "list_tasks", ctx)


@mcp.tool(
    name="cozy_get_task",
    annotations={
        "title": "Get Task",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_get_task(params: TaskIdInput, ctx: Context) -> str:
    """Get a task by its ID."""
    try:
        client = get_client(ctx)
        task = await client.get_task(params.task_id)
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_task_markdown(task)
        return json_response(format_task_json(task))
    except Exception as e:
        return handle_error(e, "get_task", ctx)


@mcp.tool(
    name="cozy_create_task",
    annotations={
        "title": "Create Task",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def cozy_create_task(params: TaskCreateInput, ctx: Context) -> str:
    """
    Create a task.

    Args:
        params: Task creation parameters including:
            - title (str): Task title (required)
            - project_id (int): Project (defaults to the selected project)
            - status (str): Initial status (default 'todo')
            - priority (str): 'low', 'medium', 'high'
            - label (str): 'bug', 'feature', 'documentation'
            - due_date / start_time / end_time (str): ISO datetimes

    Examples:
        - title="Fix login redirect", label="bug", priority="high"
    """
    try:
        client = get_client(ctx)
        task = await client.create_task(
            project_id=params.project_id,
            **_changes(params, "project_id"),
        )
        if params.response_format == ResponseFormat.MARKDOWN:
            return _respond(client, f"# Task Created\n\n{format_task_markdown(task)}")
        return _respond_json(client, {"success": True, "task": format_task_json(task)})
    except Exception as e:
        return handle_error(e, "create_task", ctx)


@mcp.tool(
    name="cozy_update_task",
    annotations={
        "title": "Update Task",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_update_task(params: TaskUpdateInput, ctx: Context) -> str:
    """Update a task; only the provided fields change."""
    try:
        client = get_client(ctx)
        task = await client.update_task(params.task_id, **_changes(params, "task_id"))
        if params.response_format == ResponseFormat.MARKDOWN:
            return _respond(client, format_task_markdown(task))
        return _respond_json(client, {"success": True, "task": format_task_json(task)})
    except Exception as e:
        return handle_error(e, "update_task", ctx)


@mcp.tool(
    name="cozy_update_task_status",
    annotations={
        "title": "Change Task Status",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_update_task_status(params: TaskStatusInput, ctx: Context) -> str:
    """Move a task to another status (backlog, todo, in progress, done, canceled)."""
    try:
        client = get_client(ctx)
        task = await client.update_task_status(params.task_id, params.status)
        if params.response_format == ResponseFormat.MARKDOWN:
            return _respond(client, format_task_markdown(task))
        return _respond_json(client, {"success": True, "task": format_task_json(task)})
    except Exception as e:
        return handle_error(e, "update_task_status", ctx)


@mcp.tool(
    name="cozy_delete_task",
    annotations={
        "title": "Delete Task",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_delete_task(params: TaskIdInput, ctx: Context) -> str:
    """
    Delete a task.

    WARNING: This cannot be undone.
    """
    try:
        client = get_client(ctx)
        await client.delete_task(params.task_id)
        return _respond(client, success_message(f"Task `{params.task_id}` deleted."))
    except Exception as e:
        return handle_error(e, "delete_task", ctx)


# =============================================================================
# Calendar Tools
# =============================================================================


@mcp.tool(
    name="cozy_list_calendars",
    annotations={
        "title": "List Calendars",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_list_calendars(ctx: Context, response_format: ResponseFormat = ResponseFormat.MARKDOWN) -> str:
    """
    List calendars, marking the selected one and those shown in the calendar view.

    The first listing also seeds the calendars filter with the first calendar.
    """
    try:
        client = get_client(ctx)
        resolution = await client.resolve_calendar()
        if resolution.error is not None:
            raise resolution.error
        calendars = await client.list_calendars()
        shown = await client.filtered_calendar_ids()
        selected_id = resolution.selected.id if resolution.selected else None

        if response_format == ResponseFormat.MARKDOWN:
            return format_calendars_markdown(calendars, selected_id, shown)
        return _respond_json(client, {
            "selected_id": selected_id,
            "shown_ids": shown,
            "calendars": [format_calendar_json(c) for c in calendars],
        })
    except Exception as e:
        return handle_error(e, "list_calendars", ctx)


@mcp.tool(
    name="cozy_create_calendar",
    annotations={
        "title": "Create Calendar",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def cozy_create_calendar(params: CalendarCreateInput, ctx: Context) -> str:
    """Create a calendar with an optional description and hex color."""
    try:
        client = get_client(ctx)
        calendar = await client.create_calendar(params.name, params.description, params.color)
        if params.response_format == ResponseFormat.MARKDOWN:
            return _respond(client, f"# Calendar Created\n\n{format_calendar_markdown(calendar)}")
        return _respond_json(client, {"success": True, "calendar": format_calendar_json(calendar)})
    except Exception as e:
        return handle_error(e, "create_calendar", ctx)


@mcp.tool(
    name="cozy_update_calendar",
    annotations={
        "title": "Update Calendar",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_update_calendar(params: CalendarUpdateInput, ctx: Context) -> str:
    """Update a calendar's name, description or color."""
    try:
        client = get_client(ctx)
        calendar = await client.update_calendar(params.calendar_id, **_changes(params, "calendar_id"))
        if params.response_format == ResponseFormat.MARKDOWN:
            return _respond(client, format_calendar_markdown(calendar))
        return _respond_json(client, {"success": True, "calendar": format_calendar_json(calendar)})
    except Exception as e:
        return handle_error(e, "update_calendar", ctx)


@mcp.tool(
    name="cozy_delete_calendar",
    annotations={
        "title": "Delete Calendar",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_delete_calendar(params: CalendarIdInput, ctx: Context) -> str:
    """
    Delete a calendar and all of its events.

    If it was selected, the selection falls back to the first remaining
    calendar. WARNING: This cannot be undone.
    """
    try:
        client = get_client(ctx)
        resolution = await client.delete_calendar(params.calendar_id)
        message = f"Calendar `{params.calendar_id}` deleted."
        if resolution.selected is not None:
            message += f" Selected calendar: {resolution.selected.name} (`{resolution.selected.id}`)."
        return _respond(client, success_message(message))
    except Exception as e:
        return handle_error(e, "delete_calendar", ctx)


@mcp.tool(
    name="cozy_select_calendar",
    annotations={
        "title": "Select Calendar",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_select_calendar(params: CalendarIdInput, ctx: Context) -> str:
    """Make a calendar the selected one; new events go there by default."""
    try:
        client = get_client(ctx)
        calendar = await client.select_calendar(params.calendar_id)
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_calendar_markdown(calendar, selected=True)
        return json_response(format_calendar_json(calendar))
    except Exception as e:
        return handle_error(e, "select_calendar", ctx)


@mcp.tool(
    name="cozy_toggle_calendar",
    annotations={
        "title": "Show/Hide Calendar",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def cozy_toggle_calendar(params: CalendarFilterInput, ctx: Context) -> str:
    """Check or uncheck a calendar in the calendars filter of the calendar view."""
    try:
        client = get_client(ctx)
        await client.filtered_calendar_ids()
        shown = client.toggle_calendar(params.calendar_id, params.checked)
        ids = ", ".join(f"`{i}`" for i in shown) or "none"
        return f"Shown calendars: {ids}"
    except Exception as e:
        return handle_error(e, "toggle_calendar", ctx)


# =============================================================================
# Event Tools
# =============================================================================


@mcp.tool(
    name="cozy_list_events",
    annotations={
        "title": "List Events",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_list_events(params: EventListInput, ctx: Context) -> str:
    """
    List events of the given calendars between two datetimes.

    Examples:
        - calendar_ids=[1, 2], start="2025-01-01T00:00:00Z", end="2025-01-31T23:59:59Z"
    """
    try:
        client = get_client(ctx)
        events = await client.list_events(
            params.calendar_ids,
            datetime.fromisoformat(params.start),
            datetime.fromisoformat(params.end),
        )
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_events_markdown(events)
        return _respond_json(client, {"count": len(events), "events": format_events_json(events)})
    except Exception as e:
        return handle_error(e, "list_events", ctx)


@mcp.tool(
    name="cozy_get_event",
    annotations={
        "title": "Get Event",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_get_event(params: EventIdInput, ctx: Context) -> str:
    """Get an event by its ID."""
    try:
        client = get_client(ctx)
        event = await client.get_event(params.event_id)
        if params.response_format == ResponseFormat.MARKDOWN:
            return format_event_markdown(event)
        return json_response(format_event_json(event))
    except Exception as e:
        return handle_error(e, "get_event", ctx)


@mcp.tool(
    name="cozy_create_event",
    annotations={
        "title": "Create Event",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def cozy_create_event(params: EventCreateInput, ctx: Context) -> str:
    """
    Create an event.

    Args:
        params: Event details:
            - title (str): Event title (required)
            - start_time / end_time (str): ISO datetimes; end must be after start
            - calendar_id (int): Calendar (defaults to the selected calendar)
            - description, location, color: Optional
    """
    try:
        client = get_client(ctx)
        event = await client.create_event(**_changes(params))
        if params.response_format == ResponseFormat.MARKDOWN:
            return _respond(client, f"# Event Created\n\n{format_event_markdown(event)}")
        return _respond_json(client, {"success": True, "event": format_event_json(event)})
    except Exception as e:
        return handle_error(e, "create_event", ctx)


@mcp.tool(
    name="cozy_update_event",
    annotations={
        "title": "Update Event",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_update_event(params: EventUpdateInput, ctx: Context) -> str:
    """Update an event; only the provided fields change."""
    try:
        client = get_client(ctx)
        event = await client.update_event(params.event_id, **_changes(params, "event_id"))
        if params.response_format == ResponseFormat.MARKDOWN:
            return _respond(client, format_event_markdown(event))
        return _respond_json(client, {"success": True, "event": format_event_json(event)})
    except Exception as e:
        return handle_error(e, "update_event", ctx)


@mcp.tool(
    name="cozy_delete_event",
    annotations={
        "title": "Delete Event",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def cozy_delete_event(params: EventIdInput, ctx: Context) -> str:
    """
    Delete an event.

    WARNING: This cannot be undone.
    """
    try:
        client = get_client(ctx)
        await client.delete_event(params.event_id)
        return _respond(client, success_message(f"Event `{params.event_id}` deleted."))
    except Exception as e:
        return handle_error(e, "delete_event", ctx)


@mcp.tool(
    name="cozy_calendar_view",
    annotations={
        "title": "Calendar View",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def cozy_calendar_view(params: CalendarViewInput, ctx: Context) -> str:
    """
    Show the agenda for the current month, week or day.

    Events come from the calendars checked in the calendars filter. Weeks
    start on Monday; the month view spans whole weeks.

    Examples:
        - Next week: view="week", step=1
        - A given day: view="day", day="2025-03-14"
    """
    try:
        client = get_client(ctx)
        view = client.calendar_view
        if params.today:
            view.today()
        client.set_calendar_view(params.view or view.view, params.day)
        if params.step:
            view.navigate(params.step)

        agenda = await client.visible_agenda()
        first, last = view.visible_range()
        heading = f"{view.view.value.title()} view: {first} to {last}"

        if params.response_format == ResponseFormat.MARKDOWN:
            return format_agenda_markdown(agenda, heading)
        return _respond_json(client, {
            "view": view.view.value,
            "start": first.isoformat(),
            "end": last.isoformat(),
            "days": format_agenda_json(agenda),
        })
    except Exception as e:
        return handle_error(e, "calendar_view", ctx)


# =============================================================================
# Main Entry Point
# =============================================================================


def main():
    """Main entry point for the Cozy MCP server."""
    logging.getLogger().setLevel(get_settings().log_level)
    mcp.run()


if __name__ == "__main__":
    main()
