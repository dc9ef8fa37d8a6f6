"""
Response formatting for the MCP tools.

Every entity has a Markdown and a JSON rendering; tools pick one from the
caller's ``response_format``.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from cozy_mcp.models import Calendar, Event, Project, Task, User
from cozy_mcp.state import Notification

_STATUS_ICON = {
    "backlog": "[ ]",
    "todo": "[ ]",
    "in progress": "[~]",
    "done": "[x]",
    "canceled": "[-]",
}


def _dt(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def _json(model: Any) -> dict[str, Any]:
    return model.model_dump(mode="json", exclude_none=True)


# =============================================================================
# Users
# =============================================================================


def format_user_markdown(user: User) -> str:
    lines = [
        "# Profile",
        "",
        f"- **Username**: {user.username or '-'}",
        f"- **Email**: {user.email}",
        f"- **ID**: `{user.id}`",
    ]
    return "\n".join(lines)


def format_user_json(user: User) -> dict[str, Any]:
    return _json(user)


# =============================================================================
# Projects
# =============================================================================


def format_project_markdown(project: Project, selected: bool = False) -> str:
    marker = " (selected)" if selected else ""
    lines = [f"## {project.name}{marker}", f"- **ID**: `{project.id}`"]
    if project.description:
        lines.append(f"- **Description**: {project.description}")
    return "\n".join(lines)


def format_project_json(project: Project) -> dict[str, Any]:
    return _json(project)


def format_projects_markdown(projects: list[Project], selected_id: Optional[int] = None) -> str:
    if not projects:
        return "No projects found."
    lines = [f"# Projects ({len(projects)})", ""]
    for project in projects:
        lines.append(format_project_markdown(project, selected=project.id == selected_id))
        lines.append("")
    return "\n".join(lines).rstrip()


def format_projects_json(projects: list[Project]) -> list[dict[str, Any]]:
    return [format_project_json(p) for p in projects]


# =============================================================================
# Tasks
# =============================================================================


def format_task_markdown(task: Task) -> str:
    icon = _STATUS_ICON.get(task.status.value, "[ ]")
    lines = [
        f"## {icon} {task.title}",
        f"- **ID**: `{task.id}`",
        f"- **Project**: `{task.project_id}`",
        f"- **Status**: {task.status.value}",
    ]
    if task.priority:
        lines.append(f"- **Priority**: {task.priority.value}")
    if task.label:
        lines.append(f"- **Label**: {task.label.value}")
    if task.due_date:
        lines.append(f"- **Due**: {_dt(task.due_date)}")
    if task.start_time or task.end_time:
        lines.append(f"- **Time**: {_dt(task.start_time)} to {_dt(task.end_time)}")
    if task.description:
        lines.append(f"- **Description**: {task.description}")
    return "\n".join(lines)


def format_task_json(task: Task) -> dict[str, Any]:
    return _json(task)


def format_tasks_markdown(tasks: list[Task], title: str = "Tasks") -> str:
    if not tasks:
        return "No tasks found."
    lines = [f"# {title} ({len(tasks)})", ""]
    for task in tasks:
        lines.append(format_task_markdown(task))
        lines.append("")
    return "\n".join(lines).rstrip()


def format_tasks_json(tasks: list[Task]) -> list[dict[str, Any]]:
    return [format_task_json(t) for t in tasks]


# =============================================================================
# Calendars & Events
# =============================================================================


def format_calendar_markdown(calendar: Calendar, selected: bool = False, shown: bool = False) -> str:
    flags = [flag for flag, on in (("selected", selected), ("shown", shown)) if on]
    suffix = f" ({', '.join(flags)})" if flags else ""
    lines = [f"## {calendar.name}{suffix}", f"- **ID**: `{calendar.id}`"]
    if calendar.color:
        lines.append(f"- **Color**: {calendar.color}")
    if calendar.description:
        lines.append(f"- **Description**: {calendar.description}")
    return "\n".join(lines)


def format_calendar_json(calendar: Calendar) -> dict[str, Any]:
    return _json(calendar)


def format_calendars_markdown(
    calendars: list[Calendar],
    selected_id: Optional[int] = None,
    shown_ids: Iterable[int] = (),
) -> str:
    if not calendars:
        return "No calendars found."
    shown = set(shown_ids)
    lines = [f"# Calendars ({len(calendars)})", ""]
    for calendar in calendars:
        lines.append(format_calendar_markdown(calendar, calendar.id == selected_id, calendar.id in shown))
        lines.append("")
    return "\n".join(lines).rstrip()


def format_event_markdown(event: Event) -> str:
    lines = [
        f"## {event.title}",
        f"- **ID**: `{event.id}`",
        f"- **Calendar**: `{event.calendar_id}`",
        f"- **When**: {_dt(event.start_time)} to {_dt(event.end_time)} ({event.duration_minutes} min)",
    ]
    if event.location:
        lines.append(f"- **Location**: {event.location}")
    if event.description:
        lines.append(f"- **Description**: {event.description}")
    return "\n".join(lines)


def format_event_json(event: Event) -> dict[str, Any]:
    return _json(event)


def format_events_markdown(events: list[Event]) -> str:
    if not events:
        return "No events found."
    lines = [f"# Events ({len(events)})", ""]
    for event in events:
        lines.append(format_event_markdown(event))
        lines.append("")
    return "\n".join(lines).rstrip()


def format_events_json(events: list[Event]) -> list[dict[str, Any]]:
    return [format_event_json(e) for e in events]


def format_agenda_markdown(agenda: Mapping[date, list[Event]], heading: str) -> str:
    lines = [f"# {heading}", ""]
    for day, events in agenda.items():
        if not events:
            continue
        lines.append(f"### {day.strftime('%a %Y-%m-%d')}")
        for event in events:
            lines.append(f"- {event.start_time.strftime('%H:%M')} {event.title} (`{event.id}`)")
        lines.append("")
    if len(lines) == 2:
        lines.append("No events in this range.")
    return "\n".join(lines).rstrip()


def format_agenda_json(agenda: Mapping[date, list[Event]]) -> dict[str, Any]:
    return {day.isoformat(): [e.id for e in events] for day, events in agenda.items()}


# =============================================================================
# Generic
# =============================================================================


def format_notifications(notes: list[Notification]) -> str:
    return "\n".join(f"> {note.level.value}: {note.message}" for note in notes)


def format_response(markdown: str, notes: Optional[list[Notification]] = None) -> str:
    """Append drained notifications below a Markdown body."""
    if not notes:
        return markdown
    return f"{markdown}\n\n{format_notifications(notes)}"


def format_notifications_json(notes: list[Notification]) -> list[dict[str, str]]:
    return [{"level": note.level.value, "message": note.message} for note in notes]


def json_response(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


def success_message(message: str) -> str:
    return f"**Success**: {message}"


def error_message(message: str, hint: Optional[str] = None) -> str:
    text = f"**Error**: {message}"
    if hint:
        text += f"\n\n*Hint*: {hint}"
    return text
