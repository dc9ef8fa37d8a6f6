"""
MCP Server Tests.

This module tests the tool layer: error translation and a few tools
called directly with a stub context wrapping a mocked client.
"""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from cozy_mcp.exceptions import (
    CozyAPIError,
    CozyAuthenticationError,
    CozyConfigurationError,
    CozyNotFoundError,
    CozyTransportError,
    CozyValidationError,
)
from cozy_mcp.server import (
    cozy_calendar_view,
    cozy_create_project,
    cozy_create_task,
    cozy_delete_calendar,
    cozy_list_tasks,
    cozy_navigate,
    handle_error,
)
from cozy_mcp.tools import (
    CalendarIdInput,
    CalendarViewInput,
    NavigateInput,
    ProjectCreateInput,
    TaskCreateInput,
    TaskListInput,
)
from cozy_mcp.tools.inputs import ResponseFormat
from tests.conftest import utc

pytestmark = [pytest.mark.unit]


def make_ctx(client):
    return SimpleNamespace(request_context=SimpleNamespace(lifespan_context={"client": client}))


# =============================================================================
# Error Translation
# =============================================================================


class TestHandleError:
    """Tests for exception to message translation."""

    pytestmark = [pytest.mark.errors]

    def test_authentication(self):
        message = handle_error(CozyAuthenticationError("token expired", status_code=401), "op")

        assert message.startswith("**Error**: Authentication failed: token expired")
        assert "cozy_login" in message

    def test_not_found(self):
        message = handle_error(CozyNotFoundError("task not found", status_code=404), "op")

        assert "Resource not found: task not found" in message

    def test_validation_keeps_message(self):
        message = handle_error(CozyValidationError("Invalid input: title: too short"), "op")

        assert message == "**Error**: Invalid input: title: too short"

    def test_service_error_names_service(self):
        message = handle_error(CozyAPIError("boom", status_code=500, service="tasks"), "op")

        assert "tasks error (500): boom" in message

    def test_transport(self):
        assert "Could not reach the service" in handle_error(CozyTransportError("refused"), "op")

    def test_configuration(self):
        assert "Configuration error" in handle_error(CozyConfigurationError("missing url"), "op")

    def test_unexpected(self):
        assert handle_error(RuntimeError("oops"), "op") == "**Error**: Unexpected error: oops"


# =============================================================================
# Tools
# =============================================================================


class TestTools:
    """Tests for tools called with a stub context."""

    pytestmark = [pytest.mark.tasks]

    async def test_create_task_reports_notification(self, logged_in_client, mock_api):
        mock_api.seed_projects(1)

        result = await cozy_create_task(
            TaskCreateInput(title="Ship it", priority="high", due_date="2025-02-01T12:00:00Z"),
            make_ctx(logged_in_client),
        )

        assert "# Task Created" in result
        assert "Ship it" in result
        assert '> success: Task "Ship it" created successfully!' in result
        assert logged_in_client.notifier.pending == []

    async def test_create_task_without_project_is_an_error(self, logged_in_client):
        result = await cozy_create_task(TaskCreateInput(title="x"), make_ctx(logged_in_client))

        assert result.startswith("**Error**")

    async def test_list_tasks_json(self, logged_in_client, mock_api):
        mock_api.seed_projects(1)
        mock_api.add_task(project_id=1, title="b", priority="low")
        mock_api.add_task(project_id=1, title="a", priority="high")

        result = await cozy_list_tasks(
            TaskListInput(sort_by="priority", descending=True, response_format=ResponseFormat.JSON),
            make_ctx(logged_in_client),
        )

        data = json.loads(result)
        assert data["count"] == 2
        assert [t["title"] for t in data["tasks"]] == ["a", "b"]

    async def test_list_tasks_empty(self, logged_in_client):
        result = await cozy_list_tasks(TaskListInput(), make_ctx(logged_in_client))

        assert result == "No tasks found."

    async def test_delete_calendar_reports_new_selection(self, logged_in_client, mock_api):
        mock_api.seed_calendars(1, 2)
        await logged_in_client.select_calendar(2)

        result = await cozy_delete_calendar(CalendarIdInput(calendar_id=2), make_ctx(logged_in_client))

        assert "Selected calendar: Calendar 1 (`1`)" in result
        assert 'Calendar "Calendar 2" and its events deleted.' in result

    async def test_navigate_redirects_anonymous_users(self, client):
        result = await cozy_navigate(NavigateInput(path="/calendar"), make_ctx(client))

        assert result == "Redirected to `/login?redirectedFrom=%2Fcalendar`"

    async def test_calendar_view_json(self, logged_in_client, mock_api):
        mock_api.seed_calendars(1)
        event = mock_api.add_event(calendar_id=1, start_time=utc(2025, 1, 15, 9))

        result = await cozy_calendar_view(
            CalendarViewInput(view="week", day="2025-01-15", response_format=ResponseFormat.JSON),
            make_ctx(logged_in_client),
        )

        data = json.loads(result)
        assert data["start"] == "2025-01-13"
        assert data["end"] == "2025-01-19"
        assert data["days"]["2025-01-15"] == [event.id]


# =============================================================================
# Notification Draining
# =============================================================================


class TestNotificationDraining:
    """Tests that each response carries the notifications of its own call."""

    pytestmark = [pytest.mark.errors]

    async def test_error_response_carries_failure_toast(self, logged_in_client, mock_api):
        mock_api.seed_projects(1)
        mock_api.should_fail["create_task"] = CozyAPIError("Internal Server Error", status_code=500)

        result = await cozy_create_task(TaskCreateInput(title="x", project_id=1), make_ctx(logged_in_client))

        assert result.startswith("**Error**")
        assert "> error: Failed to create task: Internal Server Error" in result
        assert logged_in_client.notifier.pending == []

    async def test_failure_toast_does_not_leak_into_next_response(self, logged_in_client, mock_api):
        mock_api.seed_projects(1)
        mock_api.should_fail["create_task"] = CozyAPIError("Internal Server Error", status_code=500)
        ctx = make_ctx(logged_in_client)
        await cozy_create_task(TaskCreateInput(title="x", project_id=1), ctx)

        result = await cozy_create_project(ProjectCreateInput(name="Next"), ctx)

        assert "Failed to create task" not in result
        assert '> success: Project "Next" created!' in result

    async def test_json_response_drains_notifications(self, logged_in_client, mock_api):
        mock_api.seed_projects(1)

        result = await cozy_create_task(
            TaskCreateInput(title="Ship it", project_id=1, response_format=ResponseFormat.JSON),
            make_ctx(logged_in_client),
        )

        data = json.loads(result)
        assert data["success"] is True
        assert data["notifications"] == [
            {"level": "success", "message": 'Task "Ship it" created successfully!'},
        ]
        assert logged_in_client.notifier.pending == []

    async def test_json_read_without_notifications_has_no_key(self, logged_in_client, mock_api):
        mock_api.seed_projects(1)
        mock_api.add_task(project_id=1, title="a")

        result = await cozy_list_tasks(
            TaskListInput(response_format=ResponseFormat.JSON),
            make_ctx(logged_in_client),
        )

        assert "notifications" not in json.loads(result)
