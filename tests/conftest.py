"""
Pytest Configuration and Fixtures for Cozy Client Tests.

This module provides fixtures, mock factories, and shared utilities for
testing the Cozy client and its state utilities.

Architecture:
    - MockUnifiedAPI: In-memory async fake for UnifiedCozyAPI
    - Factories: Generate test data (projects, tasks, calendars, events)
    - Fixtures: Provide configured clients and mock data
    - Markers: Custom pytest markers for test categorization
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Iterable
from unittest.mock import patch

import pytest

from cozy_mcp.client import CozyClient
from cozy_mcp.constants import TaskLabel, TaskPriority, TaskStatus
from cozy_mcp.exceptions import CozyAPIError, CozyNotFoundError
from cozy_mcp.models import (
    AuthResponse,
    Calendar,
    CalendarCreate,
    CalendarUpdate,
    Event,
    EventCreate,
    EventUpdate,
    LoginPayload,
    Project,
    ProjectCreate,
    ProjectUpdate,
    RegisterPayload,
    Task,
    TaskCreate,
    TaskUpdate,
    User,
)
from cozy_mcp.models.base import ensure_aware
from cozy_mcp.state import UrlState


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "state: Client-side state utilities")
    config.addinivalue_line("markers", "auth: Authentication and session tests")
    config.addinivalue_line("markers", "projects: Project-related tests")
    config.addinivalue_line("markers", "tasks: Task-related tests")
    config.addinivalue_line("markers", "calendars: Calendar-related tests")
    config.addinivalue_line("markers", "events: Event-related tests")
    config.addinivalue_line("markers", "http: Service client tests over a mock transport")
    config.addinivalue_line("markers", "errors: Error handling tests")


# =============================================================================
# Time Utilities
# =============================================================================


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """Aware UTC datetime shorthand."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def days_from_now(n: int) -> datetime:
    """Get datetime n days from now."""
    return utc_now() + timedelta(days=n)


# =============================================================================
# ID Generators
# =============================================================================


class IDGenerator:
    """Sequential integer IDs for test objects."""

    _counter: int = 0

    @classmethod
    def reset(cls) -> None:
        """Reset counter (call in fixtures)."""
        cls._counter = 0

    @classmethod
    def next_id(cls) -> int:
        """Generate next unique ID."""
        cls._counter += 1
        return cls._counter


# =============================================================================
# Test Data Factories
# =============================================================================


class UserFactory:
    """Factory for creating User test objects."""

    @staticmethod
    def create(id: int = 1, email: str = "test@example.com", username: str = "tester") -> User:
        return User(id=id, email=email, username=username)


class ProjectFactory:
    """Factory for creating Project test objects."""

    @staticmethod
    def create(id: int | None = None, name: str = "Test Project", **kwargs: Any) -> Project:
        """Create a Project with sensible defaults."""
        now = utc_now()
        return Project(
            id=id or IDGenerator.next_id(),
            name=name,
            created_at=kwargs.pop("created_at", now),
            updated_at=kwargs.pop("updated_at", now),
            **kwargs,
        )

    @staticmethod
    def create_batch(count: int, **kwargs: Any) -> list[Project]:
        return [ProjectFactory.create(name=f"Project {i + 1}", **kwargs) for i in range(count)]


class TaskFactory:
    """Factory for creating Task test objects."""

    @staticmethod
    def create(
        id: int | None = None,
        project_id: int = 1,
        title: str = "Test Task",
        status: TaskStatus = TaskStatus.TODO,
        priority: TaskPriority | None = None,
        label: TaskLabel | None = None,
        **kwargs: Any,
    ) -> Task:
        """Create a Task with sensible defaults."""
        return Task(
            id=id or IDGenerator.next_id(),
            project_id=project_id,
            title=title,
            status=status,
            priority=priority,
            label=label,
            created_at=kwargs.pop("created_at", utc_now()),
            **kwargs,
        )


class CalendarFactory:
    """Factory for creating Calendar test objects."""

    @staticmethod
    def create(id: int | None = None, name: str = "Test Calendar", color: str | None = "#4CAFF6", **kwargs: Any) -> Calendar:
        return Calendar(id=id or IDGenerator.next_id(), user_id=1, name=name, color=color, **kwargs)


class EventFactory:
    """Factory for creating Event test objects."""

    @staticmethod
    def create(
        id: int | None = None,
        calendar_id: int = 1,
        title: str = "Test Event",
        start_time: datetime | None = None,
        duration: timedelta = timedelta(hours=1),
        **kwargs: Any,
    ) -> Event:
        start = start_time or utc(2025, 1, 15, 9)
        return Event(
            id=id or IDGenerator.next_id(),
            calendar_id=calendar_id,
            user_id=1,
            title=title,
            start_time=start,
            end_time=kwargs.pop("end_time", start + duration),
            **kwargs,
        )


# =============================================================================
# Mock API Classes
# =============================================================================


class MockUnifiedAPI:
    """
    In-memory fake for UnifiedCozyAPI.

    Stores entities in dicts keyed by id, mirrors the services' cascading
    deletes, and records every call. ``should_fail[method]`` makes a method
    raise the given exception.
    """

    def __init__(self):
        """Initialize mock with empty data stores."""
        self.user: User = UserFactory.create()
        self.password: str = "secret123"
        self.projects: dict[int, Project] = {}
        self.tasks: dict[int, Task] = {}
        self.calendars: dict[int, Calendar] = {}
        self.events: dict[int, Event] = {}
        self._initialized: bool = False

        # Track method calls for verification
        self.call_history: list[tuple[str, tuple, dict]] = []

        # Configurable behaviors
        self.should_fail: dict[str, Exception | None] = {}
        self.status_returns_body: bool = True
        # the event service answers PUT with an empty 200
        self.event_update_returns_body: bool = False

    def _record_call(self, method: str, args: tuple, kwargs: dict) -> None:
        """Record method call for verification."""
        self.call_history.append((method, args, kwargs))

    def _check_failure(self, method: str) -> None:
        """Check if method should raise an exception."""
        if method in self.should_fail and self.should_fail[method]:
            raise self.should_fail[method]

    def _require(self, service: str, body: dict[str, Any], *fields: str) -> None:
        """Reject a replacement body missing a field the service requires."""
        missing = [name for name in fields if not body.get(name)]
        if missing:
            raise CozyAPIError(f"Missing required fields ({', '.join(missing)})", status_code=400, service=service)

    def _enter(self, method: str, *args: Any) -> None:
        self._record_call(method, args, {})
        self._check_failure(method)

    @staticmethod
    def _get(store: dict[int, Any], entity_id: int, kind: str) -> Any:
        if entity_id not in store:
            raise CozyNotFoundError(f"{kind} not found", status_code=404)
        return store[entity_id]

    async def initialize(self) -> None:
        """Mock initialization."""
        self._enter("initialize")
        self._initialized = True

    async def close(self) -> None:
        """Mock close."""
        self._record_call("close", (), {})
        self._initialized = False

    # -------------------------------------------------------------------------
    # Auth Operations
    # -------------------------------------------------------------------------

    async def login(self, payload: LoginPayload) -> AuthResponse:
        self._enter("login", payload)
        if payload.email != self.user.email or payload.password != self.password:
            raise CozyAPIError("Invalid email or password", status_code=401, service="auth")
        return AuthResponse(token="test-token", user=self.user)

    async def register(self, payload: RegisterPayload) -> str:
        self._enter("register", payload)
        return "User registered successfully"

    async def get_me(self) -> User:
        self._enter("get_me")
        return self.user

    # -------------------------------------------------------------------------
    # Project Operations
    # -------------------------------------------------------------------------

    async def list_projects(self) -> list[Project]:
        self._enter("list_projects")
        return list(self.projects.values())

    async def get_project(self, project_id: int) -> Project:
        self._enter("get_project", project_id)
        return self._get(self.projects, project_id, "project")

    async def create_project(self, payload: ProjectCreate) -> Project:
        self._enter("create_project", payload)
        project = ProjectFactory.create(**payload.to_payload())
        self.projects[project.id] = project
        return project

    async def update_project(self, project_id: int, payload: ProjectUpdate) -> Project:
        self._enter("update_project", project_id, payload)
        project = self._get(self.projects, project_id, "project")
        updated = project.model_copy(update=payload.to_payload())
        self.projects[project_id] = updated
        return updated

    async def delete_project(self, project_id: int) -> None:
        self._enter("delete_project", project_id)
        self._get(self.projects, project_id, "project")
        del self.projects[project_id]
        self.tasks = {k: t for k, t in self.tasks.items() if t.project_id != project_id}

    # -------------------------------------------------------------------------
    # Task Operations
    # -------------------------------------------------------------------------

    async def list_tasks(self, project_id: int) -> list[Task]:
        self._enter("list_tasks", project_id)
        return [t for t in self.tasks.values() if t.project_id == project_id]

    async def get_task(self, task_id: int) -> Task:
        self._enter("get_task", task_id)
        return self._get(self.tasks, task_id, "task")

    async def create_task(self, project_id: int, payload: TaskCreate) -> Task:
        self._enter("create_task", project_id, payload)
        self._get(self.projects, project_id, "project")
        task = Task.model_validate({"id": IDGenerator.next_id(), "project_id": project_id, **payload.to_payload()})
        self.tasks[task.id] = task
        return task

    async def update_task(self, project_id: int, task_id: int, payload: TaskUpdate) -> Task:
        self._enter("update_task", project_id, task_id, payload)
        task = self._get(self.tasks, task_id, "task")
        body = payload.to_payload()
        self._require("tasks", body, "title", "status", "priority")
        updated = Task.model_validate({**task.model_dump(mode="json"), **body})
        self.tasks[task_id] = updated
        return updated

    async def update_task_status(self, task_id: int, status: TaskStatus) -> Task | None:
        self._enter("update_task_status", task_id, status)
        task = self._get(self.tasks, task_id, "task")
        updated = task.model_copy(update={"status": status})
        self.tasks[task_id] = updated
        return updated if self.status_returns_body else None

    async def delete_task(self, task_id: int) -> None:
        self._enter("delete_task", task_id)
        self._get(self.tasks, task_id, "task")
        del self.tasks[task_id]

    # -------------------------------------------------------------------------
    # Calendar Operations
    # -------------------------------------------------------------------------

    async def list_calendars(self) -> list[Calendar]:
        self._enter("list_calendars")
        return list(self.calendars.values())

    async def get_calendar(self, calendar_id: int) -> Calendar:
        self._enter("get_calendar", calendar_id)
        return self._get(self.calendars, calendar_id, "calendar")

    async def create_calendar(self, payload: CalendarCreate) -> Calendar:
        self._enter("create_calendar", payload)
        calendar = CalendarFactory.create(**{"color": None, **payload.to_payload()})
        self.calendars[calendar.id] = calendar
        return calendar

    async def update_calendar(self, calendar_id: int, payload: CalendarUpdate) -> Calendar:
        self._enter("update_calendar", calendar_id, payload)
        calendar = self._get(self.calendars, calendar_id, "calendar")
        body = payload.to_payload()
        self._require("calendars", body, "name")
        updated = calendar.model_copy(update=body)
        self.calendars[calendar_id] = updated
        return updated

    async def delete_calendar(self, calendar_id: int) -> None:
        self._enter("delete_calendar", calendar_id)
        self._get(self.calendars, calendar_id, "calendar")
        del self.calendars[calendar_id]
        self.events = {k: e for k, e in self.events.items() if e.calendar_id != calendar_id}

    # -------------------------------------------------------------------------
    # Event Operations
    # -------------------------------------------------------------------------

    async def list_events(self, calendar_ids: Iterable[int], start: datetime, end: datetime) -> list[Event]:
        ids = sorted(set(calendar_ids))
        self._enter("list_events", ids, start, end)
        lo, hi = ensure_aware(start), ensure_aware(end)
        found = [
            e
            for e in self.events.values()
            if e.calendar_id in ids and e.end_time >= lo and e.start_time <= hi
        ]
        return sorted(found, key=lambda e: (e.start_time, e.id))

    async def get_event(self, event_id: int) -> Event:
        self._enter("get_event", event_id)
        return self._get(self.events, event_id, "event")

    async def create_event(self, payload: EventCreate) -> Event:
        self._enter("create_event", payload)
        self._get(self.calendars, payload.calendar_id, "calendar")
        event = Event.model_validate({"id": IDGenerator.next_id(), "user_id": self.user.id, **payload.to_payload()})
        self.events[event.id] = event
        return event

    async def update_event(self, event_id: int, payload: EventUpdate) -> Event | None:
        self._enter("update_event", event_id, payload)
        event = self._get(self.events, event_id, "event")
        body = payload.to_payload()
        self._require("events", body, "title", "start_time", "end_time")
        updated = Event.model_validate({**event.model_dump(mode="json"), **body})
        self.events[event_id] = updated
        return updated if self.event_update_returns_body else None

    async def delete_event(self, event_id: int) -> None:
        self._enter("delete_event", event_id)
        self._get(self.events, event_id, "event")
        del self.events[event_id]

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def seed_projects(self, *ids: int) -> list[Project]:
        """Seed projects with explicit ids (server order is kept as given)."""
        projects = [ProjectFactory.create(id=i, name=f"Project {i}") for i in ids]
        for project in projects:
            self.projects[project.id] = project
        return projects

    def seed_calendars(self, *ids: int) -> list[Calendar]:
        calendars = [CalendarFactory.create(id=i, name=f"Calendar {i}") for i in ids]
        for calendar in calendars:
            self.calendars[calendar.id] = calendar
        return calendars

    def add_task(self, **kwargs: Any) -> Task:
        task = TaskFactory.create(**kwargs)
        self.tasks[task.id] = task
        return task

    def add_event(self, **kwargs: Any) -> Event:
        event = EventFactory.create(**kwargs)
        self.events[event.id] = event
        return event

    def clear_call_history(self) -> None:
        """Clear recorded method calls."""
        self.call_history.clear()

    def get_calls(self, method_name: str) -> list[tuple[tuple, dict]]:
        """Get all calls to a specific method."""
        return [(args, kwargs) for name, args, kwargs in self.call_history if name == method_name]

    def assert_called(self, method_name: str, times: int | None = None) -> None:
        """Assert a method was called (optionally a specific number of times)."""
        calls = self.get_calls(method_name)
        if times is not None:
            assert len(calls) == times, f"Expected {method_name} to be called {times} times, got {len(calls)}"
        else:
            assert len(calls) > 0, f"Expected {method_name} to be called at least once"

    def assert_not_called(self, method_name: str) -> None:
        """Assert a method was not called."""
        calls = self.get_calls(method_name)
        assert len(calls) == 0, f"Expected {method_name} not to be called, but was called {len(calls)} times"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def id_generator():
    """Reset and provide ID generator; seeded ids stay below generated ones."""
    IDGenerator.reset()
    IDGenerator._counter = 1000
    return IDGenerator


@pytest.fixture
def mock_api() -> MockUnifiedAPI:
    """Create a fresh mock API instance."""
    return MockUnifiedAPI()


@pytest.fixture
def url() -> UrlState:
    return UrlState("/tasks")


@pytest.fixture
async def client(mock_api: MockUnifiedAPI) -> AsyncIterator[CozyClient]:
    """
    Create a CozyClient with mocked API.

    This fixture patches UnifiedCozyAPI to use our mock, allowing tests to
    run without actual HTTP calls. Reads are not retried.
    """
    with patch("cozy_mcp.client.client.UnifiedCozyAPI") as MockAPIClass:
        MockAPIClass.return_value = mock_api

        client = CozyClient(retry=0, retry_delay=0, url="/tasks")

        # Replace the internal API with our mock
        client._api = mock_api

        await client.connect()
        yield client
        await client.disconnect()


@pytest.fixture
async def logged_in_client(client: CozyClient, mock_api: MockUnifiedAPI) -> CozyClient:
    """Client with an active session."""
    await client.login(mock_api.user.email, mock_api.password)
    client.notifier.drain()
    return client
