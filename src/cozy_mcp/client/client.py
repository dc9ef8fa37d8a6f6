"""
Cozy Client.

This module provides the main CozyClient class, the application context
that composes the unified API with the client-side state: session, query
cache, URL state, selection resolvers, filters, calendar view and
notifications.

Reads go through the query cache. Every mutation reports its outcome as
a notification, invalidates the queries it made stale, and re-raises on
failure. Mutations are never retried.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from types import TracebackType
from typing import Any, AsyncIterator, Iterable, Optional, TypeVar

import httpx

from cozy_mcp.client.task_table import TaskFilters, filter_tasks
from cozy_mcp.constants import (
    CALENDAR_PARAM,
    CALENDARS_FILTER_PARAM,
    DEFAULT_AUTHENTICATED_PATH,
    LOGIN_PATH,
    PROJECT_PARAM,
    CalendarViewMode,
    TaskStatus,
)
from cozy_mcp.exceptions import CozyError, CozyNotFoundError, CozyValidationError
from cozy_mcp.models import (
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
    TaskStatusUpdate,
    TaskUpdate,
    User,
)
from cozy_mcp.routes import RouteDecision, gate_route
from cozy_mcp.settings import Settings, get_settings
from cozy_mcp.state import (
    CacheInvalidationRouter,
    CalendarViewState,
    EntityKind,
    MultiSelectFilter,
    Notifier,
    QueryCache,
    Resolution,
    ResolutionStatus,
    SelectionResolver,
    SessionStore,
    UrlState,
    group_events_by_day,
)
from cozy_mcp.state import query_keys as qk
from cozy_mcp.unified.api import UnifiedCozyAPI

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="CozyClient")


class CozyClient:
    """
    Application context for the Cozy task and calendar services.

    Usage:
        async with CozyClient.from_settings() as client:
            await client.login("me@example.com", "secret")
            resolution = await client.resolve_project()
            tasks = await client.list_tasks()
    """

    def __init__(
        self,
        auth_url: str = "http://localhost:8080",
        task_url: str = "http://localhost:8081",
        calendar_url: str = "http://localhost:8082",
        event_url: str = "http://localhost:8083",
        *,
        email: Optional[str] = None,
        password: Optional[str] = None,
        session_file: Optional[str] = None,
        timeout: float = 30.0,
        stale_time: float = 60.0,
        gc_time: float = 300.0,
        retry: int = 3,
        retry_delay: float = 0.5,
        url: str = "/",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._email = email
        self._password = password

        self.session = SessionStore(session_file)
        self._api = UnifiedCozyAPI(
            auth_url=auth_url,
            task_url=task_url,
            calendar_url=calendar_url,
            event_url=event_url,
            token_provider=self.session.get_token,
            timeout=timeout,
            transport=transport,
        )

        self.cache = QueryCache(
            stale_time=stale_time,
            gc_time=gc_time,
            retry=retry,
            retry_delay=retry_delay,
        )
        self.invalidation = CacheInvalidationRouter(self.cache)
        self.url = UrlState(url)
        self.notifier = Notifier()
        self.calendar_view = CalendarViewState()

        self.project_resolver: SelectionResolver[Project] = SelectionResolver(PROJECT_PARAM)
        self.calendar_resolver: SelectionResolver[Calendar] = SelectionResolver(CALENDAR_PARAM)
        self.calendar_filter = MultiSelectFilter(CALENDARS_FILTER_PARAM)

        self._connected = False

    @classmethod
    def from_settings(cls: type[T], settings: Optional[Settings] = None, **kwargs: Any) -> T:
        """Build a client from ``COZY_*`` environment settings."""
        settings = settings or get_settings()
        return cls(
            auth_url=settings.auth_service_url,
            task_url=settings.task_service_url,
            calendar_url=settings.calendar_service_url,
            event_url=settings.event_service_url,
            email=settings.email,
            password=settings.password.get_secret_value() if settings.password else None,
            session_file=settings.session_file,
            timeout=settings.request_timeout,
            stale_time=settings.query_stale_time,
            gc_time=settings.query_gc_time,
            retry=settings.query_retry,
            retry_delay=settings.query_retry_delay,
            **kwargs,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def connect(self) -> None:
        """
        Initialize the API and log in if credentials are configured.

        A session restored from the session file is reused as is.
        """
        if self._connected:
            return
        await self._api.initialize()
        self._connected = True
        if not self.session.is_authenticated and self._email and self._password:
            await self.login(self._email, self._password)
        logger.info("Client connected (authenticated=%s)", self.session.is_authenticated)

    async def disconnect(self) -> None:
        await self._api.close()
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    async def __aenter__(self: T) -> T:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.disconnect()

    @asynccontextmanager
    async def _mutation(self, action: str) -> AsyncIterator[None]:
        """Report a failed mutation as an error notification and re-raise."""
        try:
            yield
        except CozyError as e:
            self.notifier.error(f"Failed to {action}: {e.message}")
            raise

    # =========================================================================
    # Navigation
    # =========================================================================

    def open(self, path: str) -> RouteDecision:
        """
        Navigate to ``path`` through the route gate.

        A redirect is followed immediately; the returned decision tells
        whether the requested page itself was served.
        """
        decision = gate_route(path.split("?", 1)[0], self.session.cookies())
        self.url.navigate(path if decision.allowed else decision.location)
        return decision

    # =========================================================================
    # Auth
    # =========================================================================

    async def login(self, email: str, password: str) -> User:
        """Log in, store the session and go to the task page."""
        async with self._mutation("log in"):
            payload = LoginPayload.build(email=email, password=password)
            auth = await self._api.login(payload)
        self.session.set_auth(auth.token, auth.user)
        self.cache.set_data(qk.me(), auth.user)
        self.notifier.success("Login successful!")
        self.url.navigate(DEFAULT_AUTHENTICATED_PATH)
        return auth.user

    async def register(self, username: str, email: str, password: str) -> str:
        """Create an account. The caller still has to log in."""
        async with self._mutation("register"):
            payload = RegisterPayload.build(username=username, email=email, password=password)
            message = await self._api.register(payload)
        self.notifier.success(message or "Registration successful!")
        return message

    def logout(self) -> None:
        """Drop the session and every cached query."""
        self.session.clear_auth()
        self.cache.clear()
        self.notifier.success("Logged out successfully.")
        self.url.navigate(LOGIN_PATH)

    async def me(self, *, force: bool = False) -> User:
        user = await self.cache.fetch(qk.me(), self._api.get_me, force=force)
        self.session.set_user(user)
        return user

    # =========================================================================
    # Projects
    # =========================================================================

    async def list_projects(self, *, force: bool = False) -> list[Project]:
        return await self.cache.fetch(qk.projects(), self._api.list_projects, force=force)

    async def get_project(self, project_id: int) -> Project:
        return await self.cache.fetch(qk.project(project_id), lambda: self._api.get_project(project_id))

    async def create_project(self, name: str, description: Optional[str] = None) -> Project:
        async with self._mutation("create project"):
            payload = ProjectCreate.build(name=name, description=description)
            project = await self._api.create_project(payload)
        self.invalidation.created(EntityKind.PROJECT, project)
        self.notifier.success(f'Project "{project.name}" created!')
        return project

    async def update_project(self, project_id: int, **fields: Any) -> Project:
        current = await self.get_project(project_id)
        if not fields:
            self.notifier.info("No changes detected.")
            return current
        async with self._mutation("update project"):
            payload = ProjectUpdate.replacing(current, **fields)
            project = await self._api.update_project(project_id, payload)
        self.invalidation.updated(EntityKind.PROJECT, project)
        self.notifier.success(f'Project "{project.name}" updated!')
        return project

    async def delete_project(self, project_id: int) -> None:
        """Delete a project and its tasks, re-resolving the selection if it was selected."""
        name = self._cached_name(qk.projects(), project_id, "name")
        async with self._mutation("delete project"):
            await self._api.delete_project(project_id)
        self.invalidation.deleted(EntityKind.PROJECT, project_id)
        self.notifier.success(f'Project "{name or project_id}" and its tasks deleted.')
        if self.url.get(PROJECT_PARAM) == str(project_id):
            await self.resolve_project()

    async def resolve_project(self) -> Resolution[Project]:
        """Reconcile ``projectId`` in the URL with the project list."""
        try:
            projects = await self.list_projects()
        except CozyError as e:
            return self.project_resolver.resolve(self.url, None, error=e)
        return self.project_resolver.resolve(self.url, projects)

    async def select_project(self, project_id: int) -> Project:
        projects = await self.list_projects()
        project = self.project_resolver.select(self.url, projects, project_id)
        if project is None:
            raise CozyNotFoundError(f"Project {project_id} not found", status_code=404, service="tasks")
        return project

    async def _selected_project_id(self) -> Optional[int]:
        resolution = await self.resolve_project()
        return resolution.selected.id if resolution.selected else None

    # =========================================================================
    # Tasks
    # =========================================================================

    async def list_tasks(
        self,
        project_id: Optional[int] = None,
        filters: Optional[TaskFilters] = None,
        *,
        force: bool = False,
    ) -> list[Task]:
        """
        Tasks of a project, filtered and sorted client-side.

        Without ``project_id`` the currently selected project is used; no
        project at all yields an empty list.
        """
        if project_id is None:
            project_id = await self._selected_project_id()
            if project_id is None:
                return []
        pid = project_id
        tasks = await self.cache.fetch(qk.tasks(pid), lambda: self._api.list_tasks(pid), force=force)
        return filter_tasks(tasks, filters)

    async def get_task(self, task_id: int) -> Task:
        return await self.cache.fetch(qk.task(task_id), lambda: self._api.get_task(task_id))

    async def create_task(self, title: str, project_id: Optional[int] = None, **fields: Any) -> Task:
        """Create a task in ``project_id`` or, by default, the selected project."""
        if project_id is None:
            project_id = await self._selected_project_id()
        if project_id is None:
            self.notifier.error("Cannot add task: No project selected.")
            raise CozyValidationError("No project selected", {"project_id": "required"})
        async with self._mutation("create task"):
            payload = TaskCreate.build(title=title, **fields)
            task = await self._api.create_task(project_id, payload)
        self.invalidation.created(EntityKind.TASK, task)
        self.notifier.success(f'Task "{task.title}" created successfully!')
        return task

    async def update_task(self, task_id: int, **fields: Any) -> Task:
        current = await self.get_task(task_id)
        if not fields:
            self.notifier.info("No changes detected.")
            return current
        async with self._mutation("update task"):
            payload = TaskUpdate.replacing(current, **fields)
            task = await self._api.update_task(current.project_id, task_id, payload)
        self.invalidation.updated(EntityKind.TASK, task, previous_parent_id=current.project_id)
        self.notifier.success(f'Task "{task.title}" updated!')
        return task

    async def update_task_status(self, task_id: int, status: TaskStatus | str) -> Task:
        current = await self.get_task(task_id)
        async with self._mutation("update task status"):
            payload = TaskStatusUpdate.build(status=status)
            task = await self._api.update_task_status(task_id, payload.status)
        # the service may answer with an empty body
        task = task or current.model_copy(update={"status": payload.status})
        self.invalidation.updated(EntityKind.TASK, task)
        self.notifier.success(f'Task "{task.title}" moved to {payload.status.value}.')
        return task

    async def delete_task(self, task_id: int, project_id: Optional[int] = None) -> None:
        if project_id is None:
            project_id = (await self.get_task(task_id)).project_id
        async with self._mutation("delete task"):
            await self._api.delete_task(task_id)
        self.invalidation.deleted(EntityKind.TASK, task_id, parent_id=project_id)
        self.notifier.success("Task deleted successfully!")

    # =========================================================================
    # Calendars
    # =========================================================================

    async def list_calendars(self, *, force: bool = False) -> list[Calendar]:
        return await self.cache.fetch(qk.calendars(), self._api.list_calendars, force=force)

    async def get_calendar(self, calendar_id: int) -> Calendar:
        return await self.cache.fetch(qk.calendar(calendar_id), lambda: self._api.get_calendar(calendar_id))

    async def create_calendar(
        self,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Calendar:
        async with self._mutation("create calendar"):
            payload = CalendarCreate.build(name=name, description=description, color=color)
            calendar = await self._api.create_calendar(payload)
        self.invalidation.created(EntityKind.CALENDAR, calendar)
        self.notifier.success(f'Calendar "{calendar.name}" created!')
        return calendar

    async def update_calendar(self, calendar_id: int, **fields: Any) -> Calendar:
        current = await self.get_calendar(calendar_id)
        if not fields:
            self.notifier.info("No changes detected.")
            return current
        async with self._mutation("update calendar"):
            payload = CalendarUpdate.replacing(current, **fields)
            calendar = await self._api.update_calendar(calendar_id, payload)
        self.invalidation.updated(EntityKind.CALENDAR, calendar)
        self.notifier.success(f'Calendar "{calendar.name}" updated!')
        return calendar

    async def delete_calendar(self, calendar_id: int) -> Resolution[Calendar]:
        """
        Delete a calendar and its events.

        The deleted id is dropped from the calendar filter and, if it was
        the selected calendar, the selection falls back to the first
        remaining calendar (or clears when none is left).
        """
        name = self._cached_name(qk.calendars(), calendar_id, "name")
        async with self._mutation("delete calendar"):
            await self._api.delete_calendar(calendar_id)
        self.invalidation.deleted(EntityKind.CALENDAR, calendar_id)
        self.notifier.success(f'Calendar "{name or calendar_id}" and its events deleted.')

        resolution = await self.resolve_calendar()
        if resolution.status != ResolutionStatus.ERROR:
            remaining = [c.id for c in await self.list_calendars()]
            self.calendar_filter.prune(self.url, remaining)
        return resolution

    async def resolve_calendar(self) -> Resolution[Calendar]:
        """Reconcile ``calendarId`` in the URL with the calendar list."""
        try:
            calendars = await self.list_calendars()
        except CozyError as e:
            return self.calendar_resolver.resolve(self.url, None, error=e)
        return self.calendar_resolver.resolve(self.url, calendars)

    async def select_calendar(self, calendar_id: int) -> Calendar:
        calendars = await self.list_calendars()
        calendar = self.calendar_resolver.select(self.url, calendars, calendar_id)
        if calendar is None:
            raise CozyNotFoundError(f"Calendar {calendar_id} not found", status_code=404, service="calendars")
        return calendar

    async def filtered_calendar_ids(self) -> list[int]:
        """Ids in the calendars filter, seeding the one-time default first."""
        calendars = await self.list_calendars()
        self.calendar_filter.apply_default(self.url, calendars)
        return self.calendar_filter.selected(self.url)

    def toggle_calendar(self, calendar_id: int, checked: bool) -> list[int]:
        return self.calendar_filter.toggle(self.url, calendar_id, checked)

    # =========================================================================
    # Events
    # =========================================================================

    async def list_events(
        self,
        calendar_ids: Iterable[int],
        start: datetime,
        end: datetime,
        *,
        force: bool = False,
    ) -> list[Event]:
        ids = sorted(set(calendar_ids))
        if not ids:
            return []
        key = qk.events_range(ids, start, end)
        return await self.cache.fetch(key, lambda: self._api.list_events(ids, start, end), force=force)

    async def get_event(self, event_id: int) -> Event:
        return await self.cache.fetch(qk.event(event_id), lambda: self._api.get_event(event_id))

    async def create_event(
        self,
        title: str,
        start_time: datetime,
        end_time: datetime,
        calendar_id: Optional[int] = None,
        **fields: Any,
    ) -> Event:
        """Create an event in ``calendar_id`` or, by default, the selected calendar."""
        if calendar_id is None:
            resolution = await self.resolve_calendar()
            calendar_id = resolution.selected.id if resolution.selected else None
        if calendar_id is None:
            self.notifier.error("Cannot add event: No calendar selected.")
            raise CozyValidationError("No calendar selected", {"calendar_id": "required"})
        async with self._mutation("create event"):
            payload = EventCreate.build(
                calendar_id=calendar_id,
                title=title,
                start_time=start_time,
                end_time=end_time,
                **fields,
            )
            event = await self._api.create_event(payload)
        self.invalidation.created(EntityKind.EVENT, event)
        self.notifier.success(f'Event "{event.title}" created!')
        return event

    async def update_event(self, event_id: int, **fields: Any) -> Event:
        current = await self.get_event(event_id)
        if not fields:
            self.notifier.info("No changes detected.")
            return current
        async with self._mutation("update event"):
            payload = EventUpdate.replacing(current, **fields)
            event = await self._api.update_event(event_id, payload)
        # the service answers with an empty body
        event = event or Event.model_validate({**current.model_dump(), **payload.model_dump()})
        self.invalidation.updated(EntityKind.EVENT, event, previous_parent_id=current.calendar_id)
        self.notifier.success(f'Event "{event.title}" updated!')
        return event

    async def delete_event(self, event_id: int, calendar_id: Optional[int] = None) -> None:
        if calendar_id is None:
            calendar_id = (await self.get_event(event_id)).calendar_id
        async with self._mutation("delete event"):
            await self._api.delete_event(event_id)
        self.invalidation.deleted(EntityKind.EVENT, event_id, parent_id=calendar_id)
        self.notifier.success("Event deleted successfully!")

    async def visible_events(self) -> list[Event]:
        """Events of the filtered calendars inside the calendar view's range."""
        ids = await self.filtered_calendar_ids()
        start, end = self.calendar_view.visible_window()
        return await self.list_events(ids, start, end)

    async def visible_agenda(self) -> dict[date, list[Event]]:
        """``visible_events`` bucketed per visible day."""
        events = await self.visible_events()
        return group_events_by_day(events, self.calendar_view.visible_days())

    def set_calendar_view(self, view: CalendarViewMode | str, day: Optional[date] = None) -> None:
        self.calendar_view.set_view(view)
        if day is not None:
            self.calendar_view.set_date(day)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _cached_name(self, list_key: qk.QueryKey, entity_id: int, attr: str) -> Optional[str]:
        for item in self.cache.peek(list_key) or []:
            if item.id == entity_id:
                return getattr(item, attr)
        return None
