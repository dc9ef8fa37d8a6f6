"""
Unified Cozy API.

This module provides the UnifiedCozyAPI class, the single entry point for
every backend operation.

It owns one client per backend service (auth, tasks, calendars, events),
supplies them with the session's bearer token, and validates payloads
before anything is sent.
"""

from __future__ import annotations

import logging
from datetime import datetime
from types import TracebackType
from typing import Callable, Iterable, Optional, TypeVar

import httpx

from cozy_mcp.api import (
    AuthServiceClient,
    CalendarServiceClient,
    EventServiceClient,
    TaskServiceClient,
)
from cozy_mcp.constants import TaskStatus
from cozy_mcp.exceptions import CozyConfigurationError
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

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="UnifiedCozyAPI")


class UnifiedCozyAPI:
    """
    Unified Cozy API over the four backend services.

    Usage:
        async with UnifiedCozyAPI(
            auth_url="http://localhost:8080",
            task_url="http://localhost:8081",
            calendar_url="http://localhost:8082",
            event_url="http://localhost:8083",
            token_provider=session.get_token,
        ) as api:
            auth = await api.login(LoginPayload(email="...", password="..."))
            projects = await api.list_projects()
    """

    def __init__(
        self,
        auth_url: str,
        task_url: str,
        calendar_url: str,
        event_url: str,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._urls = {
            "auth": auth_url,
            "tasks": task_url,
            "calendars": calendar_url,
            "events": event_url,
        }
        self._token_provider = token_provider
        self._timeout = timeout
        self._transport = transport

        # Clients (lazy initialized)
        self._auth: Optional[AuthServiceClient] = None
        self._tasks: Optional[TaskServiceClient] = None
        self._calendars: Optional[CalendarServiceClient] = None
        self._events: Optional[EventServiceClient] = None

        self._initialized = False

    # =========================================================================
    # Initialization & Lifecycle
    # =========================================================================

    async def initialize(self) -> None:
        """
        Create the service clients.

        This must be called before using the API, or use the async context manager.
        """
        if self._initialized:
            return

        missing = [name for name, url in self._urls.items() if not url]
        if missing:
            raise CozyConfigurationError(
                "Missing service URL(s): " + ", ".join(missing),
            )

        common = {
            "token_provider": self._token_provider,
            "timeout": self._timeout,
            "transport": self._transport,
        }
        self._auth = AuthServiceClient(self._urls["auth"], **common)
        self._tasks = TaskServiceClient(self._urls["tasks"], **common)
        self._calendars = CalendarServiceClient(self._urls["calendars"], **common)
        self._events = EventServiceClient(self._urls["events"], **common)

        self._initialized = True
        logger.info("Unified API initialized (%s)", ", ".join(f"{k}={v}" for k, v in self._urls.items()))

    async def close(self) -> None:
        """Close all service clients."""
        for client in (self._auth, self._tasks, self._calendars, self._events):
            if client is not None:
                await client.close()
        self._auth = self._tasks = self._calendars = self._events = None
        self._initialized = False

    async def __aenter__(self: T) -> T:
        """Enter async context manager."""
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context manager."""
        await self.close()

    def _ensure_initialized(self) -> None:
        """Ensure the API is initialized."""
        if not self._initialized:
            raise CozyConfigurationError(
                "API not initialized. Use 'await api.initialize()' or async context manager."
            )

    @property
    def auth(self) -> AuthServiceClient:
        self._ensure_initialized()
        return self._auth  # type: ignore[return-value]

    @property
    def tasks(self) -> TaskServiceClient:
        self._ensure_initialized()
        return self._tasks  # type: ignore[return-value]

    @property
    def calendars(self) -> CalendarServiceClient:
        self._ensure_initialized()
        return self._calendars  # type: ignore[return-value]

    @property
    def events(self) -> EventServiceClient:
        self._ensure_initialized()
        return self._events  # type: ignore[return-value]

    # =========================================================================
    # Auth Operations
    # =========================================================================

    async def login(self, payload: LoginPayload) -> AuthResponse:
        return await self.auth.login(payload)

    async def register(self, payload: RegisterPayload) -> str:
        return await self.auth.register(payload)

    async def get_me(self) -> User:
        return await self.auth.me()

    # =========================================================================
    # Project Operations
    # =========================================================================

    async def list_projects(self) -> list[Project]:
        return await self.tasks.list_projects()

    async def get_project(self, project_id: int) -> Project:
        return await self.tasks.get_project(project_id)

    async def create_project(self, payload: ProjectCreate) -> Project:
        return await self.tasks.create_project(payload)

    async def update_project(self, project_id: int, payload: ProjectUpdate) -> Project:
        return await self.tasks.update_project(project_id, payload)

    async def delete_project(self, project_id: int) -> None:
        await self.tasks.delete_project(project_id)

    # =========================================================================
    # Task Operations
    # =========================================================================

    async def list_tasks(self, project_id: int) -> list[Task]:
        return await self.tasks.list_tasks(project_id)

    async def get_task(self, task_id: int) -> Task:
        return await self.tasks.get_task(task_id)

    async def create_task(self, project_id: int, payload: TaskCreate) -> Task:
        return await self.tasks.create_task(project_id, payload)

    async def update_task(self, project_id: int, task_id: int, payload: TaskUpdate) -> Task:
        return await self.tasks.update_task(project_id, task_id, payload)

    async def update_task_status(self, task_id: int, status: TaskStatus) -> Optional[Task]:
        return await self.tasks.update_task_status(task_id, status)

    async def delete_task(self, task_id: int) -> None:
        await self.tasks.delete_task(task_id)

    # =========================================================================
    # Calendar Operations
    # =========================================================================

    async def list_calendars(self) -> list[Calendar]:
        return await self.calendars.list_calendars()

    async def get_calendar(self, calendar_id: int) -> Calendar:
        return await self.calendars.get_calendar(calendar_id)

    async def create_calendar(self, payload: CalendarCreate) -> Calendar:
        return await self.calendars.create_calendar(payload)

    async def update_calendar(self, calendar_id: int, payload: CalendarUpdate) -> Calendar:
        return await self.calendars.update_calendar(calendar_id, payload)

    async def delete_calendar(self, calendar_id: int) -> None:
        await self.calendars.delete_calendar(calendar_id)

    # =========================================================================
    # Event Operations
    # =========================================================================

    async def list_events(
        self,
        calendar_ids: Iterable[int],
        start: datetime,
        end: datetime,
    ) -> list[Event]:
        return await self.events.list_events_for_calendars(calendar_ids, start, end)

    async def get_event(self, event_id: int) -> Event:
        return await self.events.get_event(event_id)

    async def create_event(self, payload: EventCreate) -> Event:
        return await self.events.create_event(payload)

    async def update_event(self, event_id: int, payload: EventUpdate) -> Event | None:
        return await self.events.update_event(event_id, payload)

    async def delete_event(self, event_id: int) -> None:
        await self.events.delete_event(event_id)
