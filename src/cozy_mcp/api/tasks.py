"""Task/project service client."""

from __future__ import annotations

from cozy_mcp.api.base import BaseServiceClient
from cozy_mcp.constants import TaskStatus
from cozy_mcp.models import (
    Project,
    ProjectCreate,
    ProjectUpdate,
    Task,
    TaskCreate,
    TaskStatusUpdate,
    TaskUpdate,
)


class TaskServiceClient(BaseServiceClient):
    """Client for projects and their tasks."""

    service_name = "tasks"

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    async def list_projects(self) -> list[Project]:
        return Project.list_from_api(await self._request("GET", "/projects"))

    async def get_project(self, project_id: int) -> Project:
        return Project.from_api(await self._request("GET", f"/projects/{project_id}"))

    async def create_project(self, payload: ProjectCreate) -> Project:
        data = await self._request("POST", "/projects", json=payload.to_payload())
        return Project.from_api(data)

    async def update_project(self, project_id: int, payload: ProjectUpdate) -> Project:
        data = await self._request("PUT", f"/projects/{project_id}", json=payload.to_payload())
        return Project.from_api(data)

    async def delete_project(self, project_id: int) -> None:
        """Delete a project. The service cascades the delete to its tasks."""
        await self._request("DELETE", f"/projects/{project_id}")

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def list_tasks(self, project_id: int) -> list[Task]:
        return Task.list_from_api(await self._request("GET", f"/projects/{project_id}/tasks"))

    async def get_task(self, task_id: int) -> Task:
        return Task.from_api(await self._request("GET", f"/tasks/{task_id}"))

    async def create_task(self, project_id: int, payload: TaskCreate) -> Task:
        data = await self._request("POST", f"/projects/{project_id}/tasks", json=payload.to_payload())
        return Task.from_api(data)

    async def update_task(self, project_id: int, task_id: int, payload: TaskUpdate) -> Task:
        data = await self._request(
            "PUT",
            f"/projects/{project_id}/tasks/{task_id}",
            json=payload.to_payload(),
        )
        return Task.from_api(data)

    async def update_task_status(self, task_id: int, status: TaskStatus) -> Task | None:
        """Change only the status. Returns the task when the service echoes it."""
        data = await self._request(
            "PATCH",
            f"/tasks/{task_id}/status",
            json=TaskStatusUpdate(status=status).to_payload(),
        )
        return Task.from_api(data) if isinstance(data, dict) and "id" in data else None

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")
