"""Cozy client: application context over the backend services."""

from cozy_mcp.client.client import CozyClient
from cozy_mcp.client.task_table import TaskFilters, TaskSortField, filter_tasks

__all__ = ["CozyClient", "TaskFilters", "TaskSortField", "filter_tasks"]
