"""
Cozy Service Clients.

One httpx-based client per backend service; each addresses its own base
URL and shares the bearer-token and error-mapping plumbing in ``base``.
"""

from cozy_mcp.api.base import BaseServiceClient
from cozy_mcp.api.auth import AuthServiceClient
from cozy_mcp.api.tasks import TaskServiceClient
from cozy_mcp.api.calendars import CalendarServiceClient
from cozy_mcp.api.events import EventServiceClient

__all__ = [
    "BaseServiceClient",
    "AuthServiceClient",
    "TaskServiceClient",
    "CalendarServiceClient",
    "EventServiceClient",
]
