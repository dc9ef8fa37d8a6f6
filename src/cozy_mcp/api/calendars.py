"""Calendar service client."""

from __future__ import annotations

from cozy_mcp.api.base import BaseServiceClient
from cozy_mcp.models import Calendar, CalendarCreate, CalendarUpdate


class CalendarServiceClient(BaseServiceClient):
    """Client for calendars of the authenticated user."""

    service_name = "calendars"

    async def list_calendars(self) -> list[Calendar]:
        return Calendar.list_from_api(await self._request("GET", "/calendars"))

    async def get_calendar(self, calendar_id: int) -> Calendar:
        return Calendar.from_api(await self._request("GET", f"/calendars/{calendar_id}"))

    async def create_calendar(self, payload: CalendarCreate) -> Calendar:
        return Calendar.from_api(await self._request("POST", "/calendars", json=payload.to_payload()))

    async def update_calendar(self, calendar_id: int, payload: CalendarUpdate) -> Calendar:
        data = await self._request("PUT", f"/calendars/{calendar_id}", json=payload.to_payload())
        return Calendar.from_api(data)

    async def delete_calendar(self, calendar_id: int) -> None:
        """Delete a calendar. The backend cascades the delete to its events."""
        await self._request("DELETE", f"/calendars/{calendar_id}")
