"""Event service client."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Iterable

from cozy_mcp.api.base import BaseServiceClient
from cozy_mcp.models import Event, EventCreate, EventUpdate, format_rfc3339


class EventServiceClient(BaseServiceClient):
    """Client for calendar events."""

    service_name = "events"

    async def list_events(self, calendar_id: int, start: datetime, end: datetime) -> list[Event]:
        """List events of one calendar overlapping ``[start, end]``."""
        data = await self._request(
            "GET",
            f"/calendars/{calendar_id}/events",
            params={"start": format_rfc3339(start), "end": format_rfc3339(end)},
        )
        return Event.list_from_api(data)

    async def list_events_for_calendars(
        self,
        calendar_ids: Iterable[int],
        start: datetime,
        end: datetime,
    ) -> list[Event]:
        """
        List events of several calendars, fetched concurrently.

        Results are merged and ordered by start time.
        """
        ids = sorted(set(calendar_ids))
        if not ids:
            return []
        batches = await asyncio.gather(*(self.list_events(cid, start, end) for cid in ids))
        events = [event for batch in batches for event in batch]
        events.sort(key=lambda e: (e.start_time, e.id))
        return events

    async def get_event(self, event_id: int) -> Event:
        return Event.from_api(await self._request("GET", f"/events/{event_id}"))

    async def create_event(self, payload: EventCreate) -> Event:
        return Event.from_api(await self._request("POST", "/events", json=payload.to_payload()))

    async def update_event(self, event_id: int, payload: EventUpdate) -> Event | None:
        """Replace an event. The service answers with an empty body, so this is usually None."""
        data = await self._request("PUT", f"/events/{event_id}", json=payload.to_payload())
        return Event.from_api(data) if isinstance(data, dict) and "id" in data else None

    async def delete_event(self, event_id: int) -> None:
        await self._request("DELETE", f"/events/{event_id}")
