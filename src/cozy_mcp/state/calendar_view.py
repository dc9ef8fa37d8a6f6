"""
Calendar view state: the reference date and the month/week/day mode.

Weeks start on Monday. The month view covers whole weeks, so its range
starts on the Monday on or before the 1st and ends on the Sunday on or
after the last day of the month.
"""

from __future__ import annotations

import calendar as _calendar
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, Optional

from cozy_mcp.constants import CalendarViewMode
from cozy_mcp.models import Event


def start_of_week(day: date) -> date:
    return day - timedelta(days=day.weekday())


def end_of_week(day: date) -> date:
    return start_of_week(day) + timedelta(days=6)


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def end_of_month(day: date) -> date:
    return day.replace(day=_calendar.monthrange(day.year, day.month)[1])


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day (Jan 31 + 1 -> Feb 28/29)."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last = _calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


class CalendarViewState:
    """Reference date plus view mode, owned by one client."""

    def __init__(
        self,
        current_date: Optional[date] = None,
        view: CalendarViewMode = CalendarViewMode.MONTH,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self.tz = tz
        self.current_date = current_date or datetime.now(tz).date()
        self.view = CalendarViewMode(view)

    def set_date(self, day: date) -> None:
        self.current_date = day

    def set_view(self, view: CalendarViewMode | str) -> None:
        self.view = CalendarViewMode(view)

    def today(self) -> date:
        self.current_date = datetime.now(self.tz).date()
        return self.current_date

    def navigate(self, step: int) -> date:
        """Move by ``step`` view units (months, weeks or days)."""
        if self.view == CalendarViewMode.MONTH:
            self.current_date = add_months(start_of_month(self.current_date), step)
        elif self.view == CalendarViewMode.WEEK:
            self.current_date = start_of_week(self.current_date) + timedelta(weeks=step)
        else:
            self.current_date = self.current_date + timedelta(days=step)
        return self.current_date

    def visible_range(self) -> tuple[date, date]:
        """First and last visible day, inclusive."""
        day = self.current_date
        if self.view == CalendarViewMode.MONTH:
            return start_of_week(start_of_month(day)), end_of_week(end_of_month(day))
        if self.view == CalendarViewMode.WEEK:
            return start_of_week(day), end_of_week(day)
        return day, day

    def visible_days(self) -> list[date]:
        first, last = self.visible_range()
        return [first + timedelta(days=i) for i in range((last - first).days + 1)]

    def visible_window(self) -> tuple[datetime, datetime]:
        """Aware datetimes bounding the visible range, for event queries."""
        first, last = self.visible_range()
        start = datetime.combine(first, time.min, tzinfo=self.tz)
        end = datetime.combine(last, time.max, tzinfo=self.tz)
        return start, end


def group_events_by_day(events: Iterable[Event], days: Iterable[date]) -> dict[date, list[Event]]:
    """
    Bucket events under every visible day they touch.

    Multi-day events appear on each day they span. Days without events map
    to an empty list; each bucket is ordered by start time.
    """
    day_list = list(days)
    grouped: dict[date, list[Event]] = defaultdict(list)
    for event in events:
        for day in day_list:
            if event.occurs_on(day):
                grouped[day].append(event)
    return {day: sorted(grouped.get(day, []), key=lambda e: e.start_time) for day in day_list}
