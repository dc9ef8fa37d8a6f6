"""
Client-side state.

Everything the client keeps between calls, as explicit objects injected
into ``CozyClient`` rather than module-level singletons:

    - UrlState: current location and navigation history
    - QueryCache: cached server reads keyed by tuples
    - SelectionResolver: URL/candidates reconciliation for pickers
    - MultiSelectFilter: comma separated id sets in the URL
    - CacheInvalidationRouter: mutation -> stale query keys
    - SessionStore, CalendarViewState, Notifier
"""

from cozy_mcp.state.url import UrlState, NavigationEntry
from cozy_mcp.state.query_cache import QueryCache, QueryState, QueryStatus
from cozy_mcp.state.selection import SelectionResolver, Resolution, ResolutionStatus
from cozy_mcp.state.filters import MultiSelectFilter, decode_ids, encode_ids
from cozy_mcp.state.invalidation import CacheInvalidationRouter, EntityKind
from cozy_mcp.state.session import SessionStore
from cozy_mcp.state.calendar_view import CalendarViewState, group_events_by_day
from cozy_mcp.state.notifications import Notification, NotificationLevel, Notifier

__all__ = [
    "UrlState",
    "NavigationEntry",
    "QueryCache",
    "QueryState",
    "QueryStatus",
    "SelectionResolver",
    "Resolution",
    "ResolutionStatus",
    "MultiSelectFilter",
    "decode_ids",
    "encode_ids",
    "CacheInvalidationRouter",
    "EntityKind",
    "SessionStore",
    "CalendarViewState",
    "group_events_by_day",
    "Notification",
    "NotificationLevel",
    "Notifier",
]
