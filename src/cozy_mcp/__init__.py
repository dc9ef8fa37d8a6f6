"""
Cozy MCP - client and MCP server for the Cozy task and calendar services.

This package talks to four small REST services (auth, tasks/projects,
calendars, events) and keeps the client-side state a browser front end
would: a query cache, URL-held selections and filters, and a session.

Architecture:
    MCP Tools Layer
         │
         ▼
    Cozy Client (cache, URL state, resolvers, notifications)
         │
         ▼
    Unified API Layer
         │
    ┌────┬────┴────┬────┐
    ▼    ▼         ▼    ▼
  Auth  Tasks  Calendars  Events
"""

__version__ = "0.1.0"
__author__ = "Cozy MCP Contributors"

from cozy_mcp.exceptions import (
    CozyError,
    CozyAuthenticationError,
    CozyAPIError,
    CozyConfigurationError,
    CozyValidationError,
    CozyRateLimitError,
    CozyNotFoundError,
    CozyTransportError,
)

__all__ = [
    "__version__",
    "CozyError",
    "CozyAuthenticationError",
    "CozyAPIError",
    "CozyConfigurationError",
    "CozyValidationError",
    "CozyRateLimitError",
    "CozyNotFoundError",
    "CozyTransportError",
]
