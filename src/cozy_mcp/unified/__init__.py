"""Unified API layer over the Cozy backend services."""

from cozy_mcp.unified.api import UnifiedCozyAPI

__all__ = ["UnifiedCozyAPI"]
