"""Project models."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from pydantic import Field

from cozy_mcp.models.base import CozyPayload, CozyResource


class Project(CozyResource):
    """A project owns tasks."""

    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectCreate(CozyPayload):
    """Body for ``POST /projects``."""

    drop_if_empty: ClassVar[frozenset[str]] = frozenset({"description"})

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)


class ProjectUpdate(CozyPayload):
    """Body for ``PUT /projects/{id}``."""

    drop_if_empty: ClassVar[frozenset[str]] = frozenset({"description"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
