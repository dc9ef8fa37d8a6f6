"""
Selection state resolver.

Reconciles the URL parameter, the resolver's memory of its last choice and
a freshly loaded candidate list into a single selected entity. The URL
stays authoritative: when a default has to be chosen it is written back
with a history *replace*, so the default never adds a back/forward entry.

One resolver instance serves one picker (project picker, calendar picker);
the parameter name, id accessor and ordering are its only differences.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from cozy_mcp.state.url import UrlState

logger = logging.getLogger(__name__)

E = TypeVar("E")


class ResolutionStatus(str, Enum):
    PENDING = "pending"
    ERROR = "error"
    SELECTED = "selected"
    EMPTY = "empty"


@dataclass(frozen=True)
class Resolution(Generic[E]):
    """Outcome of one resolution pass."""

    status: ResolutionStatus
    selected: Optional[E] = None
    rewrote_url: bool = False
    error: Optional[BaseException] = None


class SelectionResolver(Generic[E]):
    """
    Pick the current entity for one URL parameter.

    Args:
        param: Query parameter holding the selected id (e.g. ``projectId``)
        id_of: Extracts the id from a candidate
        sort_key: Orders candidates before the first one is taken as the
            default. Defaults to the id, so the default is deterministic
            whatever order the server lists them in.
    """

    def __init__(
        self,
        param: str,
        *,
        id_of: Callable[[E], Any] = attrgetter("id"),
        sort_key: Optional[Callable[[E], Any]] = None,
    ) -> None:
        self.param = param
        self.id_of = id_of
        self.sort_key = sort_key or id_of
        self._last_resolved_id: Optional[str] = None
        self._last_rewrite: Optional[tuple[Optional[str], Optional[str]]] = None

    @property
    def last_resolved_id(self) -> Optional[str]:
        return self._last_resolved_id

    def ordered(self, candidates: Sequence[E]) -> list[E]:
        return sorted(candidates, key=self.sort_key)

    def find(self, candidates: Sequence[E], entity_id: Any) -> Optional[E]:
        wanted = str(entity_id)
        return next((c for c in candidates if str(self.id_of(c)) == wanted), None)

    def resolve(
        self,
        url: UrlState,
        candidates: Optional[Sequence[E]],
        *,
        error: Optional[BaseException] = None,
    ) -> Resolution[E]:
        """
        Run one resolution pass.

        Args:
            url: Location holding the parameter; rewritten at most once
            candidates: Loaded list, or None while still loading
            error: Load failure; the resolver does not run while set
        """
        if error is not None:
            return Resolution(ResolutionStatus.ERROR, error=error)
        if candidates is None:
            return Resolution(ResolutionStatus.PENDING)

        url_id = url.get(self.param)
        ordered = self.ordered(candidates)

        if not ordered:
            self._last_resolved_id = None
            rewrote = False
            if url_id is not None:
                url.replace({self.param: None})
                rewrote = True
            return Resolution(ResolutionStatus.EMPTY, rewrote_url=rewrote)

        match = self.find(ordered, url_id) if url_id else None
        if match is not None:
            self._last_resolved_id = url_id
            self._last_rewrite = None
            return Resolution(ResolutionStatus.SELECTED, selected=match)

        default = ordered[0]
        default_id = str(self.id_of(default))
        rewrite = (url_id, default_id)
        rewrote = False
        # the same correction was already issued for this exact URL value
        if rewrite != self._last_rewrite or self._last_resolved_id != default_id:
            logger.debug("Defaulting %s from %r to %s", self.param, url_id, default_id)
            url.replace({self.param: default_id})
            rewrote = True
        self._last_rewrite = rewrite
        self._last_resolved_id = default_id
        return Resolution(ResolutionStatus.SELECTED, selected=default, rewrote_url=rewrote)

    def select(self, url: UrlState, candidates: Sequence[E], entity_id: Any) -> Optional[E]:
        """
        Explicit user choice: push the id as a new history entry.

        Returns the chosen entity, or None if the id is not a candidate
        (the URL is left untouched).
        """
        entity = self.find(candidates, entity_id)
        if entity is None:
            return None
        new_id = str(self.id_of(entity))
        if url.get(self.param) != new_id:
            url.push({self.param: new_id})
        self._last_resolved_id = new_id
        self._last_rewrite = None
        return entity
