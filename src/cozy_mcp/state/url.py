"""
In-memory URL and navigation history.

Stands in for the browser location: the path plus ordered query
parameters, with ``push`` (new history entry) and ``replace`` (overwrite
the current entry) navigation. Every write is recorded in ``writes`` so
callers can observe exactly which rewrites happened.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

NavigationMethod = Literal["push", "replace"]


@dataclass(frozen=True)
class NavigationEntry:
    """One recorded URL write."""

    method: NavigationMethod
    url: str


def build_url(path: str, params: Mapping[str, str]) -> str:
    # commas stay literal so multi-select values remain readable
    query = urlencode(list(params.items()), safe=",")
    return f"{path}?{query}" if query else path


class UrlState:
    """Current location plus back history."""

    def __init__(self, url: str = "/") -> None:
        self.path, self._params = self._parse(url)
        self._history: list[str] = [self.url]
        self.writes: list[NavigationEntry] = []

    @staticmethod
    def _parse(url: str) -> tuple[str, dict[str, str]]:
        parts = urlsplit(url)
        return parts.path or "/", dict(parse_qsl(parts.query, keep_blank_values=True))

    @property
    def url(self) -> str:
        return build_url(self.path, self._params)

    @property
    def params(self) -> dict[str, str]:
        return dict(self._params)

    @property
    def history(self) -> list[str]:
        return list(self._history)

    def get(self, name: str) -> Optional[str]:
        return self._params.get(name)

    def has(self, name: str) -> bool:
        return name in self._params

    def _apply(self, updates: Mapping[str, Optional[str]], path: Optional[str]) -> None:
        if path is not None:
            self.path = path
        for name, value in updates.items():
            if value is None:
                self._params.pop(name, None)
            else:
                self._params[name] = value

    def push(self, updates: Mapping[str, Optional[str]] | None = None, *, path: Optional[str] = None) -> str:
        """Navigate to a new history entry. A None value removes the parameter."""
        self._apply(updates or {}, path)
        self._history.append(self.url)
        self.writes.append(NavigationEntry("push", self.url))
        return self.url

    def replace(self, updates: Mapping[str, Optional[str]] | None = None, *, path: Optional[str] = None) -> str:
        """Rewrite the current entry without adding history."""
        self._apply(updates or {}, path)
        self._history[-1] = self.url
        self.writes.append(NavigationEntry("replace", self.url))
        return self.url

    def navigate(self, url: str) -> str:
        """Push a whole new location, dropping the current parameters."""
        self.path, self._params = self._parse(url)
        self._history.append(self.url)
        self.writes.append(NavigationEntry("push", self.url))
        return self.url

    def back(self) -> str:
        if len(self._history) > 1:
            self._history.pop()
            self.path, self._params = self._parse(self._history[-1])
        return self.url

    def writes_for(self, method: NavigationMethod) -> list[NavigationEntry]:
        return [w for w in self.writes if w.method == method]

    def __repr__(self) -> str:
        return f"UrlState({self.url!r})"
