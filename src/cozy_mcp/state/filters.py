"""
Multi-select filter codec.

A set of selected entity ids lives in one comma separated URL parameter,
e.g. ``?calendars=1,2,3``. Decoding tolerates hand-edited URLs by dropping
any token that is not a positive integer.
"""

from __future__ import annotations

from operator import attrgetter
from typing import Any, Callable, Iterable, Optional, Sequence

from cozy_mcp.state.url import UrlState


def encode_ids(ids: Iterable[int]) -> Optional[str]:
    """Join ids in insertion order; None for an empty set (parameter removed)."""
    unique = list(dict.fromkeys(int(i) for i in ids))
    if not unique:
        return None
    return ",".join(str(i) for i in unique)


def decode_ids(value: Optional[str]) -> list[int]:
    """
    Parse ``"1,2,x,3"`` into ``[1, 2, 3]``; malformed tokens are dropped.

    A leading ``+`` is accepted, so ``"+3"`` is 3. A minus sign or an
    exponent drops the token.
    """
    if not value:
        return []
    ids: list[int] = []
    for token in value.split(","):
        digits = token.strip().removeprefix("+")
        if not (digits.isascii() and digits.isdigit()):
            continue
        number = int(digits)
        if number > 0 and number not in ids:
            ids.append(number)
    return ids


def write_ids(url: UrlState, param: str, ids: Iterable[int]) -> str:
    """Store ids in ``param`` via replace; an empty set removes the parameter."""
    return url.replace({param: encode_ids(ids)})


class MultiSelectFilter:
    """
    Multi-select filter bound to one URL parameter.

    The first time candidates are available and the URL carries no value,
    the first candidate is selected and written with a replace. The
    ``default_applied`` flag keeps candidate reloads from writing again,
    including after the user has cleared every box.
    """

    def __init__(
        self,
        param: str,
        *,
        id_of: Callable[[Any], int] = attrgetter("id"),
        sort_key: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        self.param = param
        self.id_of = id_of
        self.sort_key = sort_key or id_of
        self.default_applied = False

    def selected(self, url: UrlState) -> list[int]:
        return decode_ids(url.get(self.param))

    def apply_default(self, url: UrlState, candidates: Optional[Sequence[Any]]) -> bool:
        """
        Select the first candidate if nothing is selected yet.

        Returns True when the URL was rewritten.
        """
        if self.default_applied or url.get(self.param) or not candidates:
            return False
        first = sorted(candidates, key=self.sort_key)[0]
        self.default_applied = True
        write_ids(url, self.param, [self.id_of(first)])
        return True

    def set(self, url: UrlState, ids: Iterable[int]) -> list[int]:
        write_ids(url, self.param, ids)
        return self.selected(url)

    def toggle(self, url: UrlState, entity_id: int, checked: bool) -> list[int]:
        """Check or uncheck one id."""
        ids = self.selected(url)
        if checked and entity_id not in ids:
            ids.append(entity_id)
        elif not checked and entity_id in ids:
            ids.remove(entity_id)
        return self.set(url, ids)

    def prune(self, url: UrlState, valid_ids: Iterable[int]) -> list[int]:
        """Drop ids that no longer exist (e.g. after a delete)."""
        valid = set(valid_ids)
        ids = self.selected(url)
        kept = [i for i in ids if i in valid]
        if kept != ids:
            return self.set(url, kept)
        return ids
