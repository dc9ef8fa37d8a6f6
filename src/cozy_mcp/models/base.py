"""
Shared Pydantic bases for resources and request payloads.

Resources are what the services return: unknown fields are ignored so a
backend adding a column never breaks the client. Payloads are what the
client sends: unknown fields are rejected and the wire dict is built with
``to_payload``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from cozy_mcp.exceptions import CozyAPIError, CozyValidationError

R = TypeVar("R", bound="CozyResource")
P = TypeVar("P", bound="CozyPayload")

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


def ensure_aware(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so they serialize as RFC3339."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def format_rfc3339(value: datetime) -> str:
    """Format a datetime the way the Go services parse it."""
    aware = ensure_aware(value)
    return aware.isoformat().replace("+00:00", "Z")  # type: ignore[union-attr]


class CozyResource(BaseModel):
    """Base for server-owned resources."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    id: int

    @classmethod
    def from_api(cls: type[R], data: dict[str, Any]) -> R:
        """Build from a service JSON object."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise CozyAPIError(f"Invalid response structure for {cls.__name__}: {e.error_count()} error(s)") from e

    @classmethod
    def list_from_api(cls: type[R], data: Any) -> list[R]:
        """Build a list; anything that is not a JSON array yields []."""
        if not isinstance(data, list):
            return []
        return [cls.from_api(item) for item in data]


class CozyPayload(BaseModel):
    """Base for request bodies sent to the services."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    # Optional text fields whose empty value means "not set"
    drop_if_empty: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def build(cls: type[P], **data: Any) -> P:
        """Validate keyword data, raising CozyValidationError on failure."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise CozyValidationError.from_pydantic(e) from e

    @classmethod
    def replacing(cls: type[P], current: BaseModel, **changes: Any) -> P:
        """
        Build a full-replacement body for a ``PUT``.

        Every payload field is taken from ``current`` and then overridden by
        ``changes``, so fields the caller did not touch are sent unchanged
        instead of being cleared by the service.
        """
        data = {name: getattr(current, name) for name in cls.model_fields if hasattr(current, name)}
        for name in cls.drop_if_empty:
            if data.get(name) == "":
                data[name] = None
        data.update(changes)
        return cls.build(**data)

    def to_payload(self) -> dict[str, Any]:
        """
        Serialize to the JSON body.

        Only fields the caller set are sent. Empty or null values in
        ``drop_if_empty`` fields are removed; an explicit None anywhere else
        is kept so a date can be cleared.
        """
        payload = self.model_dump(mode="json", exclude_unset=True)
        for name in self.drop_if_empty:
            if name in payload and payload[name] in ("", None):
                del payload[name]
        for name in payload:
            raw = getattr(self, name)
            if isinstance(raw, datetime):
                payload[name] = format_rfc3339(raw)
        return payload
