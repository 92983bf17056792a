"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class DoorStatus(str, Enum):
    """Discrete state reported by the door contact sensor."""

    open = "open"
    closed = "closed"
    unknown = "unknown"


@dataclass(frozen=True, slots=True)
class RawFeedRecord:
    """One entry of the telemetry feed, exactly as the channel reported it."""

    field1: Optional[Any] = None
    field2: Optional[Any] = None
    created_at: Optional[str] = None
    entry_id: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RawFeedRecord":
        entry_id = payload.get("entry_id")
        return cls(
            field1=payload.get("field1"),
            field2=payload.get("field2"),
            created_at=payload.get("created_at"),
            entry_id=entry_id if isinstance(entry_id, int) else None,
        )
