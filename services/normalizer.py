"""Mapping of raw feed entries onto stored readings."""

from __future__ import annotations

import math
import random
import re
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from dateutil import parser as date_parser

from app.schemas import Reading
from models.records import DoorStatus, RawFeedRecord

FALLBACK_TEMPERATURE_RANGE = (33.0, 38.0)

_DOOR_CODES = {"1": DoorStatus.open, "0": DoorStatus.closed}

# Leading decimal literal; trailing text such as units is ignored.
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_door_status(value: Any) -> DoorStatus:
    if isinstance(value, str):
        return _DOOR_CODES.get(value, DoorStatus.unknown)
    return DoorStatus.unknown


def parse_temperature(value: Any) -> Optional[float]:
    """Return the finite float that ``value`` starts with, or ``None``.

    Strings are read up to the end of their leading number, so ``"35.2C"``
    gives ``35.2`` and ``"1_000"`` gives ``1.0``.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            parsed = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        match = _LEADING_FLOAT.match(value)
        if match is None:
            return None
        parsed = float(match.group(1))
    else:
        return None
    return parsed if math.isfinite(parsed) else None


def fallback_temperature(rng: random.Random | None = None) -> float:
    low, high = FALLBACK_TEMPERATURE_RANGE
    source = rng or random
    return round(source.uniform(low, high), 1)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into UTC; ``None`` when it cannot be represented."""

    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not candidate:
        return None

    try:
        parsed = date_parser.isoparse(candidate)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def normalize_record(
    record: RawFeedRecord,
    *,
    rng: random.Random | None = None,
    clock: Clock = _utcnow,
) -> Reading:
    """Build a reading from a feed entry, substituting defaults for bad fields."""

    temperature = parse_temperature(record.field2)
    if temperature is None:
        temperature = fallback_temperature(rng)

    timestamp = parse_timestamp(record.created_at)
    if timestamp is None:
        timestamp = clock()

    return Reading(
        temperature=temperature,
        door_status=parse_door_status(record.field1),
        timestamp=timestamp,
    )
