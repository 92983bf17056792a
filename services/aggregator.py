"""Aggregation logic for stored readings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from app.schemas import Reading


@dataclass
class TemperatureSummary:
    """Count and mean temperature of a batch of readings."""

    reading_count: int = 0
    mean_temperature: float | None = None


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, readings: Iterable[Reading]) -> TemperatureSummary:
        summary = TemperatureSummary()
        total = 0.0

        for reading in readings:
            summary.reading_count += 1
            total += reading.temperature

        if summary.reading_count:
            summary.mean_temperature = total / summary.reading_count

        return summary
