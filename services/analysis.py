"""Temperature prediction over the full reading history."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from functools import lru_cache
from typing import Union

from app.schemas import Reading
from datastore.reading_store import ReadingStore, build_default_reading_store
from services.aggregator import Aggregator

logger = logging.getLogger(__name__)

PREDICTION_JITTER = 0.5


@dataclass(frozen=True)
class EmptyDataset:
    """Returned instead of a result when no readings have been stored yet."""


@dataclass(frozen=True)
class AnalysisResult:
    readings: list[Reading]
    predicted_temperature: float
    mean_temperature: float


class AnalysisService:
    """Computes the predicted temperature from every stored reading."""

    def __init__(
        self,
        store: ReadingStore,
        aggregator: Aggregator,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self._rng = rng or random.Random()

    def analyze(self) -> Union[AnalysisResult, EmptyDataset]:
        """Read all readings in time order and predict the next temperature.

        The prediction is the mean temperature plus a uniform jitter in
        ``[0, PREDICTION_JITTER)``, rounded to one decimal place. Raises
        ``PersistenceError`` when the store cannot be read.
        """
        readings = self.store.list_all()
        summary = self.aggregator.aggregate(readings)
        if summary.mean_temperature is None:
            return EmptyDataset()

        jitter = self._rng.random() * PREDICTION_JITTER
        predicted = round(summary.mean_temperature + jitter, 1)
        logger.debug(
            "Computed prediction %.1f",
            predicted,
            extra={"reading_count": summary.reading_count},
        )
        return AnalysisResult(
            readings=readings,
            predicted_temperature=predicted,
            mean_temperature=summary.mean_temperature,
        )


@lru_cache
def build_default_analysis_service() -> AnalysisService:
    return AnalysisService(store=build_default_reading_store(), aggregator=Aggregator())
