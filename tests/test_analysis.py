from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from app.schemas import Reading
from datastore.errors import PersistenceError
from datastore.reading_store import ReadingStore
from models.records import DoorStatus
from services.aggregator import Aggregator
from services.analysis import AnalysisResult, AnalysisService, EmptyDataset

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _store(*temperatures: float) -> ReadingStore:
    store = ReadingStore()
    # Appended newest first so ordering has to come from the store.
    for offset, temperature in reversed(list(enumerate(temperatures))):
        store.append(
            Reading(
                temperature=temperature,
                door_status=DoorStatus.unknown,
                timestamp=BASE + timedelta(minutes=offset),
            )
        )
    return store


def test_empty_store_returns_empty_dataset() -> None:
    service = AnalysisService(ReadingStore(), Aggregator())

    assert isinstance(service.analyze(), EmptyDataset)


def test_prediction_is_within_jitter_of_mean() -> None:
    service = AnalysisService(_store(30.0, 31.0, 35.5), Aggregator())
    mean = (30.0 + 31.0 + 35.5) / 3

    for _ in range(100):
        result = service.analyze()
        assert isinstance(result, AnalysisResult)
        assert mean - 0.05 <= result.predicted_temperature <= mean + 0.55
        assert round(result.predicted_temperature, 1) == result.predicted_temperature
        assert result.mean_temperature == pytest.approx(mean)


def test_prediction_uses_injected_random_source() -> None:
    class FixedRandom(random.Random):
        def random(self) -> float:
            return 0.4

    service = AnalysisService(_store(20.0, 22.0), Aggregator(), rng=FixedRandom())

    result = service.analyze()

    assert result.predicted_temperature == 21.4


def test_readings_are_returned_oldest_first() -> None:
    service = AnalysisService(_store(1.0, 2.0, 3.0), Aggregator())

    result = service.analyze()

    assert [reading.temperature for reading in result.readings] == [1.0, 2.0, 3.0]


def test_analyze_does_not_modify_store() -> None:
    store = _store(25.0)
    service = AnalysisService(store, Aggregator())

    service.analyze()
    service.analyze()

    assert store.count() == 1


def test_store_read_failure_propagates() -> None:
    class BrokenStore(ReadingStore):
        def list_all(self) -> list[Reading]:
            raise PersistenceError("connection lost")

    service = AnalysisService(BrokenStore(), Aggregator())

    with pytest.raises(PersistenceError):
        service.analyze()
