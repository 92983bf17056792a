"""Unit tests for feed entry normalization."""

from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from models.records import DoorStatus, RawFeedRecord
from services.normalizer import normalize_record, parse_temperature, parse_timestamp

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _normalize(**fields):
    return normalize_record(RawFeedRecord(**fields), clock=lambda: FIXED_NOW)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1", DoorStatus.open),
        ("0", DoorStatus.closed),
        (None, DoorStatus.unknown),
        ("2", DoorStatus.unknown),
        ("open", DoorStatus.unknown),
        (" 1", DoorStatus.unknown),
        (1, DoorStatus.unknown),
    ],
)
def test_door_status_mapping(raw, expected) -> None:
    assert _normalize(field1=raw, field2="30.0").door_status is expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("35.2", 35.2), ("-4", -4.0), (" 21.75 ", 21.75), (19.5, 19.5), (20, 20.0)],
)
def test_numeric_temperature_is_kept_exactly(raw, expected) -> None:
    assert _normalize(field2=raw).temperature == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "nan", "inf", True, ["35"]])
def test_unparsable_temperature_falls_back_to_range(raw) -> None:
    for _ in range(50):
        temperature = _normalize(field2=raw).temperature
        assert 33.0 <= temperature <= 38.0
        assert round(temperature, 1) == temperature


def test_fallback_uses_injected_random_source() -> None:
    first = normalize_record(RawFeedRecord(field2="bad"), rng=random.Random(7))
    second = normalize_record(RawFeedRecord(field2="bad"), rng=random.Random(7))

    assert first.temperature == second.temperature


def test_timestamp_parsed_from_created_at() -> None:
    reading = _normalize(created_at="2024-01-01T00:00:00Z")

    assert reading.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize("created_at", [None, "", "yesterday"])
def test_missing_or_invalid_timestamp_uses_clock(created_at) -> None:
    assert _normalize(created_at=created_at).timestamp == FIXED_NOW


def test_parse_timestamp_converts_offsets_to_utc() -> None:
    parsed = parse_timestamp("2024-01-01T02:00:00+02:00")

    assert parsed == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert parsed.tzinfo is timezone.utc


def test_parse_timestamp_treats_naive_values_as_utc() -> None:
    assert parse_timestamp("2024-01-01T05:30:00") == datetime(
        2024, 1, 1, 5, 30, tzinfo=timezone.utc
    )


def test_parse_temperature_rejects_booleans() -> None:
    assert parse_temperature(False) is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("35.2C", 35.2), ("1_000", 1.0), ("  -3.5e1 deg", -35.0), (".5", 0.5), ("7.", 7.0)],
)
def test_temperature_uses_leading_number_of_string(raw, expected) -> None:
    assert parse_temperature(raw) == expected


def test_integer_too_large_for_float_falls_back() -> None:
    reading = _normalize(field2=10**400)

    assert parse_temperature(10**400) is None
    assert 33.0 <= reading.temperature <= 38.0


def test_exponent_overflowing_to_infinity_falls_back() -> None:
    assert parse_temperature("1e400") is None


def test_timestamp_outside_utc_range_uses_clock() -> None:
    reading = _normalize(created_at="9999-12-31T23:59:59-01:00")

    assert reading.timestamp == FIXED_NOW


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-01-01T00:00:00.5Z", datetime(2024, 1, 1, 0, 0, 0, 500000, tzinfo=timezone.utc)),
        ("2024-01-01T00:00:00.1234Z", datetime(2024, 1, 1, 0, 0, 0, 123400, tzinfo=timezone.utc)),
        ("20240101T120000Z", datetime(2024, 1, 1, 12, tzinfo=timezone.utc)),
    ],
)
def test_parse_timestamp_accepts_other_iso_forms(raw, expected) -> None:
    assert parse_timestamp(raw) == expected
