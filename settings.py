from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_FEED_ENDPOINT_ENV = "THINGSPEAK_API"
_FEED_TIMEOUT_ENV = "FEED_TIMEOUT_SECONDS"
_POLL_INTERVAL_ENV = "POLL_INTERVAL_SECONDS"
_READINGS_PATH_ENV = "READINGS_PERSISTENCE_PATH"
_USERS_PATH_ENV = "USERS_PERSISTENCE_PATH"
_JWT_SECRET_ENV = "JWT_SECRET"
_JWT_EXPIRE_ENV = "JWT_EXPIRE_MINUTES"
_BCRYPT_ROUNDS_ENV = "BCRYPT_ROUNDS"
_PORT_ENV = "PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    feed_endpoint: Optional[str]
    feed_timeout: float
    poll_interval: float
    readings_persistence_path: Optional[str]
    users_persistence_path: Optional[str]
    jwt_secret: str
    jwt_expire_minutes: int
    bcrypt_rounds: int
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        feed_endpoint=_read_optional_env(_FEED_ENDPOINT_ENV, None),
        feed_timeout=_read_positive_float(_FEED_TIMEOUT_ENV, 10.0),
        poll_interval=_read_positive_float(_POLL_INTERVAL_ENV, 60.0),
        readings_persistence_path=_read_optional_env(_READINGS_PATH_ENV, "./tmp/readings.jsonl"),
        users_persistence_path=_read_optional_env(_USERS_PATH_ENV, "./tmp/users.json"),
        jwt_secret=_read_str_env(_JWT_SECRET_ENV, "secretkey"),
        jwt_expire_minutes=_read_positive_int(_JWT_EXPIRE_ENV, 24 * 60),
        bcrypt_rounds=_read_positive_int(_BCRYPT_ROUNDS_ENV, 10),
        port=_read_positive_int(_PORT_ENV, 5000),
        log_level=_read_log_level("INFO"),
    )
