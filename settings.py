from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_STATION_URL_ENV = "WEATHER_STATION_URL"
_STATION_TIMEOUT_ENV = "WEATHER_STATION_TIMEOUT"
_STORAGE_KEY_ENV = "HISTORY_STORAGE_KEY"
_STORE_PATH_ENV = "HISTORY_STORE_PATH"
_CAPACITY_ENV = "HISTORY_CAPACITY"
_POLL_INTERVAL_ENV = "POLL_INTERVAL_SECONDS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_CAPACITY = 1008  # 7 days * 24 hours * 6 (10-minute intervals)
DEFAULT_STORAGE_KEY = "weatherHistoricalData"


@dataclass(frozen=True)
class Settings:
    station_url: str
    station_timeout: float
    storage_key: str
    store_path: Optional[str]
    history_capacity: int
    poll_interval: float
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


def _read_float(name: str, default: float, allow_zero: bool = False) -> float:
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
    if parsed > 0 or (allow_zero and parsed == 0):
        return parsed
    return default


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
        station_url=_read_str_env(_STATION_URL_ENV, "http://192.168.1.131/api"),
        station_timeout=_read_float(_STATION_TIMEOUT_ENV, 5.0),
        storage_key=_read_str_env(_STORAGE_KEY_ENV, DEFAULT_STORAGE_KEY),
        store_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/history"),
        history_capacity=_read_positive_int(_CAPACITY_ENV, DEFAULT_CAPACITY),
        poll_interval=_read_float(_POLL_INTERVAL_ENV, 900.0, allow_zero=True),
        log_level=_read_log_level("INFO"),
    )
