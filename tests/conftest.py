from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterator, Optional

import pytest

from app.schemas import WeatherReading
from datastore.history_store import build_default_history_store
from services.weather import build_default_service
from settings import get_settings
from storage.blob_store import build_default_blob_store

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

_CACHES = (
    get_settings,
    build_default_blob_store,
    build_default_history_store,
    build_default_service,
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path) -> Iterator[None]:
    """Keep every test off the real station and the shared history directory."""
    monkeypatch.setenv("HISTORY_STORE_PATH", str(tmp_path / "history"))
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "0")
    monkeypatch.setenv("WEATHER_STATION_URL", "http://station.test/api")
    for cache in _CACHES:
        cache.cache_clear()
    yield
    for cache in _CACHES:
        cache.cache_clear()


def make_reading(
    temperature: float = 20.0,
    timestamp: Optional[datetime] = None,
    **overrides: float,
) -> WeatherReading:
    values = {
        "temperature": temperature,
        "humidity": 55.0,
        "pressure": 1012.0,
        "gas": 100.0,
        "dew_point": 10.0,
        "cloud_base": 500.0,
        "rainfall": 0.0,
        "timestamp": timestamp,
    }
    values.update(overrides)
    return WeatherReading(**values)


def station_payload(**overrides: object) -> dict:
    payload = {
        "temperature": 18.5,
        "humidity": 70.0,
        "pressure": 1009.4,
        "gas": 95.2,
        "dewPoint": 12.1,
        "cloudBase": 610.0,
        "Rain": 0.4,
    }
    payload.update(overrides)
    return payload
