from __future__ import annotations

from typing import Iterable

from datastore.history_store import build_default_history_store
from services.weather import build_default_service
from settings import DEFAULT_CAPACITY, get_settings
from storage.blob_store import build_default_blob_store


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


_CACHES = (
    get_settings,
    build_default_blob_store,
    build_default_history_store,
    build_default_service,
)


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    store_root = tmp_path / "history"

    monkeypatch.setenv("WEATHER_STATION_URL", "http://station.lan/api")
    monkeypatch.setenv("WEATHER_STATION_TIMEOUT", "9")
    monkeypatch.setenv("HISTORY_STORAGE_KEY", "customHistory")
    monkeypatch.setenv("HISTORY_STORE_PATH", str(store_root))
    monkeypatch.setenv("HISTORY_CAPACITY", "144")
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "600")
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    _clear_caches(_CACHES)

    settings = get_settings()
    service = build_default_service()

    assert settings.poll_interval == 600.0
    assert settings.log_level == "DEBUG"
    assert service.station.url == "http://station.lan/api"
    assert service.station.timeout == 9.0
    assert service.store.storage_key == "customHistory"
    assert service.store.capacity == 144
    assert service.store.blob_store.root_path == store_root


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("HISTORY_CAPACITY", "-5")
    monkeypatch.setenv("WEATHER_STATION_TIMEOUT", "soon")
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "-1")
    monkeypatch.setenv("HISTORY_STORAGE_KEY", "   ")
    _clear_caches(_CACHES)

    settings = get_settings()

    assert settings.history_capacity == DEFAULT_CAPACITY
    assert settings.station_timeout == 5.0
    assert settings.poll_interval == 900.0
    assert settings.storage_key == "weatherHistoricalData"


def test_zero_poll_interval_disables_polling(monkeypatch) -> None:
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "0")
    _clear_caches(_CACHES)

    assert get_settings().poll_interval == 0.0
