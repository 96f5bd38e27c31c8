from __future__ import annotations

import asyncio
import logging
import random
from datetime import timedelta

import httpx

from conftest import NOW, make_reading, station_payload
from datastore.history_store import HistoricalStore
from services.poller import ReadingPoller
from services.station import StationClient
from services.weather import WeatherService, build_default_service
from settings import get_settings
from storage.blob_store import BlobStore


def _service(handler) -> WeatherService:
    station = StationClient(
        url="http://station.test/api",
        transport=httpx.MockTransport(handler),
        clock=lambda: NOW,
    )
    store = HistoricalStore(blob_store=BlobStore(), capacity=10, clock=lambda: NOW)
    return WeatherService(station=station, store=store, rng=random.Random(7), clock=lambda: NOW)


def test_refresh_records_station_reading() -> None:
    service = _service(lambda request: httpx.Response(200, json=station_payload()))

    outcome = asyncio.run(service.refresh())

    assert outcome.is_mock is False
    assert outcome.notice is None
    assert outcome.persisted is True
    assert outcome.reading.temperature == 18.5
    assert service.history() == [outcome.reading]


def test_refresh_falls_back_to_mock_on_server_error(caplog) -> None:
    service = _service(lambda request: httpx.Response(500, text="boom"))

    with caplog.at_level(logging.WARNING):
        outcome = asyncio.run(service.refresh())

    assert outcome.is_mock is True
    assert outcome.reading.is_mock is True
    assert outcome.notice is not None
    assert "500" in outcome.notice
    assert service.latest() == outcome.reading
    assert any(record.getMessage() == "Falling back to mock data" for record in caplog.records)


def test_refresh_falls_back_to_mock_on_invalid_payload() -> None:
    service = _service(lambda request: httpx.Response(200, json={"temperature": "warm"}))

    outcome = asyncio.run(service.refresh())

    assert outcome.is_mock is True
    assert "Invalid weather data format" in (outcome.notice or "")


def test_refresh_reports_unpersisted_reading() -> None:
    class FailingBlobStore(BlobStore):
        def put_blob(self, key: str, data: str) -> None:
            raise OSError("read-only")

    service = _service(lambda request: httpx.Response(200, json=station_payload()))
    service.store = HistoricalStore(blob_store=FailingBlobStore(), clock=lambda: NOW)

    outcome = asyncio.run(service.refresh())

    assert outcome.persisted is False
    assert outcome.reading.temperature == 18.5


def test_trends_sample_hourly_series() -> None:
    service = _service(lambda request: httpx.Response(500))
    service.record(make_reading(temperature=10.0, timestamp=NOW - timedelta(hours=1)))
    service.record(make_reading(temperature=12.0, timestamp=NOW))

    trends = service.trends(2)

    assert [point.temperature for point in trends.points] == [10.0, 12.0]
    assert trends.trends["temperature"].value == "up"


def test_trends_empty_history() -> None:
    service = _service(lambda request: httpx.Response(500))

    trends = service.trends()

    assert trends.points == []
    assert trends.trends == {}


def test_default_service_uses_settings(monkeypatch) -> None:
    monkeypatch.setenv("WEATHER_STATION_URL", "http://10.0.0.5/api")
    monkeypatch.setenv("WEATHER_STATION_TIMEOUT", "2.5")
    get_settings.cache_clear()
    build_default_service.cache_clear()

    service = build_default_service()

    assert service.station.url == "http://10.0.0.5/api"
    assert service.station.timeout == 2.5


class _CountingService:
    def __init__(self, failures: int = 0) -> None:
        self.calls = 0
        self.failures = failures

    async def refresh(self) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError("station exploded")


def test_poller_refreshes_immediately_and_repeatedly() -> None:
    service = _CountingService()

    async def scenario() -> None:
        poller = ReadingPoller(service, interval=0.01)  # type: ignore[arg-type]
        poller.start()
        assert poller.running
        await asyncio.sleep(0.1)
        await poller.stop()
        assert not poller.running

    asyncio.run(scenario())

    assert service.calls >= 2


def test_poller_survives_failed_refresh(caplog) -> None:
    service = _CountingService(failures=1)

    async def scenario() -> None:
        poller = ReadingPoller(service, interval=0.01)  # type: ignore[arg-type]
        poller.start()
        await asyncio.sleep(0.1)
        await poller.stop()

    with caplog.at_level(logging.ERROR):
        asyncio.run(scenario())

    assert service.calls >= 2
    assert any("Scheduled refresh failed" in record.getMessage() for record in caplog.records)


def test_poller_disabled_with_zero_interval() -> None:
    service = _CountingService()

    async def scenario() -> None:
        poller = ReadingPoller(service, interval=0)  # type: ignore[arg-type]
        poller.start()
        assert not poller.running
        await poller.stop()

    asyncio.run(scenario())

    assert service.calls == 0
