"""Refresh orchestration: station fetch, mock fallback, history recording."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from functools import lru_cache
from typing import Callable, List, Optional

from app.schemas import ReadingAverages, TrendsResponse, WeatherReading
from datastore.history_store import HistoricalStore, build_default_history_store
from models.records import RecordResult, RefreshOutcome
from services.aggregator import Aggregator
from services.mock_source import generate_mock_reading
from services.station import StationClient, StationError
from settings import get_settings

logger = logging.getLogger(__name__)


class WeatherService:
    """Coordinates the station client, the mock fallback and the history store."""

    def __init__(
        self,
        station: StationClient,
        store: HistoricalStore,
        aggregator: Optional[Aggregator] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.station = station
        self.store = store
        self.aggregator = aggregator or Aggregator()
        self._rng = rng
        self._clock = clock

    async def refresh(self) -> RefreshOutcome:
        """Fetch a reading, falling back to generated data, and record it."""
        notice: Optional[str] = None
        try:
            reading = await self.station.fetch_reading()
            is_mock = False
        except StationError as exc:
            logger.warning(
                "Falling back to mock data",
                extra={"station_url": self.station.url, "reason": str(exc), "is_mock": True},
            )
            now = self._clock() if self._clock else None
            reading = generate_mock_reading(rng=self._rng, now=now)
            is_mock = True
            notice = (
                f"Weather station unavailable: {exc}. Showing generated demo data."
            )

        result = self.store.record(reading)
        logger.info(
            "Weather data updated",
            extra={
                "is_mock": is_mock,
                "reason": None if result.persisted else "history write failed",
            },
        )
        return RefreshOutcome(
            reading=result.reading,
            is_mock=is_mock,
            notice=notice,
            persisted=result.persisted,
        )

    def record(self, reading: WeatherReading) -> RecordResult:
        return self.store.record(reading)

    def history(self) -> List[WeatherReading]:
        return self.store.all()

    def latest(self) -> Optional[WeatherReading]:
        return self.store.latest()

    def window(self, hours: float) -> List[WeatherReading]:
        return self.store.for_window(hours)

    def average(self, hours: float) -> Optional[ReadingAverages]:
        return self.store.average(hours)

    def trends(self, hours: int = 24) -> TrendsResponse:
        now = self._clock() if self._clock else None
        points = self.aggregator.hourly_series(self.store.all(), hours=hours, now=now)
        return TrendsResponse(
            hours=hours,
            points=points,
            trends=self.aggregator.trends(points) if points else {},
        )

    def clear(self) -> None:
        self.store.clear()


@lru_cache
def build_default_service() -> WeatherService:
    """Factory that wires the service from settings."""
    settings = get_settings()
    station = StationClient(url=settings.station_url, timeout=settings.station_timeout)
    return WeatherService(station=station, store=build_default_history_store())
