"""Aggregation logic for weather readings."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from app.schemas import NUMERIC_FIELDS, ReadingAverages, Trend, WeatherReading

TREND_THRESHOLD = 0.1
CHARTED_FIELDS = ("temperature", "humidity", "pressure", "rainfall")


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def average(
        self, readings: Iterable[WeatherReading], window_hours: float
    ) -> Optional[ReadingAverages]:
        """Arithmetic mean of every numeric field, or ``None`` for no readings."""
        totals: Dict[str, float] = dict.fromkeys(NUMERIC_FIELDS, 0.0)
        count = 0

        for reading in readings:
            count += 1
            for name in NUMERIC_FIELDS:
                totals[name] += getattr(reading, name)

        if not count:
            return None

        means = {name: total / count for name, total in totals.items()}
        return ReadingAverages(**means, sample_count=count, window_hours=window_hours)

    def hourly_series(
        self,
        readings: Sequence[WeatherReading],
        hours: int = 24,
        now: Optional[datetime] = None,
    ) -> List[WeatherReading]:
        """Sample one reading per hour slot, oldest slot first.

        Each slot takes the reading closest in time to it, re-stamped with the
        slot time. The same reading may fill several slots when history is
        sparse.
        """
        stamped = [reading for reading in readings if reading.timestamp is not None]
        if not stamped or hours < 1:
            return []

        current = now or datetime.now(timezone.utc)
        series: List[WeatherReading] = []
        for offset in range(hours - 1, -1, -1):
            slot = current - timedelta(hours=offset)
            closest = min(
                stamped,
                key=lambda reading: abs((slot - reading.timestamp).total_seconds()),  # type: ignore[operator]
            )
            series.append(closest.model_copy(update={"timestamp": slot}))
        return series

    def trend(self, values: Sequence[float], threshold: float = TREND_THRESHOLD) -> Trend:
        """Compare the last two values of a series."""
        if len(values) < 2:
            return Trend.stable
        current, previous = values[-1], values[-2]
        if current > previous + threshold:
            return Trend.up
        if current < previous - threshold:
            return Trend.down
        return Trend.stable

    def trends(
        self, series: Sequence[WeatherReading], fields: Iterable[str] = CHARTED_FIELDS
    ) -> Dict[str, Trend]:
        return {
            name: self.trend([getattr(point, name) for point in series]) for name in fields
        }
