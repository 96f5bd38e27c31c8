"""Synthetic readings shown when the station is unavailable."""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Optional

from app.schemas import WeatherReading


def generate_mock_reading(
    rng: Optional[random.Random] = None, now: Optional[datetime] = None
) -> WeatherReading:
    """Return a plausible reading flagged with ``is_mock=True``."""
    rng = rng or random.Random()
    base_temp = 16 + (rng.random() - 0.5) * 10
    humidity = 60 + rng.random() * 35
    pressure = 1000 + rng.random() * 20
    gas = 80 + rng.random() * 40
    dew_point = base_temp - 2 - rng.random() * 3
    cloud_base = 400 + rng.random() * 300
    rainfall = round(rng.random() * 5, 2) if rng.random() > 0.8 else 0.0

    return WeatherReading(
        temperature=round(base_temp, 2),
        humidity=round(humidity, 2),
        pressure=round(pressure, 1),
        gas=round(gas, 3),
        dew_point=round(dew_point, 2),
        cloud_base=round(cloud_base, 2),
        rainfall=rainfall,
        timestamp=now or datetime.now(timezone.utc),
        is_mock=True,
    )
