"""Pydantic schemas for readings and the HTTP API layer."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, field_validator

NUMERIC_FIELDS = (
    "temperature",
    "humidity",
    "pressure",
    "gas",
    "dew_point",
    "cloud_base",
    "rainfall",
)


class WeatherReading(BaseModel):
    """One sampled set of station measurements.

    Field aliases match the station's JSON payload, which is also the shape
    written to the history blob. Numeric fields are strict: numeric strings
    and booleans are rejected.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    temperature: StrictFloat = Field(..., description="Air temperature in °C.")
    humidity: StrictFloat = Field(..., description="Relative humidity in %.")
    pressure: StrictFloat = Field(..., description="Barometric pressure in hPa.")
    gas: StrictFloat = Field(..., description="Gas sensor resistance in kΩ.")
    dew_point: StrictFloat = Field(..., alias="dewPoint", description="Dew point in °C.")
    cloud_base: StrictFloat = Field(..., alias="cloudBase", description="Cloud base in metres.")
    rainfall: StrictFloat = Field(..., alias="Rain", description="Rainfall in mm.")
    timestamp: Optional[datetime] = None
    is_mock: Optional[bool] = Field(default=None, alias="isMockData")

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def to_wire(self) -> dict:
        """Serialize using the station's field names, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ReadingAverages(BaseModel):
    """Mean of every numeric reading field over a time window."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    temperature: float
    humidity: float
    pressure: float
    gas: float
    dew_point: float = Field(..., alias="dewPoint")
    cloud_base: float = Field(..., alias="cloudBase")
    rainfall: float = Field(..., alias="Rain")
    sample_count: int = Field(..., ge=1)
    window_hours: float


class Trend(str, Enum):
    """Direction of the last change in a charted series."""

    up = "up"
    down = "down"
    stable = "stable"


class RefreshResponse(BaseModel):
    """Outcome of pulling a fresh reading from the station."""

    reading: WeatherReading
    is_mock: bool
    notice: Optional[str] = Field(
        default=None, description="User-facing explanation when mock data is shown."
    )
    persisted: bool = True


class HistoryResponse(BaseModel):
    """Full retained history, newest first."""

    count: int = Field(..., ge=0)
    readings: List[WeatherReading] = Field(default_factory=list)


class WindowResponse(BaseModel):
    """Readings recorded within the requested number of hours."""

    hours: float = Field(..., gt=0)
    count: int = Field(..., ge=0)
    readings: List[WeatherReading] = Field(default_factory=list)


class AverageResponse(BaseModel):
    """Window average; ``average`` is null when the window holds no readings."""

    hours: float = Field(..., gt=0)
    average: Optional[ReadingAverages] = None


class TrendsResponse(BaseModel):
    """Hourly-sampled series (oldest first) with the direction of each field."""

    hours: int = Field(..., ge=1)
    points: List[WeatherReading] = Field(default_factory=list)
    trends: Dict[str, Trend] = Field(default_factory=dict)
