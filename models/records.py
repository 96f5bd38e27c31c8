"""Domain results shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from app.schemas import WeatherReading


@dataclass(slots=True)
class ParsedReading:
    """A station payload that passed validation."""

    reading: WeatherReading


@dataclass(slots=True)
class InvalidReading:
    """A station payload that was rejected, with the reason why."""

    reason: str


ParseResult = Union[ParsedReading, InvalidReading]


@dataclass(slots=True)
class RecordResult:
    """What the history store kept, and whether it reached storage."""

    reading: WeatherReading
    persisted: bool


@dataclass(slots=True)
class RefreshOutcome:
    """A reading obtained for display, real or generated."""

    reading: WeatherReading
    is_mock: bool
    notice: Optional[str] = None
    persisted: bool = True
