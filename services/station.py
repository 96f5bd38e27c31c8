"""Client for the local weather station's JSON endpoint."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from app.schemas import WeatherReading
from models.records import InvalidReading, ParsedReading, ParseResult

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("temperature", "humidity", "pressure", "gas", "dewPoint", "cloudBase", "Rain")


class StationError(Exception):
    """Base class for failures obtaining a reading from the station."""


class StationUnavailableError(StationError):
    """The station could not be reached or answered with an error status."""


class InvalidPayloadError(StationError):
    """The station answered, but not with a usable reading."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_station_payload(
    payload: Any, now: Optional[datetime] = None
) -> ParseResult:
    """Validate a decoded station payload into a reading.

    Every numeric field must be present and a JSON number. A missing
    timestamp is filled with ``now`` and the reading is marked as real.
    """
    if not isinstance(payload, dict):
        return InvalidReading(reason=f"expected a JSON object, got {type(payload).__name__}")

    missing = [name for name in REQUIRED_FIELDS if name not in payload]
    if missing:
        return InvalidReading(reason=f"missing fields: {', '.join(missing)}")

    non_numeric = [name for name in REQUIRED_FIELDS if not _is_number(payload[name])]
    if non_numeric:
        return InvalidReading(reason=f"non-numeric fields: {', '.join(non_numeric)}")

    data = {name: payload[name] for name in REQUIRED_FIELDS}
    data["timestamp"] = payload.get("timestamp") or now or datetime.now(timezone.utc)
    data["isMockData"] = False

    try:
        reading = WeatherReading.model_validate(data)
    except ValidationError as exc:
        errors = exc.errors()
        location = ".".join(str(part) for part in errors[0]["loc"]) if errors else "payload"
        return InvalidReading(reason=f"invalid {location}")

    return ParsedReading(reading=reading)


class StationClient:
    """Fetches a single reading from the station over HTTP."""

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport
        self._clock = clock

    async def fetch_reading(self) -> WeatherReading:
        logger.debug("Fetching reading from weather station", extra={"station_url": self.url})
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(self.url)
        except httpx.HTTPError as exc:
            raise StationUnavailableError(
                f"could not reach {self.url}: {exc.__class__.__name__}"
            ) from exc

        if response.is_error:
            logger.error(
                "Weather station returned an error status",
                extra={
                    "station_url": self.url,
                    "status_code": response.status_code,
                    "reason": response.text[:200],
                },
            )
            raise StationUnavailableError(f"HTTP error! status: {response.status_code}")

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise InvalidPayloadError(
                f"Expected application/json but got {content_type or 'no content type'}"
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.error(
                "Weather station sent undecodable JSON",
                extra={"station_url": self.url, "reason": response.text[:200]},
            )
            raise InvalidPayloadError("Malformed JSON in station response") from exc

        now = self._clock() if self._clock else None
        result = parse_station_payload(payload, now=now)
        if isinstance(result, InvalidReading):
            logger.error(
                "Invalid weather data format received from station",
                extra={"station_url": self.url, "reason": result.reason},
            )
            raise InvalidPayloadError(
                f"Invalid weather data format received from station: {result.reason}"
            )
        return result.reading
