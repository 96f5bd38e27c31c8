"""Bounded, persisted reading history with time-window queries."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable, List, Optional

from pydantic import TypeAdapter, ValidationError

from app.schemas import ReadingAverages, WeatherReading
from models.records import RecordResult
from services.aggregator import Aggregator
from settings import DEFAULT_CAPACITY, DEFAULT_STORAGE_KEY, get_settings
from storage.blob_store import BlobStore, build_default_blob_store

logger = logging.getLogger(__name__)

_READINGS_ADAPTER = TypeAdapter(List[WeatherReading])

Clock = Callable[[], datetime]
WriteFailureHook = Callable[[Exception], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HistoricalStore:
    """Newest-first reading history capped at ``capacity`` entries.

    The whole sequence lives in a single blob under ``storage_key`` and is
    rewritten on every change. Writes are best effort: failures are logged
    and reported to ``on_write_failure`` but never raised. A missing or
    unparseable blob reads as an empty history.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        capacity: int = DEFAULT_CAPACITY,
        clock: Optional[Clock] = None,
        on_write_failure: Optional[WriteFailureHook] = None,
        aggregator: Optional[Aggregator] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1.")
        self.blob_store = blob_store
        self.storage_key = storage_key
        self.capacity = capacity
        self._clock = clock or _utc_now
        self._on_write_failure = on_write_failure
        self._aggregator = aggregator or Aggregator()

    def record(self, reading: WeatherReading) -> RecordResult:
        if reading.timestamp is None:
            reading = reading.model_copy(update={"timestamp": self._clock()})

        history = self.all()
        history.insert(0, reading)
        del history[self.capacity:]

        persisted = self._write(history)
        if persisted:
            logger.debug(
                "Recorded weather reading",
                extra={"storage_key": self.storage_key, "reading_count": len(history)},
            )
        return RecordResult(reading=reading, persisted=persisted)

    def all(self) -> List[WeatherReading]:
        try:
            raw = self.blob_store.get_blob(self.storage_key)
        except KeyError:
            return []
        except OSError as exc:
            logger.warning(
                "Unable to read reading history; treating as empty",
                extra={"storage_key": self.storage_key, "reason": str(exc)},
            )
            return []
        except UnicodeDecodeError as exc:
            logger.warning(
                "Discarding unparseable reading history",
                extra={"storage_key": self.storage_key, "reason": str(exc)},
            )
            return []

        try:
            return _READINGS_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding unparseable reading history",
                extra={
                    "storage_key": self.storage_key,
                    "reason": f"{exc.error_count()} validation error(s)",
                },
            )
            return []

    def latest(self) -> Optional[WeatherReading]:
        history = self.all()
        return history[0] if history else None

    def for_window(self, hours: float) -> List[WeatherReading]:
        cutoff = self._clock() - timedelta(hours=hours)
        return [
            reading
            for reading in self.all()
            if reading.timestamp is not None and reading.timestamp >= cutoff
        ]

    def average(self, hours: float) -> Optional[ReadingAverages]:
        return self._aggregator.average(self.for_window(hours), window_hours=hours)

    def clear(self) -> None:
        try:
            self.blob_store.delete_blob(self.storage_key)
        except OSError as exc:
            self._report_failure("Failed to clear reading history", exc)
            return
        logger.info("Reading history cleared", extra={"storage_key": self.storage_key})

    def _write(self, history: List[WeatherReading]) -> bool:
        try:
            payload = json.dumps([reading.to_wire() for reading in history])
            self.blob_store.put_blob(self.storage_key, payload)
        except (OSError, TypeError, ValueError) as exc:
            self._report_failure("Failed to persist reading history", exc)
            return False
        return True

    def _report_failure(self, message: str, exc: Exception) -> None:
        logger.error(
            message,
            extra={"storage_key": self.storage_key, "reason": str(exc)},
        )
        if self._on_write_failure is not None:
            self._on_write_failure(exc)


@lru_cache
def build_default_history_store(
    storage_key: Optional[str] = None,
    capacity: Optional[int] = None,
) -> HistoricalStore:
    settings = get_settings()
    return HistoricalStore(
        blob_store=build_default_blob_store(),
        storage_key=settings.storage_key if storage_key is None else storage_key,
        capacity=settings.history_capacity if capacity is None else capacity,
    )
