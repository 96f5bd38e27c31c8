"""Fixed-interval background refresh."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from services.weather import WeatherService

logger = logging.getLogger(__name__)


class ReadingPoller:
    """Calls ``WeatherService.refresh`` now and then every ``interval`` seconds.

    No backoff or jitter. A failed refresh is logged and the next tick runs
    as scheduled. An interval of zero or less disables polling.
    """

    def __init__(self, service: WeatherService, interval: float) -> None:
        self.service = service
        self.interval = interval
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.interval <= 0 or self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await self.tick()
            await asyncio.sleep(self.interval)

    async def tick(self) -> None:
        try:
            await self.service.refresh()
        except Exception:  # noqa: BLE001
            logger.exception("Scheduled refresh failed")
