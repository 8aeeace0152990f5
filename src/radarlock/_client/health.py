"""Internal actuator health plumbing for RadarLockClient.

Owns:
- bridging the threaded MQTT runtime into an async iterator of readings
- forwarding every reading from a feed into the coordinator
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import Protocol

from radarlock._mqtt import HealthMqttRuntime
from radarlock.config import LockConfig
from radarlock.exceptions import CoordinatorClosedError
from radarlock.models.health import HealthReading

_logger = logging.getLogger(__name__)


class HealthSink(Protocol):
    async def update_health(self, reading: HealthReading) -> None: ...

    async def report_health_error(self, message: str) -> None: ...


class MqttHealthFeed:
    """Async iterator over health readings received via MQTT."""

    def __init__(self, config: LockConfig, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._config = config
        self._loop = loop
        self._queue: asyncio.Queue[HealthReading] = asyncio.Queue()
        self._runtime: HealthMqttRuntime | None = None

    @property
    def is_running(self) -> bool:
        return self._runtime is not None and self._runtime.is_running

    def start(self) -> None:
        if self.is_running:
            return
        loop = self._loop or asyncio.get_running_loop()
        self._runtime = HealthMqttRuntime(
            config=self._config,
            loop=loop,
            on_reading=self._queue.put_nowait,
            logger=_logger,
        )
        self._runtime.start()

    def stop(self) -> None:
        runtime = self._runtime
        self._runtime = None
        if runtime is not None:
            runtime.stop()

    def __aiter__(self) -> AsyncIterator[HealthReading]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[HealthReading]:
        while True:
            yield await self._queue.get()


class HealthObserver:
    """Forward readings from a health feed into the coordinator.

    ``feed_factory`` is called for every subscription. When the feed raises
    or ends, the failure is reported to the sink (an ``ERROR`` event and
    health marked disconnected) and the feed is re-subscribed after
    ``retry_delay`` seconds, so the battery interlock never goes quiet.
    """

    def __init__(
        self,
        *,
        feed_factory: Callable[[], AsyncIterable[HealthReading]],
        sink: HealthSink,
        retry_delay: float,
    ) -> None:
        self._feed_factory = feed_factory
        self._sink = sink
        self._retry_delay = retry_delay
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._forward(), name="radarlock-health")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _forward(self) -> None:
        while True:
            try:
                async for reading in self._feed_factory():
                    await self._sink.update_health(reading)
            except CoordinatorClosedError:
                _logger.debug("Coordinator closed, health forwarding stopped")
                return
            except Exception as exc:
                _logger.warning("Health feed failed, retrying in %.1fs", self._retry_delay, exc_info=True)
                message = f"Health telemetry lost: {type(exc).__name__}: {exc}"
            else:
                _logger.warning("Health feed ended, retrying in %.1fs", self._retry_delay)
                message = "Health telemetry ended"
            try:
                await self._sink.report_health_error(message)
            except CoordinatorClosedError:
                return
            await asyncio.sleep(self._retry_delay)
