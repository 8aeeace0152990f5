"""Actuator bridge interface and command throttling."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Callable
from typing import Protocol

from radarlock.geo import distance_meters
from radarlock.models.command import FollowCommand
from radarlock.models.health import HealthReading

_logger = logging.getLogger(__name__)


class ActuatorBridge(Protocol):
    """Structural interface over the vehicle's command channel.

    Implementations raise :class:`radarlock.exceptions.ActuatorError` (or any
    exception) when a command cannot be delivered. The coordinator treats
    the channel as fire-and-forget: failures are reported, never retried
    in place.
    """

    async def send_target(self, command: FollowCommand) -> None: ...

    async def stop_and_hold(self) -> None: ...

    def health_readings(self) -> AsyncIterator[HealthReading]: ...


class ThrottledActuator:
    """Forward follow commands to another bridge at a bounded rate.

    A command is skipped when the previous forwarded command is younger
    than ``min_interval`` seconds, or when the target moved less than
    ``min_distance_m`` meters from the previously forwarded target.
    ``stop_and_hold`` always goes through and resets the throttle so the
    next lock starts fresh.
    """

    def __init__(
        self,
        inner: ActuatorBridge,
        *,
        min_interval: float,
        min_distance_m: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._inner = inner
        self._min_interval = min_interval
        self._min_distance_m = min_distance_m
        self._clock = clock
        self._last_sent: FollowCommand | None = None
        self._last_sent_at: float | None = None

    @property
    def last_sent(self) -> FollowCommand | None:
        return self._last_sent

    def _should_skip(self, command: FollowCommand, now: float) -> bool:
        last = self._last_sent
        if last is None or self._last_sent_at is None:
            return False
        if last.track_id != command.track_id:
            return False
        if now - self._last_sent_at < self._min_interval:
            _logger.debug("Throttle: skipping follow command for %s (interval)", command.track_id)
            return True
        moved = distance_meters(last.latitude, last.longitude, command.latitude, command.longitude)
        if moved < self._min_distance_m:
            _logger.debug("Throttle: target %s moved %.1fm, skipping", command.track_id, moved)
            return True
        return False

    async def send_target(self, command: FollowCommand) -> None:
        now = self._clock()
        if self._should_skip(command, now):
            return
        await self._inner.send_target(command)
        self._last_sent = command
        self._last_sent_at = now

    async def stop_and_hold(self) -> None:
        self._last_sent = None
        self._last_sent_at = None
        await self._inner.stop_and_hold()

    def health_readings(self) -> AsyncIterator[HealthReading]:
        return self._inner.health_readings()
