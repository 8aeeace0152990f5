"""High-level async client wiring radar polling, health telemetry and the lock coordinator."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Callable
from typing import Any

import aiohttp

from radarlock._client.health import HealthObserver, MqttHealthFeed
from radarlock._client.polling import SnapshotPoller
from radarlock._transport import RadarTransport
from radarlock.actuator import ActuatorBridge, ThrottledActuator
from radarlock.config import LockConfig
from radarlock.coordinator import REASON_USER, LockCoordinator
from radarlock.exceptions import RadarLockError
from radarlock.models.health import HealthReading
from radarlock.state.events import LockEvent
from radarlock.state.lock import CoordinatorSnapshot

_logger = logging.getLogger(__name__)


class RadarLockClient:
    """Async client that keeps an actuator following a radar track.

    Usage::

        async with RadarLockClient(config, actuator, on_event=print) as client:
            count = await client.test_connection()
            await client.lock("42")

    On entry the client opens an HTTP session (unless one is supplied),
    starts the coordinator, the radar poller and the health observer. On
    exit it stops polling, releases any lock with reason ``"shutdown"``
    and closes what it opened.

    Health readings come from, in order of preference: the explicit
    ``health_feed``, MQTT when ``config.mqtt_host`` is set, or the
    actuator's own ``health_readings()`` stream.

    A failed or finished feed is reported as an ``ERROR`` event and
    re-subscribed after ``config.health_retry_delay`` seconds; an explicit
    ``health_feed`` must therefore support being iterated again.
    """

    def __init__(
        self,
        config: LockConfig,
        actuator: ActuatorBridge,
        *,
        session: aiohttp.ClientSession | None = None,
        health_feed: AsyncIterable[HealthReading] | None = None,
        on_event: Callable[[LockEvent], None] | None = None,
    ) -> None:
        self._config = config
        self._actuator = ThrottledActuator(
            actuator,
            min_interval=config.mission_update_interval,
            min_distance_m=config.minimum_distance_m,
        )
        self._external_session = session is not None
        self._http_session = session
        self._health_feed = health_feed
        self._mqtt_feed: MqttHealthFeed | None = None
        self._transport: RadarTransport | None = None
        self._coordinator = LockCoordinator(config, self._actuator, on_event=on_event)
        self._poller: SnapshotPoller | None = None
        self._health: HealthObserver | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RadarLockClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = RadarTransport(self._config, self._http_session)
        self._coordinator.start()

        self._poller = SnapshotPoller(
            source=self._transport,
            sink=self._coordinator,
            poll_interval=self._config.poll_interval,
        )
        self._poller.start()

        self._health = HealthObserver(
            feed_factory=self._resolve_health_feed(),
            sink=self._coordinator,
            retry_delay=self._config.health_retry_delay,
        )
        self._health.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._poller is not None:
            await self._poller.stop()
            self._poller = None
        if self._health is not None:
            await self._health.stop()
            self._health = None
        if self._mqtt_feed is not None:
            self._mqtt_feed.stop()
            self._mqtt_feed = None
        await self._coordinator.close()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    def _resolve_health_feed(self) -> Callable[[], AsyncIterable[HealthReading]]:
        explicit = self._health_feed
        if explicit is not None:
            return lambda: explicit
        if self._config.mqtt_host:
            self._mqtt_feed = MqttHealthFeed(self._config)
            try:
                self._mqtt_feed.start()
            except (OSError, ValueError) as exc:
                _logger.warning("MQTT health feed unavailable: %s", exc)
                self._mqtt_feed.stop()
                self._mqtt_feed = None
            else:
                feed = self._mqtt_feed
                return lambda: feed
        return self._actuator.health_readings

    def _require_transport(self) -> RadarTransport:
        if self._transport is None:
            raise RadarLockError("Client not initialized. Use 'async with RadarLockClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def coordinator(self) -> LockCoordinator:
        return self._coordinator

    async def test_connection(self) -> int:
        """Fetch one snapshot and return how many tracks the radar reports.

        Raises
        ------
        RadarLockTransportError
            If the radar cannot be reached or answers with an invalid payload.
        """
        tracks = await self._require_transport().fetch_tracks()
        _logger.info("Radar reachable at %s, %d tracks visible", self._config.radar_base_url, len(tracks))
        return len(tracks)

    async def lock(self, track_id: str) -> bool:
        return await self._coordinator.lock(track_id)

    async def unlock(self, reason: str = REASON_USER) -> None:
        await self._coordinator.unlock(reason)

    def snapshot(self) -> CoordinatorSnapshot:
        return self._coordinator.snapshot()
