from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from radarlock.client import RadarLockClient
from radarlock.config import LockConfig
from radarlock.exceptions import RadarLockError
from radarlock.models.command import FollowCommand
from radarlock.models.health import HealthReading
from radarlock.state.events import LockEvent, LockEventKind
from radarlock.state.lock import LockPhase


@dataclass
class _FakeActuator:
    sent: list[FollowCommand] = field(default_factory=list)
    holds: int = 0

    async def send_target(self, command: FollowCommand) -> None:
        self.sent.append(command)

    async def stop_and_hold(self) -> None:
        self.holds += 1

    async def health_readings(self) -> AsyncIterator[HealthReading]:
        await asyncio.Event().wait()
        yield HealthReading()  # pragma: no cover


def _radar_app() -> web.Application:
    async def handler(_request: web.Request) -> web.Response:
        now_ms = int(time.time() * 1000)
        return web.json_response(
            {
                "result": [
                    {
                        "id": "7",
                        "timestamp": now_ms,
                        "geolocation": {"latitude": 52.0, "longitude": 4.0, "altitude": 50.0},
                    }
                ]
            }
        )

    app = web.Application()
    app.router.add_get("/api/tracks.json", handler)
    return app


@pytest.mark.asyncio
async def test_client_polls_locks_and_releases_on_exit() -> None:
    events: list[LockEvent] = []
    actuator = _FakeActuator()

    async with TestServer(_radar_app()) as server:
        config = LockConfig(radar_base_url=str(server.make_url("/")))
        async with RadarLockClient(config, actuator, on_event=events.append) as client:
            assert await client.test_connection() == 1

            for _ in range(50):
                if client.snapshot().tracks:
                    break
                await asyncio.sleep(0.02)

            assert await client.lock("7") is True
            assert client.snapshot().phase == LockPhase.LOCKED_ACTIVE

    kinds = [e.kind for e in events]
    assert kinds[0] == LockEventKind.TRACK_LOCKED
    assert kinds[-1] == LockEventKind.TRACK_UNLOCKED
    assert events[-1].reason == "shutdown"
    assert [c.track_id for c in actuator.sent][:1] == ["7"]
    assert actuator.holds == 1


@pytest.mark.asyncio
async def test_client_forwards_explicit_health_feed() -> None:
    events: list[LockEvent] = []

    async def feed() -> AsyncIterator[HealthReading]:
        yield HealthReading(battery_percent=15)
        await asyncio.Event().wait()

    async with TestServer(_radar_app()) as server:
        config = LockConfig(radar_base_url=str(server.make_url("/")))
        async with RadarLockClient(config, _FakeActuator(), health_feed=feed(), on_event=events.append) as client:
            for _ in range(50):
                if client.snapshot().health.battery_percent is not None:
                    break
                await asyncio.sleep(0.02)

            assert client.snapshot().health.battery_percent == 15

    assert LockEventKind.LOW_BATTERY in [e.kind for e in events]


@pytest.mark.asyncio
async def test_test_connection_requires_context() -> None:
    client = RadarLockClient(LockConfig(), _FakeActuator())
    with pytest.raises(RadarLockError):
        await client.test_connection()
