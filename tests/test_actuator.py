from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import pytest

from radarlock.actuator import ThrottledActuator
from radarlock.geo import distance_meters
from radarlock.models.command import FollowCommand
from radarlock.models.health import HealthReading


@dataclass
class _RecordingActuator:
    sent: list[FollowCommand] = field(default_factory=list)
    holds: int = 0

    async def send_target(self, command: FollowCommand) -> None:
        self.sent.append(command)

    async def stop_and_hold(self) -> None:
        self.holds += 1

    async def health_readings(self) -> AsyncIterator[HealthReading]:
        yield HealthReading(battery_percent=80)


@dataclass
class _Clock:
    now: float = 0.0

    def __call__(self) -> float:
        return self.now


def _cmd(lat: float, lon: float, track_id: str = "1") -> FollowCommand:
    return FollowCommand(latitude=lat, longitude=lon, altitude=10.0, track_id=track_id, issued_at=0.0)


def test_distance_meters() -> None:
    assert distance_meters(52.0, 4.0, 52.0, 4.0) == 0.0
    # One degree of latitude is ~111.2 km.
    assert distance_meters(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)


@pytest.mark.asyncio
async def test_throttle_skips_within_interval() -> None:
    inner = _RecordingActuator()
    clock = _Clock()
    throttled = ThrottledActuator(inner, min_interval=3.0, min_distance_m=5.0, clock=clock)

    await throttled.send_target(_cmd(0.0, 0.0))
    clock.now = 1.0
    await throttled.send_target(_cmd(0.01, 0.0))
    assert len(inner.sent) == 1

    clock.now = 3.5
    await throttled.send_target(_cmd(0.01, 0.0))
    assert len(inner.sent) == 2
    assert throttled.last_sent == _cmd(0.01, 0.0)


@pytest.mark.asyncio
async def test_throttle_skips_small_moves() -> None:
    inner = _RecordingActuator()
    clock = _Clock()
    throttled = ThrottledActuator(inner, min_interval=3.0, min_distance_m=5.0, clock=clock)

    await throttled.send_target(_cmd(0.0, 0.0))
    clock.now = 10.0
    # ~1.1 m north.
    await throttled.send_target(_cmd(0.00001, 0.0))
    assert len(inner.sent) == 1


@pytest.mark.asyncio
async def test_new_track_id_is_never_throttled() -> None:
    inner = _RecordingActuator()
    throttled = ThrottledActuator(inner, min_interval=3.0, min_distance_m=5.0, clock=_Clock())

    await throttled.send_target(_cmd(0.0, 0.0, track_id="1"))
    await throttled.send_target(_cmd(0.0, 0.0, track_id="2"))
    assert [c.track_id for c in inner.sent] == ["1", "2"]


@pytest.mark.asyncio
async def test_stop_and_hold_resets_throttle() -> None:
    inner = _RecordingActuator()
    throttled = ThrottledActuator(inner, min_interval=3.0, min_distance_m=5.0, clock=_Clock())

    await throttled.send_target(_cmd(0.0, 0.0))
    await throttled.stop_and_hold()
    await throttled.send_target(_cmd(0.0, 0.0))

    assert inner.holds == 1
    assert len(inner.sent) == 2
    assert throttled.last_sent is not None


@pytest.mark.asyncio
async def test_health_readings_are_delegated() -> None:
    throttled = ThrottledActuator(_RecordingActuator(), min_interval=0.0, min_distance_m=0.0)
    readings = [reading async for reading in throttled.health_readings()]
    assert [r.battery_percent for r in readings] == [80]
