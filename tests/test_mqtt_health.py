from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from radarlock._mqtt import HealthMqttRuntime
from radarlock.config import LockConfig
from radarlock.ingestion.health import parse_health_payload
from radarlock.models.health import HealthReading


@dataclass
class _ImmediateLoop:
    calls: list[tuple[Any, tuple[Any, ...]]] = field(default_factory=list)

    def call_soon_threadsafe(self, callback: Any, *args: Any) -> None:
        self.calls.append((callback, args))
        callback(*args)


def test_parse_bytes_payload() -> None:
    reading = parse_health_payload(b'{"batteryPercent": 42, "connected": true}')
    assert reading == HealthReading(battery_percent=42, connected=True)


def test_parse_wrapped_payload() -> None:
    payload = json.dumps({"event": "health", "data": {"remainPowerPercent": 12}})
    reading = parse_health_payload(payload)
    assert reading is not None
    assert reading.battery_percent == 12


@pytest.mark.parametrize(
    "payload",
    [b"not json", b"[1, 2]", b'{"battery_percent": 250}', b'{"connected": "maybe"}', b"\xff\xfe"],
)
def test_invalid_payloads_are_ignored(payload: bytes) -> None:
    assert parse_health_payload(payload) is None


def test_runtime_hands_readings_to_loop() -> None:
    received: list[HealthReading] = []
    loop = _ImmediateLoop()
    runtime = HealthMqttRuntime(
        config=LockConfig(mqtt_host="broker.local"),
        loop=loop,  # type: ignore[arg-type]
        on_reading=received.append,
    )

    runtime._handle_payload("radarlock/actuator/health", b'{"battery": 33}')  # type: ignore[attr-defined]
    runtime._handle_payload("radarlock/actuator/health", b"garbage")  # type: ignore[attr-defined]

    assert [r.battery_percent for r in received] == [33]
    assert len(loop.calls) == 1
    assert not runtime.is_running


def test_runtime_requires_broker_host() -> None:
    runtime = HealthMqttRuntime(
        config=LockConfig(),
        loop=_ImmediateLoop(),  # type: ignore[arg-type]
        on_reading=lambda _reading: None,
    )
    with pytest.raises(ValueError, match="mqtt_host"):
        runtime.start()
