from __future__ import annotations

import pytest

from radarlock.config import LockConfig
from radarlock.exceptions import RadarLockConfigError


def test_defaults() -> None:
    config = LockConfig()
    assert config.poll_interval == 1.0
    assert config.stale_timeout == 5.0
    assert config.stale_removal_timeout == 60.0
    assert config.stale_grace_duration == 10.0
    assert (config.low_battery_threshold, config.critical_battery_threshold) == (20, 10)
    assert config.mqtt_host is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"poll_interval": 0.5},
        {"stale_timeout": 0.9},
        {"stale_removal_timeout": -1},
        {"stale_grace_duration": -0.1},
        {"low_battery_threshold": 5, "critical_battery_threshold": 10},
        {"low_battery_threshold": 120},
        {"request_timeout": 0},
        {"health_retry_delay": -1},
        {"radar_base_url": "  "},
    ],
)
def test_invalid_values_rejected(kwargs: dict) -> None:
    with pytest.raises(RadarLockConfigError):
        LockConfig(**kwargs)


def test_zero_removal_timeout_is_allowed() -> None:
    assert LockConfig(stale_removal_timeout=0).stale_removal_timeout == 0


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RADARLOCK_RADAR_BASE_URL", " http://radar.local:8080 ")
    monkeypatch.setenv("RADARLOCK_STALE_TIMEOUT", "7.5")
    monkeypatch.setenv("RADARLOCK_LOW_BATTERY_THRESHOLD", "30")
    monkeypatch.setenv("RADARLOCK_MQTT_HOST", "broker.local")
    monkeypatch.setenv("RADARLOCK_MQTT_TLS", "yes")

    config = LockConfig.from_env()

    assert config.radar_base_url == "http://radar.local:8080"
    assert config.stale_timeout == 7.5
    assert config.low_battery_threshold == 30
    assert config.mqtt_host == "broker.local"
    assert config.mqtt_tls is True


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RADARLOCK_POLL_INTERVAL", "not-a-number")
    monkeypatch.setenv("RADARLOCK_STALE_GRACE_DURATION", "3")

    config = LockConfig.from_env(poll_interval=2.0, stale_grace_duration=4.0)

    assert config.poll_interval == 2.0
    assert config.stale_grace_duration == 4.0


def test_from_env_rejects_bad_number(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RADARLOCK_MQTT_PORT", "eighteen")
    with pytest.raises(RadarLockConfigError, match="RADARLOCK_MQTT_PORT"):
        LockConfig.from_env()
