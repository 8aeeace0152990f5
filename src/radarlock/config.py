"""Coordinator configuration for radarlock."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from radarlock._constants import (
    DEFAULT_ACTUATOR_TIMEOUT,
    DEFAULT_CRITICAL_BATTERY_THRESHOLD,
    DEFAULT_HEALTH_RETRY_DELAY,
    DEFAULT_LOW_BATTERY_THRESHOLD,
    DEFAULT_MINIMUM_DISTANCE_M,
    DEFAULT_MISSION_UPDATE_INTERVAL,
    DEFAULT_MQTT_KEEPALIVE,
    DEFAULT_MQTT_PORT,
    DEFAULT_MQTT_TOPIC,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RADAR_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_STALE_GRACE_DURATION,
    DEFAULT_STALE_REMOVAL_TIMEOUT,
    DEFAULT_STALE_TIMEOUT,
    MIN_POLL_INTERVAL,
    MIN_STALE_TIMEOUT,
)
from radarlock.exceptions import RadarLockConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class LockConfig:
    """Coordinator, polling and interlock configuration.

    Parameters
    ----------
    radar_base_url : str
        Base URL of the radar HTTP API (``/api/tracks.json`` is appended).
    poll_interval : float
        Seconds between radar polls. Must be at least 1.
    stale_timeout : float
        A track whose last update is older than this many seconds is stale.
        Must be at least 1.
    stale_removal_timeout : float
        Tracks older than this many seconds are pruned from the working set.
        ``0`` disables pruning (tracks are never removed by age alone).
    stale_grace_duration : float
        Seconds a stale locked track keeps its lock before it is released
        automatically.
    low_battery_threshold : int
        Battery percentage at or below which ``LOW_BATTERY`` is emitted.
    critical_battery_threshold : int
        Battery percentage at or below which ``CRITICAL_BATTERY`` is emitted
        and any lock is released.
    request_timeout : float
        Total timeout for one radar HTTP request.
    actuator_timeout : float
        Seconds to wait for ``send_target``/``stop_and_hold`` before the
        command is reported as failed.
    mission_update_interval : float
        Minimum seconds between follow commands forwarded by
        :class:`radarlock.actuator.ThrottledActuator`.
    minimum_distance_m : float
        Follow commands whose target moved less than this many meters from
        the last forwarded target are skipped by the throttle.
    mqtt_host : str or None
        Broker host for actuator health telemetry. ``None`` disables MQTT and
        the actuator's own health stream is used instead.
    mqtt_port : int
        Broker port.
    mqtt_topic : str
        Topic carrying JSON health readings.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    mqtt_username : str or None
        Optional broker username.
    mqtt_password : str or None
        Optional broker password.
    mqtt_tls : bool
        Enable TLS towards the broker.
    health_retry_delay : float
        Seconds to wait before re-subscribing to a health feed that failed
        or ended.
    """

    radar_base_url: str = DEFAULT_RADAR_BASE_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    stale_timeout: float = DEFAULT_STALE_TIMEOUT
    stale_removal_timeout: float = DEFAULT_STALE_REMOVAL_TIMEOUT
    stale_grace_duration: float = DEFAULT_STALE_GRACE_DURATION
    low_battery_threshold: int = DEFAULT_LOW_BATTERY_THRESHOLD
    critical_battery_threshold: int = DEFAULT_CRITICAL_BATTERY_THRESHOLD
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    actuator_timeout: float = DEFAULT_ACTUATOR_TIMEOUT
    mission_update_interval: float = DEFAULT_MISSION_UPDATE_INTERVAL
    minimum_distance_m: float = DEFAULT_MINIMUM_DISTANCE_M
    mqtt_host: str | None = None
    mqtt_port: int = DEFAULT_MQTT_PORT
    mqtt_topic: str = DEFAULT_MQTT_TOPIC
    mqtt_keepalive: int = DEFAULT_MQTT_KEEPALIVE
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_tls: bool = False
    health_retry_delay: float = DEFAULT_HEALTH_RETRY_DELAY

    def __post_init__(self) -> None:
        if self.poll_interval < MIN_POLL_INTERVAL:
            raise RadarLockConfigError(f"poll_interval must be >= {MIN_POLL_INTERVAL}s, got {self.poll_interval}")
        if self.stale_timeout < MIN_STALE_TIMEOUT:
            raise RadarLockConfigError(f"stale_timeout must be >= {MIN_STALE_TIMEOUT}s, got {self.stale_timeout}")
        if self.stale_removal_timeout < 0:
            raise RadarLockConfigError("stale_removal_timeout must be >= 0 (0 disables removal)")
        if self.stale_grace_duration < 0:
            raise RadarLockConfigError("stale_grace_duration must be >= 0")
        if not 0 <= self.critical_battery_threshold <= self.low_battery_threshold <= 100:
            raise RadarLockConfigError(
                "battery thresholds must satisfy 0 <= critical <= low <= 100, "
                f"got critical={self.critical_battery_threshold} low={self.low_battery_threshold}"
            )
        if self.health_retry_delay < 0:
            raise RadarLockConfigError("health_retry_delay must be >= 0")
        if self.request_timeout <= 0 or self.actuator_timeout <= 0:
            raise RadarLockConfigError("request_timeout and actuator_timeout must be positive")
        if not self.radar_base_url.strip():
            raise RadarLockConfigError("radar_base_url must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> LockConfig:
        """Create configuration from environment variables.

        Reads optional ``RADARLOCK_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        LockConfig
            Populated configuration.

        Raises
        ------
        RadarLockConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "RADARLOCK_RADAR_BASE_URL": "radar_base_url",
            "RADARLOCK_MQTT_HOST": "mqtt_host",
            "RADARLOCK_MQTT_TOPIC": "mqtt_topic",
            "RADARLOCK_MQTT_USERNAME": "mqtt_username",
            "RADARLOCK_MQTT_PASSWORD": "mqtt_password",
        }
        _ENV_FLOAT_MAP = {
            "RADARLOCK_POLL_INTERVAL": "poll_interval",
            "RADARLOCK_STALE_TIMEOUT": "stale_timeout",
            "RADARLOCK_STALE_REMOVAL_TIMEOUT": "stale_removal_timeout",
            "RADARLOCK_STALE_GRACE_DURATION": "stale_grace_duration",
            "RADARLOCK_REQUEST_TIMEOUT": "request_timeout",
            "RADARLOCK_ACTUATOR_TIMEOUT": "actuator_timeout",
            "RADARLOCK_MISSION_UPDATE_INTERVAL": "mission_update_interval",
            "RADARLOCK_MINIMUM_DISTANCE_M": "minimum_distance_m",
            "RADARLOCK_HEALTH_RETRY_DELAY": "health_retry_delay",
        }
        _ENV_INT_MAP = {
            "RADARLOCK_LOW_BATTERY_THRESHOLD": "low_battery_threshold",
            "RADARLOCK_CRITICAL_BATTERY_THRESHOLD": "critical_battery_threshold",
            "RADARLOCK_MQTT_PORT": "mqtt_port",
            "RADARLOCK_MQTT_KEEPALIVE": "mqtt_keepalive",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        for mapping, convert in ((_ENV_FLOAT_MAP, float), (_ENV_INT_MAP, int)):
            for env_key, field_name in mapping.items():
                val = env.get(env_key)
                if val is None or field_name in overrides:
                    continue
                try:
                    config_kwargs[field_name] = convert(val)
                except ValueError as exc:
                    raise RadarLockConfigError(f"{env_key} is not a valid number: {val!r}") from exc

        if "mqtt_tls" not in overrides:
            config_kwargs["mqtt_tls"] = _env_bool(env.get("RADARLOCK_MQTT_TLS"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
