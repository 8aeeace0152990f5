"""Battery warning latches."""

from __future__ import annotations

from dataclasses import dataclass

from radarlock.models.health import HealthReading, HealthSnapshot


@dataclass(frozen=True, slots=True)
class BatteryAlerts:
    """Warnings that fired for a single health reading."""

    low: bool = False
    critical: bool = False


class BatteryMonitor:
    """Track actuator health and fire battery warnings once per crossing.

    A warning fires when the percentage first drops to or below its
    threshold and re-arms only after the percentage rises strictly above
    that threshold. A reading that crosses both thresholds at once fires
    both warnings.
    """

    def __init__(self, *, low_threshold: int, critical_threshold: int) -> None:
        self._low_threshold = low_threshold
        self._critical_threshold = critical_threshold
        self._snapshot = HealthSnapshot()

    @property
    def snapshot(self) -> HealthSnapshot:
        return self._snapshot.model_copy()

    @property
    def critical(self) -> bool:
        return self._snapshot.critical_battery_triggered

    def mark_disconnected(self) -> None:
        """Telemetry was lost; latches and the last percentage are kept."""
        self._snapshot.connected = False

    def observe(self, reading: HealthReading) -> BatteryAlerts:
        state = self._snapshot
        state.connected = reading.connected

        percent = reading.battery_percent
        if percent is None:
            return BatteryAlerts()
        state.battery_percent = percent

        if percent > self._low_threshold:
            state.low_battery_warned = False
        if percent > self._critical_threshold:
            state.critical_battery_triggered = False

        low = False
        critical = False
        if percent <= self._low_threshold and not state.low_battery_warned:
            state.low_battery_warned = True
            low = True
        if percent <= self._critical_threshold and not state.critical_battery_triggered:
            state.critical_battery_triggered = True
            critical = True
        return BatteryAlerts(low=low, critical=critical)
