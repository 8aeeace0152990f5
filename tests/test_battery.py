from __future__ import annotations

import pytest

from radarlock.models.health import HealthReading
from radarlock.state.battery import BatteryAlerts, BatteryMonitor


@pytest.fixture
def monitor() -> BatteryMonitor:
    return BatteryMonitor(low_threshold=20, critical_threshold=10)


def _observe(monitor: BatteryMonitor, percent: int | None, connected: bool = True) -> BatteryAlerts:
    return monitor.observe(HealthReading(battery_percent=percent, connected=connected))


def test_low_warning_fires_once_per_crossing(monitor: BatteryMonitor) -> None:
    assert _observe(monitor, 50) == BatteryAlerts()
    assert _observe(monitor, 20) == BatteryAlerts(low=True)
    assert _observe(monitor, 18) == BatteryAlerts()
    # Back to exactly the threshold does not re-arm.
    assert _observe(monitor, 20) == BatteryAlerts()
    assert _observe(monitor, 19) == BatteryAlerts()
    assert _observe(monitor, 21) == BatteryAlerts()
    assert _observe(monitor, 19) == BatteryAlerts(low=True)


def test_reading_crossing_both_thresholds_fires_both(monitor: BatteryMonitor) -> None:
    alerts = _observe(monitor, 8)
    assert alerts == BatteryAlerts(low=True, critical=True)
    assert monitor.critical


def test_critical_latch_rearms_only_above_threshold(monitor: BatteryMonitor) -> None:
    _observe(monitor, 9)
    assert _observe(monitor, 10) == BatteryAlerts()
    assert monitor.critical
    assert _observe(monitor, 15) == BatteryAlerts()
    assert not monitor.critical
    assert _observe(monitor, 10) == BatteryAlerts(critical=True)


def test_reading_without_percentage_only_updates_connectivity(monitor: BatteryMonitor) -> None:
    _observe(monitor, 15)
    assert _observe(monitor, None, connected=False) == BatteryAlerts()
    snap = monitor.snapshot
    assert snap.connected is False
    assert snap.battery_percent == 15
    assert snap.low_battery_warned is True


def test_snapshot_is_a_copy(monitor: BatteryMonitor) -> None:
    _observe(monitor, 5)
    snap = monitor.snapshot
    snap.critical_battery_triggered = False
    assert monitor.critical
