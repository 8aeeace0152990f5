"""Custom exception hierarchy for radarlock."""

from __future__ import annotations


class RadarLockError(Exception):
    """Base exception for all radarlock errors."""


class RadarLockConfigError(RadarLockError):
    """Invalid or missing configuration."""


class RadarLockTransportError(RadarLockError):
    """Radar fetch failure (network, timeout, non-200, invalid payload)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class ActuatorError(RadarLockError):
    """The actuator rejected or failed to execute a command.

    Raised by :class:`radarlock.actuator.ActuatorBridge` implementations.
    The coordinator turns these into ``ERROR`` events; they never reverse
    a lock or unlock decision.
    """

    def __init__(self, message: str, *, command: str = "") -> None:
        self.command = command
        super().__init__(message)


class CoordinatorClosedError(RadarLockError):
    """Operation attempted on a coordinator that is not running."""
