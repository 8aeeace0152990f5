"""radarlock - Async target-lock coordinator for radar-guided actuators."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("radarlock")
except PackageNotFoundError:
    __version__ = "0+local"
from radarlock.actuator import ActuatorBridge, ThrottledActuator
from radarlock.client import RadarLockClient
from radarlock.config import LockConfig
from radarlock.coordinator import LockCoordinator
from radarlock.exceptions import (
    ActuatorError,
    CoordinatorClosedError,
    RadarLockConfigError,
    RadarLockError,
    RadarLockTransportError,
)
from radarlock.models import (
    Classification,
    FollowCommand,
    HealthReading,
    HealthSnapshot,
    Observation,
    Position,
    TrackedObject,
    TrackStats,
    Velocity,
)
from radarlock.state.events import LockEvent, LockEventKind
from radarlock.state.lock import CoordinatorSnapshot, LockPhase, VisibleTrack

__all__ = [
    "__version__",
    "ActuatorBridge",
    "ActuatorError",
    "Classification",
    "CoordinatorClosedError",
    "CoordinatorSnapshot",
    "FollowCommand",
    "HealthReading",
    "HealthSnapshot",
    "LockConfig",
    "LockCoordinator",
    "LockEvent",
    "LockEventKind",
    "LockPhase",
    "Observation",
    "Position",
    "RadarLockClient",
    "RadarLockConfigError",
    "RadarLockError",
    "RadarLockTransportError",
    "ThrottledActuator",
    "TrackStats",
    "TrackedObject",
    "Velocity",
    "VisibleTrack",
]
