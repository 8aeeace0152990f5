"""Data models for radar tracks, actuator health and follow commands."""

from radarlock.models.command import FollowCommand
from radarlock.models.health import HealthReading, HealthSnapshot
from radarlock.models.track import (
    Classification,
    Observation,
    Position,
    TrackedObject,
    TrackStats,
    Velocity,
)

__all__ = [
    "Classification",
    "FollowCommand",
    "HealthReading",
    "HealthSnapshot",
    "Observation",
    "Position",
    "TrackStats",
    "TrackedObject",
    "Velocity",
]
