"""The single lock slot and its read-only snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from radarlock.models.health import HealthSnapshot
from radarlock.models.track import TrackedObject


class LockPhase(StrEnum):
    UNLOCKED = "unlocked"
    LOCKED_ACTIVE = "locked_active"
    LOCKED_STALE = "locked_stale"


@dataclass
class LockState:
    """Mutable lock record, owned exclusively by one coordinator.

    Invariant: ``stale_grace_active`` implies ``locked_track_id`` and
    ``stale_since`` are both set.
    """

    locked_track_id: str | None = None
    locked_at: float | None = None
    stale_grace_active: bool = False
    stale_since: float | None = None
    is_tracking: bool = False

    @property
    def phase(self) -> LockPhase:
        if self.locked_track_id is None:
            return LockPhase.UNLOCKED
        if self.stale_grace_active:
            return LockPhase.LOCKED_STALE
        return LockPhase.LOCKED_ACTIVE

    def acquire(self, track_id: str, now: float) -> None:
        self.locked_track_id = track_id
        self.locked_at = now
        self.stale_grace_active = False
        self.stale_since = None
        self.is_tracking = False

    def mark_stale(self, now: float) -> None:
        if self.locked_track_id is None:
            raise RuntimeError("cannot mark stale without a lock")
        self.stale_grace_active = True
        self.stale_since = now
        self.is_tracking = False

    def mark_recovered(self) -> None:
        self.stale_grace_active = False
        self.stale_since = None

    def clear(self) -> None:
        self.locked_track_id = None
        self.locked_at = None
        self.stale_grace_active = False
        self.stale_since = None
        self.is_tracking = False


class VisibleTrack(BaseModel):
    """A track in the latest snapshot, flagged for display."""

    model_config = ConfigDict(frozen=True)

    track: TrackedObject
    is_stale: bool
    is_locked: bool


class CoordinatorSnapshot(BaseModel):
    """Point-in-time view of coordinator state."""

    model_config = ConfigDict(frozen=True)

    phase: LockPhase = LockPhase.UNLOCKED
    locked_track_id: str | None = None
    is_stale: bool = False
    is_tracking: bool = False
    locked_at: float | None = None
    stale_since: float | None = None
    source_connected: bool = False
    health: HealthSnapshot = Field(default_factory=HealthSnapshot)
    tracks: tuple[VisibleTrack, ...] = ()
