"""Coordinator output events.

Every automatic or user-requested transition produces exactly one
:class:`LockEvent` so a presentation layer can render a status line.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class LockEventKind(StrEnum):
    TRACK_LOCKED = "track_locked"
    TRACK_UNLOCKED = "track_unlocked"
    TARGET_LOST = "target_lost"
    TRACK_STALE = "track_stale"
    TRACK_RECOVERED = "track_recovered"
    STALE_AUTO_UNLOCK = "stale_auto_unlock"
    LOW_BATTERY = "low_battery"
    CRITICAL_BATTERY = "critical_battery"
    ERROR = "error"


class LockEvent(BaseModel):
    """A user-facing coordinator event."""

    model_config = ConfigDict(frozen=True)

    kind: LockEventKind
    track_id: str | None = None
    grace_seconds_remaining: float | None = Field(
        default=None,
        description="Seconds until a stale lock is released (TRACK_STALE only).",
    )
    battery_percent: int | None = None
    reason: str | None = Field(default=None, description="Why a lock was released (TRACK_UNLOCKED only).")
    message: str | None = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def __str__(self) -> str:
        parts = [self.kind.value]
        if self.track_id is not None:
            parts.append(f"track={self.track_id}")
        if self.grace_seconds_remaining is not None:
            parts.append(f"grace={self.grace_seconds_remaining:g}s")
        if self.battery_percent is not None:
            parts.append(f"battery={self.battery_percent}%")
        if self.reason:
            parts.append(f"reason={self.reason}")
        if self.message:
            parts.append(self.message)
        return " ".join(parts)
