"""Follow command model."""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field

from radarlock.models.track import TrackedObject


class FollowCommand(BaseModel):
    """A "go to point" command derived from a locked track update."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    latitude: float
    longitude: float
    altitude: float
    track_id: str
    issued_at: float = Field(default_factory=time.time)

    @classmethod
    def from_track(cls, track: TrackedObject, *, issued_at: float | None = None) -> FollowCommand:
        position = track.position
        kwargs: dict[str, float] = {}
        if issued_at is not None:
            kwargs["issued_at"] = issued_at
        return cls(
            latitude=position.latitude,
            longitude=position.longitude,
            altitude=position.altitude,
            track_id=track.id,
            **kwargs,
        )
