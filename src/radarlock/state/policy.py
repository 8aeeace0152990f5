"""Deterministic staleness policy.

Pure functions only: every decision takes ``now`` explicitly so callers
control the clock.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from radarlock.models.track import TrackedObject


@dataclass(frozen=True, slots=True)
class TrackView:
    """A track as classified at one instant."""

    track: TrackedObject
    is_stale: bool

    @property
    def id(self) -> str:
        return self.track.id


def track_age(now: float, last_update: float) -> float:
    return now - last_update


def is_stale(now: float, last_update: float, stale_timeout: float) -> bool:
    """A track is stale once its age strictly exceeds ``stale_timeout``."""
    return track_age(now, last_update) > stale_timeout


def should_prune(now: float, last_update: float, removal_timeout: float) -> bool:
    """Whether a track is old enough to drop from the working set.

    A ``removal_timeout`` of zero disables pruning.
    """
    if removal_timeout <= 0:
        return False
    return track_age(now, last_update) >= removal_timeout


def classify_tracks(
    tracks: Iterable[TrackedObject],
    *,
    now: float,
    stale_timeout: float,
    removal_timeout: float,
) -> dict[str, TrackView]:
    """Prune expired tracks and classify the rest, keyed by track id.

    If the same id appears more than once, the most recently updated entry
    wins.
    """
    views: dict[str, TrackView] = {}
    for track in tracks:
        if should_prune(now, track.last_update, removal_timeout):
            continue
        existing = views.get(track.id)
        if existing is not None and existing.track.last_update >= track.last_update:
            continue
        views[track.id] = TrackView(track=track, is_stale=is_stale(now, track.last_update, stale_timeout))
    return views
