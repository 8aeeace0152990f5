"""Radar track payload parsing."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from radarlock.models.track import TrackedObject

_logger = logging.getLogger(__name__)


class _TracksEnvelope(BaseModel):
    """Minimal envelope for ``/api/tracks.json`` responses."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    result: list[Any] = Field(...)


def parse_tracks_response(payload: Any) -> list[TrackedObject]:
    """Parse a radar response into tracks.

    The envelope must be valid; a malformed envelope raises
    :class:`pydantic.ValidationError`. Individual malformed track entries
    are skipped so one bad record does not hide every other track.
    """
    envelope = _TracksEnvelope.model_validate(payload)
    tracks: list[TrackedObject] = []
    for index, entry in enumerate(envelope.result):
        if not isinstance(entry, dict):
            _logger.debug("Skipping non-object track entry at index %d", index)
            continue
        try:
            tracks.append(TrackedObject.from_api(entry))
        except ValidationError as exc:
            _logger.debug("Skipping invalid track entry at index %d: %s", index, exc.errors()[:1])
    return tracks
