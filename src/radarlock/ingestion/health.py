"""Actuator health telemetry parsing."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from radarlock.models.health import HealthReading

_logger = logging.getLogger(__name__)


def parse_health_payload(payload: bytes | str | dict[str, Any]) -> HealthReading | None:
    """Parse one telemetry message into a :class:`HealthReading`.

    Accepts raw MQTT bytes, a JSON string, or an already-decoded dict.
    Messages may wrap the reading in a ``data`` object. Returns ``None``
    for anything that is not a valid reading.
    """
    data: Any = payload
    if isinstance(payload, bytes | str):
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError):
            _logger.debug("Health payload is not JSON")
            return None
    if not isinstance(data, dict):
        return None
    nested = data.get("data")
    if isinstance(nested, dict):
        data = {**data, **nested}
    try:
        return HealthReading.model_validate(data)
    except ValidationError:
        _logger.debug("Invalid health payload: %s", data, exc_info=True)
        return None
