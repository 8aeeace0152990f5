from __future__ import annotations

import pytest
from pydantic import ValidationError

from radarlock.ingestion.tracks import parse_tracks_response
from radarlock.models.command import FollowCommand
from radarlock.models.health import HealthReading
from radarlock.models.track import Position, TrackedObject


def _wire_track(track_id: str = "17", timestamp: int = 1_760_000_000_000) -> dict:
    return {
        "id": track_id,
        "timestamp": timestamp,
        "geolocation": {
            "latitude": 52.3702,
            "longitude": 4.8952,
            "altitude": 120.5,
            "speed": 12.4,
            "heading": 271.0,
        },
        "observation": {"range": 830.2, "radialVelocity": -3.1, "azimuthAngle": 14.7},
        "stats": {
            "amplitude": 41.0,
            "rcs": 0.02,
            "classifications": [
                {"type": "bird", "confidence": 0.2},
                {"type": "drone", "confidence": 0.75},
            ],
        },
    }


def test_radar_track_geolocation_is_split_into_position_and_velocity() -> None:
    track = TrackedObject.from_api(_wire_track())

    assert track.id == "17"
    assert track.position.latitude == pytest.approx(52.3702)
    assert track.position.altitude == pytest.approx(120.5)
    assert track.velocity.speed == pytest.approx(12.4)
    assert track.velocity.heading == pytest.approx(271.0)
    assert track.observation is not None
    assert track.observation.radial_velocity == pytest.approx(-3.1)
    assert track.raw["id"] == "17"


def test_millisecond_timestamp_is_normalized_to_seconds() -> None:
    track = TrackedObject.from_api(_wire_track(timestamp=1_760_000_000_500))
    assert track.last_update == pytest.approx(1_760_000_000.5)


def test_seconds_timestamp_is_kept() -> None:
    track = TrackedObject.from_api(_wire_track(timestamp=1_760_000_000))
    assert track.last_update == pytest.approx(1_760_000_000.0)


def test_primary_classification_picks_highest_confidence() -> None:
    track = TrackedObject.from_api(_wire_track())
    primary = track.primary_classification
    assert primary is not None
    assert primary.type == "drone"


def test_numeric_track_id_is_coerced_to_string() -> None:
    payload = _wire_track()
    payload["id"] = 42
    assert TrackedObject.from_api(payload).id == "42"


def test_track_without_timestamp_is_rejected() -> None:
    payload = _wire_track()
    payload["timestamp"] = 0
    with pytest.raises(ValidationError):
        TrackedObject.from_api(payload)


def test_parse_tracks_response_skips_invalid_entries() -> None:
    broken = _wire_track("bad")
    del broken["geolocation"]
    tracks = parse_tracks_response({"result": [_wire_track("1"), broken, "junk", _wire_track("2")]})
    assert [t.id for t in tracks] == ["1", "2"]


def test_parse_tracks_response_requires_result_list() -> None:
    with pytest.raises(ValidationError):
        parse_tracks_response({"tracks": []})


def test_follow_command_from_track() -> None:
    track = TrackedObject(
        id="5",
        last_update=1000.0,
        position=Position(latitude=1.5, longitude=2.5, altitude=30.0),
    )
    command = FollowCommand.from_track(track, issued_at=1234.0)
    assert command.track_id == "5"
    assert (command.latitude, command.longitude, command.altitude) == (1.5, 2.5, 30.0)
    assert command.issued_at == 1234.0


def test_health_reading_aliases() -> None:
    assert HealthReading.model_validate({"batteryPercent": 55}).battery_percent == 55
    assert HealthReading.model_validate({"remainPowerPercent": "17.6"}).battery_percent == 18
    reading = HealthReading.model_validate({"isConnected": "false"})
    assert reading.connected is False
    assert reading.battery_percent is None


def test_health_reading_rejects_out_of_range_battery() -> None:
    with pytest.raises(ValidationError):
        HealthReading.model_validate({"battery_percent": 140})
