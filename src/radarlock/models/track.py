"""Radar track models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from radarlock.ingestion.normalize import normalize_timestamp_seconds, safe_float, safe_str


class _TrackPart(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )


class Position(_TrackPart):
    """Geodetic position in degrees / meters."""

    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lon", "lng"))
    altitude: float = Field(default=0.0, validation_alias=AliasChoices("altitude", "alt"))

    @field_validator("altitude", mode="before")
    @classmethod
    def _coerce_altitude(cls, value: Any) -> float:
        parsed = safe_float(value)
        return 0.0 if parsed is None else parsed


class Velocity(_TrackPart):
    """Ground speed (m/s) and heading (degrees, 0-360)."""

    speed: float | None = None
    heading: float | None = Field(default=None, validation_alias=AliasChoices("heading", "direction", "course"))

    @field_validator("speed", "heading", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)


class Observation(_TrackPart):
    """Radar-relative observation of a track."""

    range: float | None = None
    radial_velocity: float | None = Field(default=None, validation_alias=AliasChoices("radialVelocity", "radial_velocity"))
    azimuth_angle: float | None = Field(default=None, validation_alias=AliasChoices("azimuthAngle", "azimuth_angle"))

    @field_validator("range", "radial_velocity", "azimuth_angle", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)


class Classification(_TrackPart):
    type: str = "unknown"
    confidence: float | None = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> float | None:
        return safe_float(value)


class TrackStats(_TrackPart):
    amplitude: float | None = None
    rcs: float | None = None
    classifications: tuple[Classification, ...] = ()

    @field_validator("amplitude", "rcs", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("classifications", mode="before")
    @classmethod
    def _drop_non_objects(cls, value: Any) -> Any:
        if not isinstance(value, list | tuple):
            return ()
        return tuple(item for item in value if isinstance(item, dict | Classification))


class TrackedObject(BaseModel):
    """A tracked object reported by the radar.

    The radar nests position and velocity under a single ``geolocation``
    object and reports ``timestamp`` in epoch milliseconds; both shapes are
    accepted, as is the flat ``position``/``velocity``/``last_update`` form
    used when constructing tracks directly.

    Parameters
    ----------
    id : str
        Stable track identifier.
    last_update : float
        Epoch seconds of the last radar update for this track.
    position : Position
        Latest geodetic position.
    velocity : Velocity
        Latest speed/heading.
    observation : Observation or None
        Radar-relative measurement, when reported.
    stats : TrackStats or None
        Signal statistics and classifier output, when reported.
    raw : dict
        Original payload.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: str
    last_update: float = Field(validation_alias=AliasChoices("last_update", "lastUpdate", "timestamp"))
    position: Position
    velocity: Velocity = Field(default_factory=Velocity)
    observation: Observation | None = None
    stats: TrackStats | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_geolocation(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        geolocation = values.get("geolocation")
        if not isinstance(geolocation, dict):
            return values
        merged = dict(values)
        merged.setdefault("position", geolocation)
        merged.setdefault("velocity", geolocation)
        merged.setdefault("raw", values)
        return merged

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("track id must be non-empty")
        return text

    @field_validator("last_update", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> float:
        ts = normalize_timestamp_seconds(value)
        if ts is None:
            raise ValueError(f"invalid track timestamp: {value!r}")
        return ts

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> TrackedObject:
        """Parse one entry of the radar ``result`` list."""
        return cls.model_validate(payload)

    @property
    def primary_classification(self) -> Classification | None:
        """Highest-confidence classification, if any."""
        if self.stats is None or not self.stats.classifications:
            return None
        return max(self.stats.classifications, key=lambda c: c.confidence or 0.0)
