"""Actuator health models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from radarlock.ingestion.normalize import safe_bool, safe_int


class HealthReading(BaseModel):
    """One actuator health telemetry sample.

    Parameters
    ----------
    connected : bool
        Whether the actuator link is up.
    battery_percent : int or None
        Remaining battery (0-100). ``None`` when the sample carries no
        battery information.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    connected: bool = Field(default=True, validation_alias=AliasChoices("connected", "isConnected", "online"))
    battery_percent: int | None = Field(
        default=None,
        ge=0,
        le=100,
        validation_alias=AliasChoices(
            "battery_percent",
            "batteryPercent",
            "remainPowerPercent",
            "percentage",
            "battery",
        ),
    )

    @field_validator("connected", mode="before")
    @classmethod
    def _coerce_connected(cls, value: Any) -> bool:
        parsed = safe_bool(value)
        if parsed is None:
            raise ValueError(f"invalid connectivity flag: {value!r}")
        return parsed

    @field_validator("battery_percent", mode="before")
    @classmethod
    def _coerce_battery(cls, value: Any) -> int | None:
        return safe_int(value)


class HealthSnapshot(BaseModel):
    """Latest actuator health plus the battery warning latches.

    ``low_battery_warned`` and ``critical_battery_triggered`` are set when the
    battery first drops to or below the respective threshold and cleared
    only once it rises strictly above it again.
    """

    model_config = ConfigDict(extra="forbid")

    connected: bool = False
    battery_percent: int | None = None
    low_battery_warned: bool = False
    critical_battery_triggered: bool = False
