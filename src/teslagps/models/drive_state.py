"""Drive-state model."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from teslagps._constants import DRIVING_SHIFT_STATES
from teslagps.ingestion.normalize import normalize_timestamp_seconds, safe_float


class ShiftState(StrEnum):
    """Transmission gear selection.

    The API sends ``null`` while the vehicle is off; that and any
    unmapped value resolve to ``UNKNOWN``.
    """

    PARK = "P"
    DRIVE = "D"
    REVERSE = "R"
    NEUTRAL = "N"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> ShiftState:
        if isinstance(value, str):
            upper = value.strip().upper()
            for member in cls:
                if member.value == upper:
                    return member
        return cls.UNKNOWN

    @property
    def is_driving(self) -> bool:
        return self.value in DRIVING_SHIFT_STATES


class DriveState(BaseModel):
    """Position and gear report for a vehicle.

    Fetching it keeps the vehicle awake. Two samples are compared by
    :meth:`position_key` to detect unchanged reports.

    Parameters
    ----------
    latitude : float or None
        Latitude in degrees, ``None`` when location is hidden.
    longitude : float or None
        Longitude in degrees, ``None`` when location is hidden.
    gps_timestamp : int or None
        Epoch seconds of the GPS fix (``gps_as_of``).
    shift_state : ShiftState
        Gear selection.
    speed : float or None
        Speed in mph as reported by the API.
    heading : float or None
        Heading in degrees.
    raw : dict
        Full drive_state dict.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float | None = Field(default=None, validation_alias=AliasChoices("latitude", "native_latitude"))
    longitude: float | None = Field(default=None, validation_alias=AliasChoices("longitude", "native_longitude"))
    gps_timestamp: int | None = Field(
        default=None,
        validation_alias=AliasChoices("gps_as_of", "gps_timestamp"),
    )
    shift_state: ShiftState = ShiftState.UNKNOWN
    speed: float | None = None
    heading: float | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _unwrap(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        # vehicle_data responses nest the section under "drive_state"
        nested = values.get("drive_state")
        source = nested if isinstance(nested, dict) else values
        merged = dict(source)
        merged.setdefault("raw", source)
        return merged

    @field_validator("latitude", "longitude", "speed", "heading", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("gps_timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> int | None:
        return normalize_timestamp_seconds(value)

    @field_validator("shift_state", mode="before")
    @classmethod
    def _coerce_shift_state(cls, value: Any) -> ShiftState:
        return ShiftState(value)

    @property
    def is_driving(self) -> bool:
        return self.shift_state.is_driving

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None and self.gps_timestamp is not None

    def position_key(self) -> tuple[float | None, float | None, int | None]:
        """``(latitude, longitude, gps_timestamp)`` used for deduplication."""
        return (self.latitude, self.longitude, self.gps_timestamp)

    @property
    def gps_time(self) -> datetime | None:
        """GPS fix time as an aware UTC datetime."""
        if self.gps_timestamp is None:
            return None
        return datetime.fromtimestamp(self.gps_timestamp, tz=UTC)
