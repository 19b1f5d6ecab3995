"""Vehicle models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from teslagps.ingestion.normalize import safe_int, safe_str


class CoarseState(StrEnum):
    """Vehicle power state, readable without keeping the vehicle awake.

    The owner API reports ``"online"``, ``"asleep"``, ``"offline"`` or
    ``"waking"``. Everything besides online/asleep is ``UNKNOWN``.
    """

    AWAKE = "awake"
    ASLEEP = "asleep"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> CoarseState:
        if isinstance(value, str) and value.strip().lower() == "online":
            return cls.AWAKE
        return cls.UNKNOWN


class Vehicle(BaseModel):
    """A vehicle associated with the account.

    Fields are mapped from the ``/api/1/vehicles`` list entries.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: int
    """Owner-API identifier used in every vehicle URL."""
    vehicle_id: int | None = None
    """Identifier used by the streaming API."""
    vin: str = ""
    """Vehicle Identification Number."""
    display_name: str = ""
    """User-defined vehicle name."""
    state: CoarseState = CoarseState.UNKNOWN
    """Power state at listing time."""

    raw: dict[str, Any] = Field(default_factory=dict)
    """Full API response dict for access to additional fields."""

    @model_validator(mode="before")
    @classmethod
    def _ensure_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        merged.setdefault("raw", values)
        return merged

    @field_validator("id", "vehicle_id", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("vin", "display_name", mode="before")
    @classmethod
    def _coerce_strs(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("state", mode="before")
    @classmethod
    def _coerce_state(cls, value: Any) -> CoarseState:
        return CoarseState(value)


class VehicleSnapshot(BaseModel):
    """Coarse vehicle state fetched on a polling tick."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    vehicle_id: int = Field(validation_alias=AliasChoices("id", "vehicle_id"))
    coarse_state: CoarseState = Field(
        default=CoarseState.UNKNOWN,
        validation_alias=AliasChoices("state", "coarse_state"),
    )
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("vehicle_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> int | None:
        return safe_int(value)

    @field_validator("coarse_state", mode="before")
    @classmethod
    def _coerce_state(cls, value: Any) -> CoarseState:
        return CoarseState(value)
