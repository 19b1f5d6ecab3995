from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from teslagps.config import TrackerConfig
from teslagps.exceptions import ApiError, VehicleFetchError
from teslagps.models.drive_state import DriveState
from teslagps.models.vehicle import CoarseState, Vehicle, VehicleSnapshot

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeClock:
    now: datetime = T0

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def drive(shift: str | None, lat: float = 1.0, lon: float = 1.0, ts: int = 100) -> DriveState:
    return DriveState.model_validate({"shift_state": shift, "latitude": lat, "longitude": lon, "gps_as_of": ts})


@dataclass
class FakeVehicleClient:
    """Scripted vehicle client.

    Each read pops the next scripted item; the last one repeats. Exceptions
    in the script are raised instead of returned.
    """

    vehicles: list[Vehicle] = field(default_factory=lambda: [Vehicle(id=42, display_name="Test")])
    coarse_states: list[CoarseState | Exception] = field(default_factory=lambda: [CoarseState.AWAKE])
    drive_states: list[DriveState | Exception] = field(default_factory=lambda: [drive("P")])
    calls: dict[str, int] = field(default_factory=dict)
    wake_error: Exception | None = None

    def _record_call(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    @staticmethod
    def _next(script: list) -> object:
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return item

    async def list_vehicles(self) -> list[Vehicle]:
        self._record_call("list_vehicles")
        return list(self.vehicles)

    async def get_vehicle(self, vehicle_id: int) -> VehicleSnapshot:
        self._record_call("get_vehicle")
        state = self._next(self.coarse_states)
        return VehicleSnapshot(vehicle_id=vehicle_id, coarse_state=state)

    async def get_drive_state(self, vehicle_id: int) -> DriveState:
        self._record_call("get_drive_state")
        return self._next(self.drive_states)  # type: ignore[return-value]

    async def wake(self, vehicle_id: int) -> VehicleSnapshot:
        self._record_call("wake")
        if self.wake_error is not None:
            raise self.wake_error
        return VehicleSnapshot(vehicle_id=vehicle_id, coarse_state=CoarseState.UNKNOWN)


def fetch_error() -> VehicleFetchError:
    err = VehicleFetchError("Couldn't retrieve drive state for vehicle 42: boom", vehicle_id=42)
    err.__cause__ = ApiError("boom", code="500")
    return err


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_client() -> FakeVehicleClient:
    return FakeVehicleClient()


@pytest.fixture
def config() -> TrackerConfig:
    return TrackerConfig(token_path="token.json", tick_interval=0.0, parked_backoff=0.0, asleep_backoff=0.0)
