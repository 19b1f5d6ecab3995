"""Tests for owner-API model parsing."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from teslagps.exceptions import ClientInitError, ConfigError
from teslagps.models.drive_state import DriveState, ShiftState
from teslagps.models.token import AccessToken
from teslagps.models.vehicle import CoarseState, Vehicle, VehicleSnapshot

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------


class TestShiftState:
    @pytest.mark.parametrize(("raw", "expected"), [("D", True), ("R", True), ("N", True), ("P", False)])
    def test_is_driving(self, raw: str, expected: bool) -> None:
        assert ShiftState(raw).is_driving is expected

    def test_lowercase_accepted(self) -> None:
        assert ShiftState("d") is ShiftState.DRIVE

    @pytest.mark.parametrize("raw", [None, "", "X", 3])
    def test_unknown_values_fall_back(self, raw: object) -> None:
        assert ShiftState(raw) is ShiftState.UNKNOWN
        assert not ShiftState.UNKNOWN.is_driving


class TestCoarseState:
    def test_online_is_awake(self) -> None:
        assert CoarseState("online") is CoarseState.AWAKE

    def test_asleep(self) -> None:
        assert CoarseState("asleep") is CoarseState.ASLEEP

    @pytest.mark.parametrize("raw", ["offline", "waking", None])
    def test_other_states_unknown(self, raw: object) -> None:
        assert CoarseState(raw) is CoarseState.UNKNOWN


# ------------------------------------------------------------------
# Vehicle / VehicleSnapshot
# ------------------------------------------------------------------

VEHICLE_PAYLOAD: dict = {
    "id": 12345678901234567,
    "vehicle_id": 1234567890,
    "vin": "5YJ3E1EA7KF000000",
    "display_name": "Ghost",
    "state": "online",
    "in_service": False,
}


class TestVehicle:
    def test_parse(self) -> None:
        vehicle = Vehicle.model_validate(VEHICLE_PAYLOAD)
        assert vehicle.id == 12345678901234567
        assert vehicle.vehicle_id == 1234567890
        assert vehicle.display_name == "Ghost"
        assert vehicle.state is CoarseState.AWAKE
        assert vehicle.raw["in_service"] is False

    def test_string_ids_coerced(self) -> None:
        vehicle = Vehicle.model_validate({"id": "17", "state": "asleep"})
        assert vehicle.id == 17
        assert vehicle.state is CoarseState.ASLEEP
        assert vehicle.vin == ""


class TestVehicleSnapshot:
    def test_parse(self) -> None:
        snapshot = VehicleSnapshot.model_validate({**VEHICLE_PAYLOAD, "state": "asleep"})
        assert snapshot.vehicle_id == 12345678901234567
        assert snapshot.coarse_state is CoarseState.ASLEEP
        assert snapshot.timestamp.tzinfo is not None

    def test_missing_state_is_unknown(self) -> None:
        snapshot = VehicleSnapshot.model_validate({"id": 1})
        assert snapshot.coarse_state is CoarseState.UNKNOWN


# ------------------------------------------------------------------
# DriveState
# ------------------------------------------------------------------

DRIVE_PAYLOAD: dict = {
    "gps_as_of": 1767225600,
    "heading": 271,
    "latitude": 52.3676,
    "longitude": 4.9041,
    "native_latitude": 52.3676,
    "native_longitude": 4.9041,
    "power": 12,
    "shift_state": "D",
    "speed": 31,
    "timestamp": 1767225601234,
}


class TestDriveState:
    def test_parse(self) -> None:
        state = DriveState.model_validate(DRIVE_PAYLOAD)
        assert state.latitude == pytest.approx(52.3676)
        assert state.longitude == pytest.approx(4.9041)
        assert state.gps_timestamp == 1767225600
        assert state.shift_state is ShiftState.DRIVE
        assert state.is_driving
        assert state.has_position
        assert state.gps_time == datetime(2026, 1, 1, tzinfo=UTC)
        assert state.raw["power"] == 12

    def test_unwraps_vehicle_data_response(self) -> None:
        state = DriveState.model_validate({"id": 1, "drive_state": DRIVE_PAYLOAD})
        assert state.shift_state is ShiftState.DRIVE
        assert state.raw == DRIVE_PAYLOAD

    def test_null_shift_state(self) -> None:
        state = DriveState.model_validate({**DRIVE_PAYLOAD, "shift_state": None})
        assert state.shift_state is ShiftState.UNKNOWN
        assert not state.is_driving

    def test_millisecond_gps_timestamp(self) -> None:
        state = DriveState.model_validate({**DRIVE_PAYLOAD, "gps_as_of": 1767225600000})
        assert state.gps_timestamp == 1767225600

    def test_native_coordinates_when_plain_missing(self) -> None:
        payload = {k: v for k, v in DRIVE_PAYLOAD.items() if k not in ("latitude", "longitude")}
        state = DriveState.model_validate(payload)
        assert state.latitude == pytest.approx(52.3676)

    def test_hidden_location(self) -> None:
        state = DriveState.model_validate({"shift_state": "D", "gps_as_of": 1})
        assert not state.has_position
        assert state.position_key() == (None, None, 1)

    def test_value_equality(self) -> None:
        assert DriveState.model_validate(DRIVE_PAYLOAD) == DriveState.model_validate(DRIVE_PAYLOAD)


# ------------------------------------------------------------------
# AccessToken
# ------------------------------------------------------------------


class TestAccessToken:
    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "token.json"
        path.write_text(
            json.dumps(
                {
                    "access_token": " abc ",
                    "token_type": "Bearer",
                    "refresh_token": "def",
                    "expiry": "2026-01-01T00:00:00Z",
                }
            ),
            encoding="utf-8",
        )
        token = AccessToken.from_file(path)
        assert token.access_token == "abc"
        assert token.expiry == datetime(2026, 1, 1, tzinfo=UTC)
        assert "abc" not in repr(token)

    def test_bare_token_file(self, tmp_path: Path) -> None:
        path = tmp_path / "token"
        path.write_text("raw-token\n", encoding="utf-8")
        assert AccessToken.from_file(path).access_token == "raw-token"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            AccessToken.from_file(tmp_path / "nope")

    def test_file_without_access_token(self, tmp_path: Path) -> None:
        path = tmp_path / "token.json"
        path.write_text('{"refresh_token": "def"}', encoding="utf-8")
        with pytest.raises(ClientInitError):
            AccessToken.from_file(path)
