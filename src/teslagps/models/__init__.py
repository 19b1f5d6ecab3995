"""Data models for owner-API responses."""

from teslagps.models.drive_state import DriveState, ShiftState
from teslagps.models.token import AccessToken
from teslagps.models.vehicle import CoarseState, Vehicle, VehicleSnapshot

__all__ = [
    "AccessToken",
    "CoarseState",
    "DriveState",
    "ShiftState",
    "Vehicle",
    "VehicleSnapshot",
]
