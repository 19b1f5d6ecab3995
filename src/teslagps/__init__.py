"""teslagps - Stream a GPX track of a Tesla while letting it sleep when parked."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("teslagps")
except PackageNotFoundError:
    __version__ = "0+local"
from teslagps.client import TeslaClient, VehicleClient
from teslagps.config import TrackerConfig
from teslagps.exceptions import (
    ApiError,
    AuthenticationError,
    ClientInitError,
    ConfigError,
    TeslaGpsError,
    TransportError,
    VehicleFetchError,
    VehicleUnavailableError,
)
from teslagps.gpx import TrackWriter
from teslagps.models import (
    AccessToken,
    CoarseState,
    DriveState,
    ShiftState,
    Vehicle,
    VehicleSnapshot,
)
from teslagps.poller import PollLoop, PollState, TickOutcome
from teslagps.state.policy import SleepDecision, SleepTimers
from teslagps.state.sleep import SleepCoordinator
from teslagps.state.tracker import DriveTracker, TrackOutcome

__all__ = [
    "__version__",
    "AccessToken",
    "ApiError",
    "AuthenticationError",
    "ClientInitError",
    "CoarseState",
    "ConfigError",
    "DriveState",
    "DriveTracker",
    "PollLoop",
    "PollState",
    "ShiftState",
    "SleepCoordinator",
    "SleepDecision",
    "SleepTimers",
    "TeslaClient",
    "TeslaGpsError",
    "TickOutcome",
    "TrackOutcome",
    "TrackWriter",
    "TrackerConfig",
    "TransportError",
    "Vehicle",
    "VehicleClient",
    "VehicleFetchError",
    "VehicleSnapshot",
    "VehicleUnavailableError",
]
