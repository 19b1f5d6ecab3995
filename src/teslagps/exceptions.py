"""Custom exception hierarchy for teslagps."""

from __future__ import annotations


class TeslaGpsError(Exception):
    """Base exception for all teslagps errors."""


class ConfigError(TeslaGpsError):
    """Invalid or missing configuration."""


class ClientInitError(TeslaGpsError):
    """The vehicle client could not be set up (bad token, no vehicle, ...)."""


class TransportError(TeslaGpsError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class ApiError(TeslaGpsError):
    """API answered with an error body."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class AuthenticationError(ApiError):
    """Access token rejected by the server (HTTP 401)."""


class VehicleUnavailableError(ApiError):
    """Vehicle is asleep or cannot be reached (HTTP 408).

    Drive-state requests against a sleeping vehicle fail this way until
    the vehicle is woken up.
    """


class VehicleFetchError(TeslaGpsError):
    """A vehicle or drive-state read failed.

    Wraps :class:`TransportError` and :class:`ApiError` so the poll loop
    has a single type to recover from. The original error is chained as
    ``__cause__``.
    """

    def __init__(self, message: str, *, vehicle_id: int | None = None) -> None:
        self.vehicle_id = vehicle_id
        super().__init__(message)
