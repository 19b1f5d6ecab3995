"""High-level async client for the Tesla owner API."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

import aiohttp
from pydantic import ValidationError

from teslagps._api import drive_state as _drive_state_api
from teslagps._api import vehicles as _vehicles_api
from teslagps._transport import HttpTransport, Transport
from teslagps.config import TrackerConfig
from teslagps.exceptions import ApiError, TeslaGpsError, TransportError, VehicleFetchError
from teslagps.models.drive_state import DriveState
from teslagps.models.token import AccessToken
from teslagps.models.vehicle import Vehicle, VehicleSnapshot

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class VehicleClient(Protocol):
    """What the poll loop needs from a vehicle API client."""

    async def list_vehicles(self) -> list[Vehicle]:
        ...

    async def get_vehicle(self, vehicle_id: int) -> VehicleSnapshot:
        ...

    async def get_drive_state(self, vehicle_id: int) -> DriveState:
        ...

    async def wake(self, vehicle_id: int) -> VehicleSnapshot:
        ...


class TeslaClient:
    """Async client for the Tesla owner API.

    Usage::

        async with TeslaClient(config) as client:
            vehicles = await client.list_vehicles()
            snapshot = await client.get_vehicle(vehicles[0].id)

    Per-vehicle calls (:meth:`get_vehicle`, :meth:`get_drive_state`, :meth:`wake`)
    raise :class:`VehicleFetchError`; the caller decides whether to retry
    on the next tick.
    """

    def __init__(
        self,
        config: TrackerConfig,
        *,
        token: AccessToken | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._token = token
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._owns_transport = transport is None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TeslaClient:
        if self._owns_transport:
            token = self._token or AccessToken.from_file(self._config.token_path)
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config.base_url, token.access_token, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if self._owns_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise TeslaGpsError("Client not initialized. Use 'async with TeslaClient(...) as client:'")
        return self._transport

    async def _fetch(self, vehicle_id: int, what: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run a per-vehicle call, folding transport/API failures into VehicleFetchError."""
        try:
            return await fn()
        except (TransportError, ApiError, ValidationError) as exc:
            raise VehicleFetchError(
                f"Couldn't retrieve {what} for vehicle {vehicle_id}: {exc}",
                vehicle_id=vehicle_id,
            ) from exc

    # ------------------------------------------------------------------
    # Vehicle API
    # ------------------------------------------------------------------

    async def list_vehicles(self) -> list[Vehicle]:
        """List the vehicles of the account."""
        return await _vehicles_api.fetch_vehicle_list(self._require_transport())

    async def get_vehicle(self, vehicle_id: int) -> VehicleSnapshot:
        """Coarse vehicle state. Does not keep the vehicle awake."""
        transport = self._require_transport()
        return await self._fetch(
            vehicle_id,
            "vehicle state",
            lambda: _vehicles_api.fetch_vehicle(transport, vehicle_id),
        )

    async def get_drive_state(self, vehicle_id: int) -> DriveState:
        """Position and gear state. Keeps the vehicle awake."""
        transport = self._require_transport()
        return await self._fetch(
            vehicle_id,
            "drive state",
            lambda: _drive_state_api.fetch_drive_state(transport, vehicle_id),
        )

    async def wake(self, vehicle_id: int) -> VehicleSnapshot:
        """Send a wake-up command. Returns immediately, the vehicle wakes asynchronously."""
        transport = self._require_transport()
        _logger.debug("Waking vehicle %s", vehicle_id)
        return await self._fetch(
            vehicle_id,
            "wake-up response",
            lambda: _vehicles_api.send_wake_up(transport, vehicle_id),
        )
