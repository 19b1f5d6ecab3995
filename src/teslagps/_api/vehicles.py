"""Vehicle endpoints.

Endpoints:
  - GET  /api/1/vehicles
  - GET  /api/1/vehicles/{id}
  - POST /api/1/vehicles/{id}/wake_up
"""

from __future__ import annotations

import logging

from teslagps._api._common import unwrap_response
from teslagps._transport import Transport
from teslagps.exceptions import ApiError
from teslagps.models.vehicle import Vehicle, VehicleSnapshot

_logger = logging.getLogger(__name__)

_LIST_ENDPOINT = "/api/1/vehicles"


async def fetch_vehicle_list(transport: Transport) -> list[Vehicle]:
    """Fetch all vehicles associated with the token's account."""
    body = await transport.request_json("GET", _LIST_ENDPOINT)
    decoded = unwrap_response(_LIST_ENDPOINT, body)
    items = decoded if isinstance(decoded, list) else []
    _logger.debug("Vehicle list response decoded count=%d", len(items))
    return [Vehicle.model_validate(item) for item in items if isinstance(item, dict)]


async def fetch_vehicle(transport: Transport, vehicle_id: int) -> VehicleSnapshot:
    """Fetch the coarse state of one vehicle. Does not wake the vehicle."""
    endpoint = f"/api/1/vehicles/{vehicle_id}"
    body = await transport.request_json("GET", endpoint)
    decoded = unwrap_response(endpoint, body)
    if not isinstance(decoded, dict):
        raise ApiError(f"{endpoint} returned no vehicle", code="invalid_response", endpoint=endpoint)
    return VehicleSnapshot.model_validate(decoded)


async def send_wake_up(transport: Transport, vehicle_id: int) -> VehicleSnapshot:
    """Ask the vehicle to wake up and return the state it reports back."""
    endpoint = f"/api/1/vehicles/{vehicle_id}/wake_up"
    body = await transport.request_json("POST", endpoint)
    decoded = unwrap_response(endpoint, body)
    if not isinstance(decoded, dict):
        raise ApiError(f"{endpoint} returned no vehicle", code="invalid_response", endpoint=endpoint)
    return VehicleSnapshot.model_validate(decoded)
