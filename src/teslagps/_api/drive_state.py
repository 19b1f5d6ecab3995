"""Drive-state endpoint.

Endpoint:
  - GET /api/1/vehicles/{id}/vehicle_data?endpoints=drive_state;location_data

Newer firmware only reports coordinates when ``location_data`` is
requested alongside ``drive_state``.
"""

from __future__ import annotations

from teslagps._api._common import unwrap_response
from teslagps._transport import Transport
from teslagps.exceptions import ApiError
from teslagps.models.drive_state import DriveState

_ENDPOINTS_PARAM = "drive_state;location_data"


async def fetch_drive_state(transport: Transport, vehicle_id: int) -> DriveState:
    """Fetch position and gear state. Keeps the vehicle awake."""
    endpoint = f"/api/1/vehicles/{vehicle_id}/vehicle_data"
    body = await transport.request_json("GET", endpoint, params={"endpoints": _ENDPOINTS_PARAM})
    decoded = unwrap_response(endpoint, body)
    if not isinstance(decoded, dict) or not isinstance(decoded.get("drive_state"), dict):
        raise ApiError(f"{endpoint} returned no drive_state", code="invalid_response", endpoint=endpoint)
    return DriveState.model_validate(decoded["drive_state"])
