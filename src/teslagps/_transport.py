"""HTTP transport for the owner API with bearer-token authentication."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from teslagps._constants import USER_AGENT
from teslagps._redact import redact_for_log
from teslagps.exceptions import ApiError, AuthenticationError, TransportError, VehicleUnavailableError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        ...


class HttpTransport:
    """aiohttp transport that authenticates every request with a bearer token."""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_session
        self._headers: dict[str, str] = {
            "accept": "application/json",
            "authorization": f"Bearer {access_token}",
            "user-agent": USER_AGENT,
        }

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON object.

        Raises
        ------
        AuthenticationError
            The token was rejected (HTTP 401).
        VehicleUnavailableError
            The vehicle is asleep or unreachable (HTTP 408).
        ApiError
            Any other non-2xx answer that carries an ``error`` field.
        TransportError
            Network failure or timeout, unexpected status, or a body that is not
            a JSON object in the declared encoding.
        """
        url = f"{self._base_url}{endpoint}"
        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(method, url, params=params, headers=self._headers) as resp:
                status = resp.status
                text = await resp.text()
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TransportError(
                f"Request to {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc
        except UnicodeDecodeError as exc:
            raise TransportError(
                f"Undecodable body from {endpoint}: {exc}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        try:
            body: Any = json.loads(text) if text else {}
        except json.JSONDecodeError as exc:
            if status >= 300:
                raise TransportError(
                    f"HTTP {status} from {endpoint}: {text[:200]}",
                    status_code=status,
                    endpoint=endpoint,
                ) from exc
            raise TransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("%s %s -> %d %s", method, endpoint, status, redact_for_log(body))

        if status >= 300:
            _raise_for_status(endpoint, status, body)

        if not isinstance(body, dict):
            raise TransportError(
                f"Expected a JSON object from {endpoint}",
                status_code=status,
                endpoint=endpoint,
            )
        return body


def _raise_for_status(endpoint: str, status: int, body: Any) -> None:
    message = ""
    if isinstance(body, dict):
        message = str(body.get("error") or body.get("error_description") or "")
    detail = f"HTTP {status} from {endpoint}" + (f": {message}" if message else "")

    if status == 401:
        raise AuthenticationError(detail, code=str(status), endpoint=endpoint)
    if status == 408:
        raise VehicleUnavailableError(detail, code=str(status), endpoint=endpoint)
    if message:
        raise ApiError(detail, code=str(status), endpoint=endpoint)
    raise TransportError(detail, status_code=status, endpoint=endpoint)
