"""Shared helpers for owner-API endpoint modules.

It is internal to teslagps and may change at any time.
"""

from __future__ import annotations

from typing import Any

from teslagps.exceptions import ApiError


def unwrap_response(endpoint: str, body: dict[str, Any]) -> Any:
    """Return the ``response`` member of an owner-API body.

    Bodies carrying an ``error`` member (with a 2xx status) are turned
    into :class:`ApiError`.
    """
    error = body.get("error")
    if error:
        raise ApiError(f"{endpoint} failed: {error}", code="error", endpoint=endpoint)
    if "response" not in body:
        raise ApiError(f"{endpoint} answered without a 'response' member", code="no_response", endpoint=endpoint)
    return body["response"]
