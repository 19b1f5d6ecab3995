"""Tracker configuration for teslagps."""

from __future__ import annotations

import dataclasses
import os
from datetime import timedelta
from typing import Any

from teslagps._constants import (
    ASLEEP_BACKOFF_S,
    BASE_URL,
    GPX_CREATOR,
    PARKED_BACKOFF_S,
    STAY_AWAKE_AFTER_DRIVING,
    TICK_INTERVAL_S,
    TRY_TO_SLEEP,
)
from teslagps.exceptions import ConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Tracker configuration.

    Parameters
    ----------
    token_path : str
        Path to the file holding the owner-API access token.
    wakeup : bool
        Wake the vehicle at startup and keep polling drive state on every
        tick, ignoring the sleep windows.
    verbose : bool
        Emit diagnostic messages on stderr.
    single_track : bool
        Keep one GPX track segment for the whole process lifetime instead
        of opening a new one for every drive.
    vehicle_id : int or None
        Vehicle to follow. ``None`` picks the last vehicle the account lists.
    base_url : str
        Owner API base URL.
    tick_interval : float
        Seconds between two polling ticks.
    parked_backoff : float
        Extra seconds to wait after a tick that found the vehicle parked.
    asleep_backoff : float
        Extra seconds to wait after a tick that found the vehicle asleep.
    stay_awake_duration : timedelta
        How long polling continues normally after the vehicle stops driving.
    try_sleep_duration : timedelta
        How long drive-state polling is suppressed so the vehicle can sleep.
    creator : str
        ``creator`` attribute of the emitted ``<gpx>`` element.
    """

    token_path: str
    wakeup: bool = False
    verbose: bool = False
    single_track: bool = False
    vehicle_id: int | None = None
    base_url: str = BASE_URL
    tick_interval: float = TICK_INTERVAL_S
    parked_backoff: float = PARKED_BACKOFF_S
    asleep_backoff: float = ASLEEP_BACKOFF_S
    stay_awake_duration: timedelta = STAY_AWAKE_AFTER_DRIVING
    try_sleep_duration: timedelta = TRY_TO_SLEEP
    creator: str = GPX_CREATOR

    def __post_init__(self) -> None:
        if not self.token_path:
            raise ConfigError("--token must be specified")
        for name in ("tick_interval", "parked_backoff", "asleep_backoff"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from ``TESLAGPS_*`` environment variables.

        Explicit keyword arguments override environment values. Overrides
        set to ``None`` are ignored so argparse namespaces can be passed
        through unchanged.
        """
        env = os.environ
        overrides = {key: value for key, value in overrides.items() if value is not None}

        config_kwargs: dict[str, Any] = {}

        token_env = env.get("TESLAGPS_TOKEN")
        if token_env is not None:
            config_kwargs["token_path"] = token_env

        base_url_env = env.get("TESLAGPS_BASE_URL")
        if base_url_env is not None:
            config_kwargs["base_url"] = base_url_env.rstrip("/")

        vehicle_env = env.get("TESLAGPS_VEHICLE_ID")
        if vehicle_env is not None and "vehicle_id" not in overrides:
            try:
                config_kwargs["vehicle_id"] = int(vehicle_env)
            except ValueError as exc:
                raise ConfigError(f"TESLAGPS_VEHICLE_ID must be an integer, got {vehicle_env!r}") from exc

        _ENV_FLOAT_MAP = {
            "TESLAGPS_TICK_INTERVAL": "tick_interval",
            "TESLAGPS_PARKED_BACKOFF": "parked_backoff",
            "TESLAGPS_ASLEEP_BACKOFF": "asleep_backoff",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        _ENV_BOOL_MAP = {
            "TESLAGPS_WAKEUP": "wakeup",
            "TESLAGPS_VERBOSE": "verbose",
            "TESLAGPS_SINGLE_TRACK": "single_track",
        }
        for env_key, field_name in _ENV_BOOL_MAP.items():
            if field_name not in overrides:
                config_kwargs[field_name] = _env_bool(env.get(env_key), False)

        config_kwargs.update(overrides)
        config_kwargs.setdefault("token_path", "")

        return cls(**config_kwargs)
