"""Command-line entry point: stream a GPX track of the vehicle to stdout."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from collections.abc import Iterator, Sequence
from typing import TextIO

from pydantic import ValidationError

from teslagps.client import TeslaClient, VehicleClient
from teslagps.config import TrackerConfig
from teslagps.exceptions import ApiError, ClientInitError, ConfigError, TeslaGpsError, TransportError
from teslagps.gpx import TrackWriter
from teslagps.poller import PollLoop

_logger = logging.getLogger(__name__)

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tesla-gps",
        description="Write a GPX track of a Tesla to stdout while letting it sleep when parked",
    )
    parser.add_argument("--token", dest="token_path", help="path to token file")
    parser.add_argument("--wakeup", action="store_true", default=None, help="wake up the vehicle and keep it awake")
    parser.add_argument("--verbose", "-v", action="store_true", default=None, help="verbose logging to stderr")
    parser.add_argument(
        "--singleTrack",
        dest="single_track",
        action="store_true",
        default=None,
        help="don't open a new GPX track for each drive",
    )
    parser.add_argument("--vehicle-id", type=int, help="vehicle to follow (default: last vehicle of the account)")
    parser.add_argument("--base-url", help="owner API base URL")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("teslagps").setLevel(logging.DEBUG if verbose else logging.INFO)


async def select_vehicle(client: VehicleClient, vehicle_id: int | None) -> int:
    """Resolve the vehicle to follow, failing with :class:`ClientInitError`."""
    try:
        vehicles = await client.list_vehicles()
    except (TransportError, ApiError, ValidationError) as exc:
        raise ClientInitError(f"Couldn't list vehicles: {exc}") from exc
    if not vehicles:
        raise ClientInitError("No vehicles found for this account")

    if vehicle_id is None:
        chosen = vehicles[-1]
    else:
        matches = [vehicle for vehicle in vehicles if vehicle.id == vehicle_id]
        if not matches:
            raise ClientInitError(f"Vehicle {vehicle_id} is not part of this account")
        chosen = matches[0]
    _logger.debug("Following vehicle %s (%s)", chosen.id, chosen.display_name or "unnamed")
    return chosen.id


@contextlib.contextmanager
def _stop_on_signals(poller: PollLoop) -> Iterator[None]:
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in _STOP_SIGNALS:
        try:
            loop.add_signal_handler(sig, poller.request_stop)
        except (NotImplementedError, RuntimeError):
            # Platforms without loop signal support fall back to KeyboardInterrupt.
            continue
        installed.append(sig)
    try:
        yield
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


async def track(config: TrackerConfig, client: VehicleClient, stream: TextIO) -> int:
    """Follow one vehicle and stream its GPX track until stopped.

    The document footer is written on every exit path.
    """
    vehicle_id = await select_vehicle(client, config.vehicle_id)

    if config.wakeup:
        try:
            await client.wake(vehicle_id)
        except TeslaGpsError as exc:
            _logger.warning("Couldn't wake vehicle %s: %s", vehicle_id, exc)

    with TrackWriter(stream, single_track=config.single_track, creator=config.creator) as writer:
        poller = PollLoop(client, vehicle_id, writer, config)
        with _stop_on_signals(poller):
            await poller.run()
        _logger.debug("Stopped after %d track points", writer.points_written)
    return 0


async def _run(config: TrackerConfig, stream: TextIO) -> int:
    async with TeslaClient(config) as client:
        return await track(config, client, stream)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        config = TrackerConfig.from_env(
            token_path=args.token_path,
            wakeup=args.wakeup,
            verbose=args.verbose,
            single_track=args.single_track,
            vehicle_id=args.vehicle_id,
            base_url=args.base_url,
        )
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    _configure_logging(config.verbose)

    try:
        return asyncio.run(_run(config, sys.stdout))
    except (ConfigError, ClientInitError) as exc:
        print(exc, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
