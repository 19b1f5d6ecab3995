"""Tests for the command-line entry point."""

from __future__ import annotations

import asyncio
import dataclasses
import io
import os
import signal
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest
from conftest import FakeVehicleClient, drive

from teslagps.cli import main, select_vehicle, track
from teslagps.client import TeslaClient
from teslagps.config import TrackerConfig
from teslagps.exceptions import ClientInitError, TransportError
from teslagps.models.vehicle import Vehicle

_NS = "{http://www.topografix.com/GPX/1/1}"


@pytest.fixture(autouse=True)
def _no_env_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TESLAGPS_TOKEN", raising=False)


def test_missing_token_exits_nonzero(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    captured = capsys.readouterr()
    assert "--token must be specified" in captured.err
    assert captured.out == ""


def test_unreadable_token_exits_nonzero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--token", str(tmp_path / "missing.json")]) == 1
    captured = capsys.readouterr()
    assert "Cannot read token file" in captured.err
    assert captured.out == ""


# ------------------------------------------------------------------
# Vehicle selection
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_select_vehicle_defaults_to_last(fake_client: FakeVehicleClient) -> None:
    fake_client.vehicles = [Vehicle(id=1), Vehicle(id=2)]
    assert await select_vehicle(fake_client, None) == 2
    assert await select_vehicle(fake_client, 1) == 1


@pytest.mark.asyncio
async def test_select_vehicle_unknown_id(fake_client: FakeVehicleClient) -> None:
    with pytest.raises(ClientInitError, match="not part of this account"):
        await select_vehicle(fake_client, 7)


@pytest.mark.asyncio
async def test_select_vehicle_empty_account(fake_client: FakeVehicleClient) -> None:
    fake_client.vehicles = []
    with pytest.raises(ClientInitError, match="No vehicles"):
        await select_vehicle(fake_client, None)


@pytest.mark.asyncio
async def test_select_vehicle_list_failure() -> None:
    class _Broken(FakeVehicleClient):
        async def list_vehicles(self) -> list[Vehicle]:
            raise TransportError("down")

    with pytest.raises(ClientInitError, match="Couldn't list vehicles"):
        await select_vehicle(_Broken(), None)


# ------------------------------------------------------------------
# track()
# ------------------------------------------------------------------


async def _wait_for_calls(client: FakeVehicleClient, name: str, count: int) -> None:
    while client.calls.get(name, 0) < count:
        await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_track_closes_document_when_cancelled(fake_client: FakeVehicleClient, config: TrackerConfig) -> None:
    fake_client.drive_states = [drive("D", 1, 1, 1), drive("D", 1, 1, 2), drive("D", 1, 1, 3)]
    out = io.StringIO()

    task = asyncio.create_task(track(dataclasses.replace(config, tick_interval=0.001), fake_client, out))
    await asyncio.wait_for(_wait_for_calls(fake_client, "get_drive_state", 5), timeout=2.0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    root = ET.fromstring(out.getvalue())
    assert len(root.findall(f".//{_NS}trkpt")) == 3
    assert out.getvalue().endswith("</trkseg>\n</trk>\n</gpx>\n")


@pytest.mark.asyncio
async def test_track_wakes_vehicle_and_tolerates_wake_failure(
    fake_client: FakeVehicleClient,
    config: TrackerConfig,
) -> None:
    fake_client.wake_error = TransportError("down")
    out = io.StringIO()

    task = asyncio.create_task(
        track(dataclasses.replace(config, wakeup=True, tick_interval=0.001), fake_client, out)
    )
    await asyncio.wait_for(_wait_for_calls(fake_client, "get_drive_state", 2), timeout=2.0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert fake_client.calls["wake"] == 1


class _MalformedWakeTransport:
    """Owner API where the vehicle sleeps and wake_up answers without a vehicle id."""

    def __init__(self) -> None:
        self.requests: list[str] = []

    async def request_json(self, method: str, endpoint: str, *, params: dict[str, str] | None = None) -> dict:
        self.requests.append(endpoint)
        await asyncio.sleep(0)
        if endpoint == "/api/1/vehicles":
            return {"response": [{"id": 42, "state": "asleep"}]}
        if endpoint.endswith("/wake_up"):
            return {"response": {"state": "waking"}}
        return {"response": {"id": 42, "state": "asleep"}}


@pytest.mark.asyncio
async def test_track_tolerates_malformed_wake_response(config: TrackerConfig) -> None:
    transport = _MalformedWakeTransport()
    out = io.StringIO()

    async def _polled_twice() -> None:
        while transport.requests.count("/api/1/vehicles/42") < 2:
            await asyncio.sleep(0.005)

    async with TeslaClient(config, transport=transport) as client:
        task = asyncio.create_task(
            track(dataclasses.replace(config, wakeup=True, tick_interval=0.001), client, out)
        )
        await asyncio.wait_for(_polled_twice(), timeout=2.0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert "/api/1/vehicles/42/wake_up" in transport.requests
    assert out.getvalue().endswith("</gpx>\n")


@pytest.mark.asyncio
async def test_track_stops_on_sigterm(fake_client: FakeVehicleClient, config: TrackerConfig) -> None:
    out = io.StringIO()
    single = dataclasses.replace(config, single_track=True, tick_interval=0.001)

    task = asyncio.create_task(track(single, fake_client, out))
    await asyncio.wait_for(_wait_for_calls(fake_client, "get_vehicle", 2), timeout=2.0)
    if signal.getsignal(signal.SIGTERM) is signal.SIG_DFL:
        task.cancel()
        pytest.skip("event loop signal handlers unavailable")
    os.kill(os.getpid(), signal.SIGTERM)

    assert await asyncio.wait_for(task, timeout=2.0) == 0
    text = out.getvalue()
    assert text.count("<trkseg>") == 1
    assert text.endswith("</trkseg>\n</trk>\n</gpx>\n")
