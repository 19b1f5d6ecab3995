"""The polling loop tying the vehicle client, sleep coordination and tracking together."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum

from teslagps.client import VehicleClient
from teslagps.config import TrackerConfig
from teslagps.exceptions import VehicleFetchError
from teslagps.gpx import TrackWriter
from teslagps.models.drive_state import DriveState
from teslagps.state.policy import SleepDecision, SleepTimers
from teslagps.state.sleep import SleepCoordinator
from teslagps.state.tracker import DriveTracker

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclasses.dataclass
class PollState:
    """Everything the loop carries from one tick to the next."""

    timers: SleepTimers = dataclasses.field(default_factory=SleepTimers)
    previous: DriveState | None = None


class TickOutcome(StrEnum):
    PROCEEDING_DRIVING = "proceeding_driving"
    PROCEEDING_NOT_DRIVING = "proceeding_not_driving"
    SKIPPED_BY_SLEEP_WINDOW = "skipped_by_sleep_window"
    SKIPPED_BY_ASLEEP = "skipped_by_asleep"
    FETCH_ERROR = "fetch_error"


_SKIP_OUTCOMES: dict[SleepDecision, TickOutcome] = {
    SleepDecision.SKIP_ASLEEP: TickOutcome.SKIPPED_BY_ASLEEP,
    SleepDecision.SKIP_SLEEP_WINDOW: TickOutcome.SKIPPED_BY_SLEEP_WINDOW,
}


class PollLoop:
    """Fixed-interval cooperative poll loop for one vehicle.

    Each tick reads the coarse state (which lets the vehicle sleep), asks
    the :class:`SleepCoordinator` whether drive state may be fetched, and
    hands the fetched sample to the :class:`DriveTracker`. Failed reads
    skip the tick; the tick cadence itself is the retry mechanism.

    :meth:`request_stop` may be called at any time (e.g. from a signal
    handler). Waits are interrupted immediately; an API call already in
    flight is allowed to finish.
    """

    def __init__(
        self,
        client: VehicleClient,
        vehicle_id: int,
        writer: TrackWriter,
        config: TrackerConfig,
        *,
        state: PollState | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._vehicle_id = vehicle_id
        self._config = config
        self._clock = clock
        self.state = state if state is not None else PollState()
        self.coordinator = SleepCoordinator(
            force_awake=config.wakeup,
            stay_awake_duration=config.stay_awake_duration,
            try_sleep_duration=config.try_sleep_duration,
        )
        self.tracker = DriveTracker(writer, stay_awake_duration=config.stay_awake_duration)
        self._stop = asyncio.Event()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> None:
        self._stop.set()

    async def _pause(self, seconds: float) -> None:
        """Sleep for *seconds* unless a stop is requested first."""
        if seconds <= 0 or self._stop.is_set():
            return
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except TimeoutError:
            pass

    def _backoff_after(self, outcome: TickOutcome) -> float:
        if outcome is TickOutcome.PROCEEDING_NOT_DRIVING:
            return self._config.parked_backoff
        if outcome is TickOutcome.SKIPPED_BY_ASLEEP:
            return self._config.asleep_backoff
        return 0.0

    async def tick(self) -> TickOutcome:
        """Run one polling step without the surrounding waits."""
        try:
            snapshot = await self._client.get_vehicle(self._vehicle_id)
        except VehicleFetchError as exc:
            _logger.warning("%s", exc)
            return TickOutcome.FETCH_ERROR
        _logger.debug("Vehicle state %s", snapshot.coarse_state)

        decision = self.coordinator.evaluate(self.state, self._clock(), snapshot.coarse_state)
        if not decision.proceed:
            return _SKIP_OUTCOMES[decision]

        try:
            drive_state = await self._client.get_drive_state(self._vehicle_id)
        except VehicleFetchError as exc:
            # Happens occasionally while the vehicle wakes up.
            _logger.debug("%s", exc)
            return TickOutcome.FETCH_ERROR
        _logger.debug("Shift state %s", drive_state.shift_state)

        outcome = self.tracker.process(drive_state, self.state, self._clock())
        if outcome.is_driving:
            return TickOutcome.PROCEEDING_DRIVING
        return TickOutcome.PROCEEDING_NOT_DRIVING

    async def run(self, *, max_ticks: int | None = None) -> int:
        """Poll until :meth:`request_stop` is called (or *max_ticks* ran).

        Returns the number of ticks executed.
        """
        ticks = 0
        while not self._stop.is_set():
            if max_ticks is not None and ticks >= max_ticks:
                break
            await self._pause(self._config.tick_interval)
            if self._stop.is_set():
                break
            outcome = await self.tick()
            ticks += 1
            await self._pause(self._backoff_after(outcome))
        return ticks
