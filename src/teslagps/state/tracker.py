"""Turns drive-state samples into track-log side effects."""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timedelta
from typing import Protocol

from teslagps._constants import STAY_AWAKE_AFTER_DRIVING
from teslagps.gpx import TrackWriter
from teslagps.models.drive_state import DriveState
from teslagps.state.policy import NO_TIMERS, SleepTimers, start_stay_awake

_logger = logging.getLogger(__name__)


class TrackerState(Protocol):
    timers: SleepTimers
    previous: DriveState | None


@dataclasses.dataclass(frozen=True, slots=True)
class TrackOutcome:
    """What processing one sample did."""

    is_driving: bool
    emitted_point: bool = False
    duplicate: bool = False
    segment_opened: bool = False
    segment_closed: bool = False


class DriveTracker:
    """Detects driving edges, deduplicates positions and drives the writer.

    Outside single-track mode a segment is opened on every
    non-driving → driving edge (before the first point of the drive) and
    closed on every driving → non-driving edge. Any non-driving sample
    starts the stay-awake countdown when no window is running; a driving
    sample cancels whatever window is running.
    """

    def __init__(
        self,
        writer: TrackWriter,
        *,
        stay_awake_duration: timedelta = STAY_AWAKE_AFTER_DRIVING,
    ) -> None:
        self._writer = writer
        self._stay_awake_duration = stay_awake_duration

    @property
    def single_track(self) -> bool:
        return self._writer.single_track

    def process(self, drive_state: DriveState, state: TrackerState, now: datetime) -> TrackOutcome:
        previous = state.previous
        was_driving = previous is not None and previous.is_driving
        try:
            if drive_state.is_driving:
                return self._process_driving(drive_state, previous if was_driving else None, state)
            return self._process_parked(was_driving, state, now)
        finally:
            state.previous = drive_state

    def _process_driving(
        self,
        drive_state: DriveState,
        previous_driving: DriveState | None,
        state: TrackerState,
    ) -> TrackOutcome:
        opened = False
        if previous_driving is None and not self.single_track:
            _logger.info("Vehicle became active. Opening GPX track.")
            opened = self._writer.open_segment()

        if not state.timers.idle:
            _logger.debug("Vehicle is driving. Stopping sleep timers.")
            state.timers = NO_TIMERS

        if previous_driving is not None and previous_driving.position_key() == drive_state.position_key():
            return TrackOutcome(is_driving=True, duplicate=True, segment_opened=opened)

        if not drive_state.has_position:
            _logger.debug("Drive state carries no position; nothing to write.")
            return TrackOutcome(is_driving=True, segment_opened=opened)

        self._writer.write_point(drive_state)
        return TrackOutcome(is_driving=True, emitted_point=True, segment_opened=opened)

    def _process_parked(self, was_driving: bool, state: TrackerState, now: datetime) -> TrackOutcome:
        closed = False
        if was_driving and not self.single_track:
            _logger.info("Vehicle became inactive. Closing GPX track.")
            closed = self._writer.close_segment()

        timers = start_stay_awake(state.timers, now, self._stay_awake_duration)
        if timers is not state.timers:
            _logger.debug("Vehicle is inactive. Stay-awake window runs until %s.", timers.stay_awake_until)
            state.timers = timers
        return TrackOutcome(is_driving=False, segment_closed=closed)
