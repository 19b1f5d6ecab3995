"""Per-tick sleep coordination."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Protocol

from teslagps._constants import STAY_AWAKE_AFTER_DRIVING, TRY_TO_SLEEP
from teslagps.models.vehicle import CoarseState
from teslagps.state.policy import SleepDecision, SleepTimers, advance_timers, decide

_logger = logging.getLogger(__name__)


class HasTimers(Protocol):
    timers: SleepTimers


class SleepCoordinator:
    """Decides whether a tick may fetch drive telemetry.

    Must be evaluated exactly once per tick, before any telemetry fetch.
    Window expirations are applied even on ticks that end up skipped so
    the cycle advances without telemetry.

    With ``force_awake`` (the ``--wakeup`` mode) every tick proceeds and
    the timers are never touched.
    """

    def __init__(
        self,
        *,
        force_awake: bool = False,
        stay_awake_duration: timedelta = STAY_AWAKE_AFTER_DRIVING,
        try_sleep_duration: timedelta = TRY_TO_SLEEP,
    ) -> None:
        self.force_awake = force_awake
        self.stay_awake_duration = stay_awake_duration
        self.try_sleep_duration = try_sleep_duration

    def evaluate(self, state: HasTimers, now: datetime, coarse_state: CoarseState) -> SleepDecision:
        if self.force_awake:
            return SleepDecision.PROCEED

        before = state.timers
        advanced = advance_timers(
            before,
            now,
            stay_awake=self.stay_awake_duration,
            try_sleep=self.try_sleep_duration,
        )
        if before.stay_awake_until is not None and advanced.try_to_sleep_until is not None:
            _logger.debug(
                "Stay-awake window expired. Letting the vehicle try to sleep until %s.",
                advanced.try_to_sleep_until,
            )
        elif before.try_to_sleep_until is not None and advanced.stay_awake_until is not None:
            _logger.debug("Try-to-sleep window expired. Restarting the stay-awake window.")

        timers, decision = decide(advanced, coarse_state)
        state.timers = timers

        if decision is SleepDecision.SKIP_ASLEEP:
            _logger.debug("Vehicle is asleep. Not polling drive state until it wakes up.")
        elif decision is SleepDecision.SKIP_SLEEP_WINDOW:
            _logger.debug(
                "Waiting for the vehicle to fall asleep. A drive starting before %s may be missed.",
                timers.try_to_sleep_until,
            )
        return decision
