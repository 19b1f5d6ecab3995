"""Sleep-window timer math.

This module intentionally contains *no* I/O or logging. Every function
takes the current timer value and returns a new one, so the policy can be
checked tick by tick in isolation.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta
from enum import StrEnum

from teslagps.models.vehicle import CoarseState


@dataclasses.dataclass(frozen=True, slots=True)
class SleepTimers:
    """Expiry instants of the two mutually exclusive sleep windows.

    ``stay_awake_until``
        Set when the vehicle stops driving. Polling continues normally
        until it expires.
    ``try_to_sleep_until``
        Set when the stay-awake window expires. Drive-state polling is
        suppressed until it expires so the vehicle can fall asleep.

    At most one of them is set at any time.
    """

    stay_awake_until: datetime | None = None
    try_to_sleep_until: datetime | None = None

    def __post_init__(self) -> None:
        if self.stay_awake_until is not None and self.try_to_sleep_until is not None:
            raise ValueError("stay-awake and try-to-sleep windows cannot both be running")

    @property
    def idle(self) -> bool:
        return self.stay_awake_until is None and self.try_to_sleep_until is None


NO_TIMERS = SleepTimers()


class SleepDecision(StrEnum):
    PROCEED = "proceed"
    SKIP_ASLEEP = "skip_asleep"
    SKIP_SLEEP_WINDOW = "skip_sleep_window"

    @property
    def proceed(self) -> bool:
        return self is SleepDecision.PROCEED


def is_expired(now: datetime, expires_at: datetime | None) -> bool:
    return expires_at is not None and now > expires_at


def advance_timers(
    timers: SleepTimers,
    now: datetime,
    *,
    stay_awake: timedelta,
    try_sleep: timedelta,
) -> SleepTimers:
    """Apply window expirations for *now*.

    - An expired stay-awake window opens a try-to-sleep window.
    - An expired try-to-sleep window restarts the stay-awake window.
    """
    if is_expired(now, timers.stay_awake_until):
        timers = SleepTimers(try_to_sleep_until=now + try_sleep)
    if is_expired(now, timers.try_to_sleep_until):
        timers = SleepTimers(stay_awake_until=now + stay_awake)
    return timers


def decide(timers: SleepTimers, coarse_state: CoarseState) -> tuple[SleepTimers, SleepDecision]:
    """Verdict for a tick whose expirations were already applied.

    A sleeping vehicle clears both windows and is left alone; an active
    try-to-sleep window suppresses polling, with the accepted risk that a
    drive starting inside it is missed until it lapses.
    """
    if coarse_state is CoarseState.ASLEEP:
        return NO_TIMERS, SleepDecision.SKIP_ASLEEP
    if timers.try_to_sleep_until is not None:
        return timers, SleepDecision.SKIP_SLEEP_WINDOW
    return timers, SleepDecision.PROCEED


def start_stay_awake(timers: SleepTimers, now: datetime, duration: timedelta) -> SleepTimers:
    """Start the stay-awake countdown unless a window is already running."""
    if not timers.idle:
        return timers
    return SleepTimers(stay_awake_until=now + duration)
