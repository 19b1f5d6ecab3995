"""Internal constants shared across the library."""

from datetime import timedelta

BASE_URL = "https://owner-api.teslamotors.com"
USER_AGENT = "teslagps/0.1"

GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"
GPX_CREATOR = "Created by teslagps"

# ------------------------------------------------------------------
# Polling cadence
# ------------------------------------------------------------------

TICK_INTERVAL_S: float = 0.9
PARKED_BACKOFF_S: float = 4.0
ASLEEP_BACKOFF_S: float = 30.0

# ------------------------------------------------------------------
# Sleep coordination windows
# ------------------------------------------------------------------

#: Polling continues normally for this long after the vehicle stops driving.
STAY_AWAKE_AFTER_DRIVING = timedelta(minutes=30)
#: Drive-state polling is suppressed for this long so the vehicle can sleep.
TRY_TO_SLEEP = timedelta(minutes=15)

#: Shift states the tracker treats as "driving".
DRIVING_SHIFT_STATES: frozenset[str] = frozenset({"D", "R", "N"})
