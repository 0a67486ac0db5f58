import datetime as dt
from typing import Iterable

from crew_scheduling.models import DrydockWindow, PortCallWindow
from crew_scheduling.utils import UTC, localize, overlaps, shift_window


def is_window_allowed(day: dt.date, start: dt.time, end: dt.time, vessel_id: str,
                      port_calls: Iterable[PortCallWindow],
                      drydocks: Iterable[DrydockWindow],
                      tz: dt.tzinfo = UTC) -> bool:
    """Whether a shift window may be staffed on the given vessel.

    Port calls are checked first and win: crew are needed aboard while in port
    even if a dry-dock window overlaps the same shift. Without any matching
    window the shift is allowed.
    """
    shift_start, shift_end = shift_window(day, start, end, tz)

    # 1) Port call overlap -> allowed
    for port_call in port_calls:
        if port_call.vessel_id != vessel_id:
            continue
        if overlaps(shift_start, shift_end, localize(port_call.start, tz), localize(port_call.end, tz)):
            return True

    # 2) Dry-dock overlap -> vessel unavailable
    for drydock in drydocks:
        if drydock.vessel_id != vessel_id:
            continue
        if overlaps(shift_start, shift_end, localize(drydock.start, tz), localize(drydock.end, tz)):
            return False

    return True


def has_allowed_window(days: Iterable[dt.date], start: dt.time, end: dt.time, vessel_id: str,
                       port_calls, drydocks, tz: dt.tzinfo = UTC) -> bool:
    """True when at least one day in the horizon permits the shift."""
    return any(
        is_window_allowed(day, start, end, vessel_id, port_calls, drydocks, tz)
        for day in days
    )
